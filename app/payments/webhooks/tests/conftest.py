"""
Pytest fixtures for webhook tests.

Provides WebhookEvent objects in each processing state and stored
checkout.session.completed events for a given entry.
"""

import pytest

from payments.tests.factories import WebhookEventFactory, checkout_completed_event


@pytest.fixture
def completed_webhook_event(entry):
    """Pending checkout.session.completed event naming the entry."""
    event = checkout_completed_event(entry_id=entry.id)
    return WebhookEventFactory(stripe_event_id=event["id"], payload=event)


@pytest.fixture
def pending_webhook_event(db):
    return WebhookEventFactory()


@pytest.fixture
def processed_webhook_event(db):
    return WebhookEventFactory(processed=True)


@pytest.fixture
def failed_webhook_event(entry):
    """Failed first attempt for a completed checkout of the entry."""
    event = checkout_completed_event(entry_id=entry.id)
    return WebhookEventFactory(stripe_event_id=event["id"], payload=event, failed=True)
