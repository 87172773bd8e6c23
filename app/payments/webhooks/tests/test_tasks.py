"""
Tests for payment Celery tasks.

Tests cover:
- redispatch_webhook_event task
- retry_failed_webhooks task
- cleanup_stuck_webhooks task
"""

from datetime import timedelta
from unittest.mock import patch
from uuid import uuid4

import pytest
from django.utils import timezone
from freezegun import freeze_time

from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.tasks import (
    STUCK_PROCESSING_THRESHOLD_MINUTES,
    cleanup_stuck_webhooks,
    redispatch_webhook_event,
    retry_failed_webhooks,
)
from payments.tests.factories import WebhookEventFactory
from registrations.state_machines import PaymentStatus


# =============================================================================
# redispatch_webhook_event Tests
# =============================================================================


@pytest.mark.django_db
class TestRedispatchWebhookEvent:
    """Tests for the redispatch_webhook_event task."""

    def test_failed_event_settles_entry(self, failed_webhook_event, entry):
        result = redispatch_webhook_event(str(failed_webhook_event.id))

        assert result["status"] == "processed"
        assert result["stripe_event_id"] == failed_webhook_event.stripe_event_id
        failed_webhook_event.refresh_from_db()
        assert failed_webhook_event.status == WebhookEventStatus.PROCESSED
        assert failed_webhook_event.retry_count == 2
        entry.refresh_from_db()
        assert entry.payment_status == PaymentStatus.PAID

    def test_skip_already_processed_event(self, processed_webhook_event):
        with patch("payments.webhooks.handlers.dispatch_webhook") as mock_dispatch:
            result = redispatch_webhook_event(str(processed_webhook_event.id))

        assert result["status"] == "already_processed"
        mock_dispatch.assert_not_called()

    def test_missing_event(self):
        result = redispatch_webhook_event(str(uuid4()))

        assert result["status"] == "not_found"

    def test_handler_failure_reported(self, failed_webhook_event):
        with patch(
            "payments.webhooks.handlers.dispatch_webhook",
            side_effect=RuntimeError("still down"),
        ):
            result = redispatch_webhook_event(str(failed_webhook_event.id))

        assert result["status"] == "handler_failed"
        failed_webhook_event.refresh_from_db()
        assert failed_webhook_event.status == WebhookEventStatus.FAILED


# =============================================================================
# retry_failed_webhooks Tests
# =============================================================================


@pytest.mark.django_db
class TestRetryFailedWebhooks:
    """Tests for the retry_failed_webhooks periodic task."""

    def test_queues_failed_events_below_limit(self, settings):
        settings.WEBHOOK_MAX_RETRIES = 3
        retryable = WebhookEventFactory(failed=True, retry_count=2)
        WebhookEventFactory(failed=True, retry_count=3)  # exhausted
        WebhookEventFactory()  # pending
        WebhookEventFactory(processed=True)

        with patch("payments.tasks.redispatch_webhook_event.delay") as mock_delay:
            result = retry_failed_webhooks()

        assert result == {"queued_count": 1}
        mock_delay.assert_called_once_with(str(retryable.id))

    def test_nothing_to_retry(self):
        with patch("payments.tasks.redispatch_webhook_event.delay") as mock_delay:
            result = retry_failed_webhooks()

        assert result == {"queued_count": 0}
        mock_delay.assert_not_called()


# =============================================================================
# cleanup_stuck_webhooks Tests
# =============================================================================


@pytest.mark.django_db
class TestCleanupStuckWebhooks:
    """Tests for the cleanup_stuck_webhooks periodic task."""

    def test_resets_old_processing_events(self):
        long_ago = timezone.now() - timedelta(minutes=STUCK_PROCESSING_THRESHOLD_MINUTES + 5)
        with freeze_time(long_ago):
            stuck = WebhookEventFactory(status=WebhookEventStatus.PROCESSING, retry_count=1)
        recent = WebhookEventFactory(status=WebhookEventStatus.PROCESSING, retry_count=1)

        result = cleanup_stuck_webhooks()

        assert result == {"reset_count": 1}
        stuck.refresh_from_db()
        recent.refresh_from_db()
        assert stuck.status == WebhookEventStatus.FAILED
        assert "timed out" in stuck.error_message
        assert recent.status == WebhookEventStatus.PROCESSING

    def test_reset_event_is_picked_up_by_retry(self):
        long_ago = timezone.now() - timedelta(hours=2)
        with freeze_time(long_ago):
            WebhookEventFactory(status=WebhookEventStatus.PROCESSING, retry_count=1)

        cleanup_stuck_webhooks()

        with patch("payments.tasks.redispatch_webhook_event.delay") as mock_delay:
            retry_failed_webhooks()

        assert mock_delay.call_count == 1
        assert WebhookEvent.objects.filter(status=WebhookEventStatus.FAILED).count() == 1
