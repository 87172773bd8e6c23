"""
Pytest fixtures shared by the payments test packages.

Used by payments/tests, services/tests, webhooks/tests and adapters/tests.
Stripe is never called: checkout session creation is patched at the SDK,
and webhooks are signed locally with the configured secret.

Usage:
    def test_checkout(entry, participant, mock_stripe_checkout):
        session = CheckoutService.create_checkout(entry.id, caller=participant)
        assert session.session_id == "cs_test_123"
"""

import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from django.test import Client
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from payments.tests.factories import stripe_signature
from registrations.tests.factories import EntryFactory
from tournaments.tests.factories import CategoryFactory

WEBHOOK_SECRET = "whsec_test_secret"


# =============================================================================
# Registration Fixtures
# =============================================================================


@pytest.fixture
def participant(db):
    """The user who registered the entry."""
    return UserFactory()


@pytest.fixture
def organizer(db):
    """The user hosting the tournament."""
    return UserFactory()


@pytest.fixture
def category(organizer):
    """Category with a 25.00 fee in an open tournament run by organizer."""
    return CategoryFactory(tournament__organizer=organizer)


@pytest.fixture
def entry(participant, category):
    """Pending, unpaid entry."""
    return EntryFactory(created_by=participant, category=category)


@pytest.fixture
def client_for():
    """Build an API client authenticated as any user."""

    def _client_for(user):
        client = APIClient()
        token = RefreshToken.for_user(user).access_token
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _client_for


# =============================================================================
# Stripe Fixtures
# =============================================================================


@pytest.fixture
def mock_stripe_checkout():
    """Mock stripe.checkout.Session with a successful create."""
    with (
        patch("stripe.RequestsClient"),
        patch("stripe.checkout.Session") as mock,
    ):
        mock.create.return_value = SimpleNamespace(
            id="cs_test_123",
            url="https://checkout.stripe.com/c/pay/cs_test_123",
        )
        yield mock


@pytest.fixture
def webhook_secret(settings):
    """Configure the webhook signing secret."""
    settings.STRIPE_WEBHOOK_SECRET = WEBHOOK_SECRET
    return WEBHOOK_SECRET


@pytest.fixture
def post_webhook(webhook_secret):
    """
    POST a Stripe event to the webhook endpoint.

    The body is signed with the configured secret unless a signature
    header (or None, for no header) is passed explicitly.
    """
    client = Client()
    url = reverse("payments:stripe_webhook")
    unset = object()

    def _post(event, signature=unset, body: bytes | None = None):
        raw = body if body is not None else json.dumps(event).encode()
        if signature is unset:
            signature = stripe_signature(raw, webhook_secret)
        headers = {"HTTP_STRIPE_SIGNATURE": signature} if signature else {}
        return client.post(url, data=raw, content_type="application/json", **headers)

    return _post
