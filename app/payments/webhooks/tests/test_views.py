"""
Tests for the Stripe webhook endpoint.

Requests are signed with the real Stripe v1 scheme, so these tests run
stripe.Webhook.construct_event end to end.

Tests cover:
- Signature verification and zero writes on rejection
- Event storage and duplicate delivery
- Settlement through the endpoint
- Acknowledgement when the handler fails
- 503 when the event cannot be recorded
"""

import json
import time
from unittest.mock import patch

import pytest
from django.db import OperationalError

from core.services import ServiceResult
from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.tests.factories import checkout_completed_event, stripe_signature
from registrations.models import Entry
from registrations.state_machines import EntryStatus, PaymentStatus


def entry_snapshot(entry):
    return Entry.objects.filter(pk=entry.pk).values().get()


# =============================================================================
# Signature Verification Tests
# =============================================================================


@pytest.mark.django_db
class TestStripeWebhookSignature:
    """Rejected requests return 400 and write nothing."""

    def test_missing_signature_returns_400(self, post_webhook, entry):
        before = entry_snapshot(entry)

        response = post_webhook(checkout_completed_event(entry_id=entry.id), signature=None)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing Stripe-Signature header"}
        assert entry_snapshot(entry) == before
        assert WebhookEvent.objects.count() == 0

    def test_tampered_body_returns_400(self, post_webhook, webhook_secret, entry):
        """
        Given a completed event for the entry, signed by Stripe
        When the body is altered after signing
        Then the request is rejected and neither the entry nor the event log changes
        """
        event = checkout_completed_event(entry_id=entry.id)
        original = json.dumps(event).encode()
        signature = stripe_signature(original, webhook_secret)
        event["data"]["object"]["metadata"]["entry_id"] = "00000000-0000-0000-0000-000000000000"
        before = entry_snapshot(entry)

        response = post_webhook(
            event, signature=signature, body=json.dumps(event).encode()
        )

        assert response.status_code == 400
        assert "error" in response.json()
        assert entry_snapshot(entry) == before
        assert WebhookEvent.objects.count() == 0

    def test_wrong_secret_returns_400(self, post_webhook, entry):
        event = checkout_completed_event(entry_id=entry.id)
        body = json.dumps(event).encode()

        response = post_webhook(
            event, signature=stripe_signature(body, "whsec_attacker"), body=body
        )

        assert response.status_code == 400
        entry.refresh_from_db()
        assert entry.payment_status == PaymentStatus.UNPAID

    def test_replayed_old_signature_returns_400(self, post_webhook, webhook_secret, entry):
        event = checkout_completed_event(entry_id=entry.id)
        body = json.dumps(event).encode()
        stale = stripe_signature(body, webhook_secret, timestamp=int(time.time()) - 3600)

        response = post_webhook(event, signature=stale, body=body)

        assert response.status_code == 400

    def test_get_is_not_allowed(self, client):
        response = client.get("/api/v1/payments/webhooks/stripe/")

        assert response.status_code == 405


# =============================================================================
# Event Handling Tests
# =============================================================================


@pytest.mark.django_db
class TestStripeWebhookEvents:
    def test_completed_event_settles_entry(self, post_webhook, entry):
        event = checkout_completed_event(entry_id=entry.id)

        response = post_webhook(event)

        assert response.status_code == 200
        assert response.json() == {"received": True}
        entry.refresh_from_db()
        assert entry.payment_status == PaymentStatus.PAID
        assert entry.status == EntryStatus.ACCEPTED
        webhook = WebhookEvent.objects.get(stripe_event_id=event["id"])
        assert webhook.status == WebhookEventStatus.PROCESSED
        assert webhook.payload == event

    def test_duplicate_delivery_is_acknowledged_once(self, post_webhook, entry):
        event = checkout_completed_event(entry_id=entry.id)
        post_webhook(event)
        entry.refresh_from_db()
        first_paid_at = entry.paid_at

        with patch("payments.webhooks.views.process_webhook_event") as mock_process:
            response = post_webhook(event)

        assert response.status_code == 200
        assert response.json() == {"received": True}
        mock_process.assert_not_called()
        entry.refresh_from_db()
        assert entry.paid_at == first_paid_at
        assert WebhookEvent.objects.filter(stripe_event_id=event["id"]).count() == 1

    def test_same_payment_in_new_event_is_a_no_op(self, post_webhook, entry):
        post_webhook(checkout_completed_event(entry_id=entry.id))
        entry.refresh_from_db()
        first_paid_at = entry.paid_at

        response = post_webhook(checkout_completed_event(entry_id=entry.id))

        assert response.status_code == 200
        entry.refresh_from_db()
        assert entry.paid_at == first_paid_at

    def test_irrelevant_event_type_is_acknowledged(self, post_webhook, entry):
        event = {
            "id": "evt_payment_intent",
            "type": "payment_intent.created",
            "data": {"object": {"id": "pi_1", "metadata": {"entry_id": str(entry.id)}}},
        }

        response = post_webhook(event)

        assert response.status_code == 200
        entry.refresh_from_db()
        assert entry.payment_status == PaymentStatus.UNPAID

    def test_missing_entry_id_is_acknowledged(self, post_webhook, entry):
        response = post_webhook(checkout_completed_event(metadata={}))

        assert response.status_code == 200
        entry.refresh_from_db()
        assert entry.payment_status == PaymentStatus.UNPAID

    def test_signed_event_without_id_or_type_returns_400(self, post_webhook):
        response = post_webhook({"object": "event"})

        assert response.status_code == 400
        assert WebhookEvent.objects.count() == 0

    def test_handler_failure_still_acknowledged(self, post_webhook, entry):
        """
        Given the entry store fails while the handler runs
        When Stripe delivers the completed event
        Then Stripe still gets its acknowledgement and the event is left failed
        for the retry task
        """
        event = checkout_completed_event(entry_id=entry.id)

        with patch(
            "payments.webhooks.handlers.EntrySettlementService.settle",
            return_value=ServiceResult.failure("Entry store unavailable", "STORAGE_UNAVAILABLE"),
        ):
            response = post_webhook(event)

        assert response.status_code == 200
        assert response.json() == {"received": True}
        webhook = WebhookEvent.objects.get(stripe_event_id=event["id"])
        assert webhook.status == WebhookEventStatus.FAILED
        assert webhook.can_retry

    def test_failed_event_is_retried_on_redelivery(self, post_webhook, entry):
        event = checkout_completed_event(entry_id=entry.id)
        with patch(
            "payments.webhooks.handlers.EntrySettlementService.settle",
            side_effect=RuntimeError("boom"),
        ):
            post_webhook(event)

        response = post_webhook(event)

        assert response.status_code == 200
        webhook = WebhookEvent.objects.get(stripe_event_id=event["id"])
        assert webhook.status == WebhookEventStatus.PROCESSED
        assert webhook.retry_count == 2
        entry.refresh_from_db()
        assert entry.payment_status == PaymentStatus.PAID

    def test_event_store_outage_returns_503(self, post_webhook, entry, caplog):
        """
        Given the database cannot record the incoming event
        When Stripe delivers the completed event
        Then Stripe gets a 503 so it redelivers, and the entry is untouched
        """
        event = checkout_completed_event(entry_id=entry.id)
        before = entry_snapshot(entry)

        with patch.object(
            WebhookEvent.objects,
            "get_or_create",
            side_effect=OperationalError("server closed the connection"),
        ):
            response = post_webhook(event)

        assert response.status_code == 503
        assert response.json() == {
            "error": "Event store is temporarily unavailable",
            "error_code": "STORAGE_UNAVAILABLE",
        }
        assert entry_snapshot(entry) == before
        assert any(
            getattr(record, "stripe_event_id", None) == event["id"]
            for record in caplog.records
        )
