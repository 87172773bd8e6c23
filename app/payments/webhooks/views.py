"""
Webhook endpoint views for Stripe.

The view:
1. Verifies the webhook signature (nothing is written before this passes)
2. Creates/retrieves the WebhookEvent record (idempotent)
3. Processes the event unless it was already processed
4. Acknowledges with {"received": true}

Processing runs in the request so the entry is settled by the time Stripe
gets its 200. Handler failures are still acknowledged; the event is marked
failed and re-dispatched by payments.tasks.retry_failed_webhooks.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.db import InterfaceError, OperationalError
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from core.exceptions import StorageUnavailableError
from payments.adapters import StripeAdapter
from payments.exceptions import InvalidSignatureError
from payments.models import WebhookEvent
from payments.webhooks.handlers import process_webhook_event

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive, record and process a Stripe webhook event.

    Security:
    - Signature verification prevents spoofed webhooks
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - WebhookEvent.stripe_event_id is unique
    - Already processed events are acknowledged without reprocessing
    - Settlement itself is a conditional update, so reprocessing is harmless

    Returns:
        JsonResponse with status:
        - 200 {"received": true}: Event authentic (new, duplicate or failed)
        - 400 {"error": ...}: Missing or invalid signature, malformed event
        - 503 {"error", "error_code"}: Event store unreachable; Stripe redelivers

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    payload = request.body
    signature = request.headers.get("Stripe-Signature")

    try:
        event_data = StripeAdapter.verify_webhook_signature(payload, signature)
    except InvalidSignatureError as e:
        logger.warning(
            f"Webhook rejected: {e.message}",
            extra={"error": e.details.get("error")},
        )
        return JsonResponse({"error": e.message}, status=400)

    stripe_event_id = event_data.get("id") if isinstance(event_data, dict) else None
    event_type = event_data.get("type") if isinstance(event_data, dict) else None

    if not stripe_event_id or not event_type:
        logger.warning("Webhook missing required fields")
        return JsonResponse({"error": "Invalid event"}, status=400)

    logger.info(
        f"Received Stripe webhook: {event_type}",
        extra={"stripe_event_id": stripe_event_id, "event_type": event_type},
    )

    try:
        webhook_event, created = WebhookEvent.objects.get_or_create(
            stripe_event_id=stripe_event_id,
            defaults={"event_type": event_type, "payload": event_data},
        )
    except (OperationalError, InterfaceError) as e:
        # Non-2xx makes Stripe redeliver the event later
        logger.error(
            f"Could not record webhook {stripe_event_id}: {e}",
            extra={"stripe_event_id": stripe_event_id, "event_type": event_type},
        )
        error = StorageUnavailableError(
            "Event store is temporarily unavailable",
            details={"stripe_event_id": stripe_event_id},
        )
        return JsonResponse(
            {"error": error.message, "error_code": error.error_code}, status=503
        )

    if not created and webhook_event.is_processed:
        logger.info(
            "Webhook already processed, acknowledging",
            extra={"stripe_event_id": stripe_event_id},
        )
        return JsonResponse({"received": True})

    process_webhook_event(webhook_event)
    return JsonResponse({"received": True})
