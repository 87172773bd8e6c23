"""
Webhook event handlers for Stripe events.

This module provides a handler registry, the processing step shared by the
webhook view and the retry task, and the handlers themselves.

Only checkout.session.completed changes anything; every other event type
is recorded and acknowledged.

Usage:
    from payments.webhooks.handlers import process_webhook_event, register_handler

    @register_handler("checkout.session.expired")
    def handle_session_expired(webhook_event: WebhookEvent) -> ServiceResult:
        ...

    result = process_webhook_event(webhook_event)
"""

from __future__ import annotations

import logging
from typing import Callable

from core.services import ServiceResult
from payments.models import WebhookEvent
from payments.services import EntrySettlementService

logger = logging.getLogger(__name__)


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[WebhookEvent], ServiceResult]] = {}


def register_handler(event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Args:
        event_type: The Stripe event type (e.g., "checkout.session.completed")
    """

    def decorator(func: Callable[[WebhookEvent], ServiceResult]) -> Callable:
        WEBHOOK_HANDLERS[event_type] = func
        logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Dispatch a webhook event to the appropriate handler.

    Unknown event types succeed without effect so Stripe stops redelivering
    them.
    """
    handler = WEBHOOK_HANDLERS.get(webhook_event.event_type)

    if not handler:
        logger.info(
            f"No handler registered for event type: {webhook_event.event_type}",
            extra={"stripe_event_id": webhook_event.stripe_event_id},
        )
        return ServiceResult.success(None)

    logger.info(
        f"Dispatching {webhook_event.event_type} to handler",
        extra={"stripe_event_id": webhook_event.stripe_event_id},
    )
    return handler(webhook_event)


def process_webhook_event(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Run one processing attempt and record its outcome on the event.

    Handler exceptions are logged and recorded as a failed attempt rather
    than raised: the sender has already been authenticated and gets its
    acknowledgement, and the retry task takes it from here.

    Returns:
        The handler's ServiceResult (failure when the handler raised)
    """
    webhook_event.mark_processing()
    webhook_event.save(update_fields=["status", "retry_count", "updated_at"])

    log_extra = {
        "webhook_event_id": str(webhook_event.id),
        "stripe_event_id": webhook_event.stripe_event_id,
        "event_type": webhook_event.event_type,
        "retry_count": webhook_event.retry_count,
    }

    try:
        result = dispatch_webhook(webhook_event)
    except Exception as e:
        logger.exception("Webhook handler raised", extra=log_extra)
        result = ServiceResult.from_exception(e)

    if result.success:
        webhook_event.mark_processed()
        logger.info("Webhook processed successfully", extra=log_extra)
    else:
        error_msg = result.error or "Handler returned failure"
        webhook_event.mark_failed(error_msg)
        logger.warning(
            f"Webhook handler failed: {error_msg}",
            extra={**log_extra, "error_code": result.error_code},
        )

    webhook_event.save(
        update_fields=["status", "processed_at", "error_message", "updated_at"]
    )
    return result


# =============================================================================
# Checkout Handlers
# =============================================================================


@register_handler("checkout.session.completed")
def handle_checkout_session_completed(webhook_event: WebhookEvent) -> ServiceResult:
    """
    Settle the entry named in the Checkout Session metadata.

    A session without a usable metadata.entry_id is logged and
    acknowledged; there is nothing to settle.
    """
    session = webhook_event.data_object
    metadata = session.get("metadata") or {}

    return EntrySettlementService.settle(
        metadata.get("entry_id"),
        session_id=session.get("id"),
    )
