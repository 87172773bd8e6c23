"""
Webhook handling for payment events from Stripe.

Webhooks are verified, stored idempotently in WebhookEvent, and processed
before the response is sent. Failed attempts are retried by Celery.
"""

from payments.webhooks.handlers import (
    dispatch_webhook,
    process_webhook_event,
    register_handler,
)
from payments.webhooks.views import stripe_webhook

__all__ = [
    "dispatch_webhook",
    "process_webhook_event",
    "register_handler",
    "stripe_webhook",
]
