"""
Payment domain models.

- WebhookEvent: Verified Stripe webhook events, for idempotent processing,
  retries and audit

Entries and their payment status live in registrations.models.
"""

from payments.models.webhook_event import WebhookEvent

__all__ = [
    "WebhookEvent",
]
