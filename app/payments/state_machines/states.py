"""
State enums for payment models.

WebhookEvent Status:
    pending → processing → processed
    pending → processing → failed → processing (retry task)
"""

from django.db import models


class WebhookEventStatus(models.TextChoices):
    """
    Processing status for WebhookEvent.

    PROCESSED is terminal; FAILED events are re-dispatched by
    payments.tasks.retry_failed_webhooks until WEBHOOK_MAX_RETRIES.
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"
