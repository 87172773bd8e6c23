"""
Payment admin configuration.

Webhook events are read-only records of what Stripe sent. The one action
available re-queues failed events through the same task the retry
schedule uses.
"""

from django.contrib import admin, messages

from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.tasks import redispatch_webhook_event


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """
    Admin configuration for WebhookEvent.

    Provides visibility into webhook processing status.
    Webhook events are immutable once received.
    """

    list_display = [
        "id",
        "stripe_event_id",
        "event_type",
        "status",
        "retry_count",
        "processed_at",
        "created_at",
    ]
    list_filter = ["status", "event_type", "created_at"]
    search_fields = ["id", "stripe_event_id", "event_type"]
    readonly_fields = [
        "id",
        "created_at",
        "updated_at",
        "stripe_event_id",
        "event_type",
        "payload",
        "status",
        "processed_at",
        "error_message",
        "retry_count",
    ]
    ordering = ["-created_at"]
    actions = ["requeue_failed_events"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "stripe_event_id", "event_type"),
            },
        ),
        (
            "Processing",
            {
                "fields": ("status", "retry_count", "processed_at", "error_message"),
            },
        ),
        (
            "Payload",
            {
                "fields": ("payload",),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Re-queue selected failed events")
    def requeue_failed_events(self, request, queryset):
        failed = queryset.filter(status=WebhookEventStatus.FAILED)
        count = 0
        for webhook in failed:
            redispatch_webhook_event.delay(str(webhook.id))
            count += 1
        self.message_user(
            request, f"Queued {count} webhook event(s) for processing.", messages.INFO
        )
