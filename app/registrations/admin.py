"""
Django admin configuration for registration entries.

Organizers use the bulk actions for back-office transitions. Payment state
set by the webhook is read-only here.
"""

from django.contrib import admin, messages

from django_fsm import can_proceed

from registrations.models import Entry, EntryMember


class EntryMemberInline(admin.TabularInline):
    model = EntryMember
    extra = 0
    raw_id_fields = ("member",)
    readonly_fields = ("created_at",)


@admin.register(Entry)
class EntryAdmin(admin.ModelAdmin):
    """
    Admin configuration for Entry.

    status and payment_status only change through the actions below so the
    django-fsm source states are respected.
    """

    list_display = [
        "id",
        "category",
        "created_by",
        "status",
        "payment_status",
        "payment_amount",
        "payment_currency",
        "paid_at",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "category__tournament"]
    search_fields = ["id", "created_by__email", "payment_reference", "category__name"]
    raw_id_fields = ["category", "created_by"]
    readonly_fields = [
        "id",
        "status",
        "payment_status",
        "payment_reference",
        "payment_amount",
        "payment_currency",
        "paid_at",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    inlines = [EntryMemberInline]
    actions = ["withdraw_entries", "waive_payments", "refund_payments"]

    def _apply_transition(self, request, queryset, transition_name, field, label):
        applied = skipped = 0
        for entry in queryset:
            transition = getattr(entry, transition_name)
            if not can_proceed(transition):
                skipped += 1
                continue
            transition()
            entry.save(update_fields=[field, "updated_at"])
            applied += 1

        self.message_user(request, f"{label} {applied} entries.")
        if skipped:
            self.message_user(
                request,
                f"Skipped {skipped} entries not in a valid state.",
                level=messages.WARNING,
            )

    @admin.action(description="Withdraw selected entries")
    def withdraw_entries(self, request, queryset):
        self._apply_transition(request, queryset, "withdraw", "status", "Withdrew")

    @admin.action(description="Waive payment for selected entries")
    def waive_payments(self, request, queryset):
        self._apply_transition(
            request, queryset, "waive_payment", "payment_status", "Waived payment for"
        )

    @admin.action(description="Mark selected entries as refunded")
    def refund_payments(self, request, queryset):
        self._apply_transition(
            request, queryset, "refund_payment", "payment_status", "Refunded"
        )

    def has_delete_permission(self, request, obj=None) -> bool:
        """Entries are never deleted; withdraw instead."""
        return False
