"""
Entry store queries.

Every write the payment flow makes to an entry is a single conditional
UPDATE ... WHERE statement, so concurrent checkouts and redelivered or late
webhooks are arbitrated by the database rather than by locks. Each write
returns the number of rows it changed; zero means the guard did not match.

Usage:
    from registrations.models import Entry

    entry = Entry.objects.for_participant(category_id, user)
    changed = Entry.objects.mark_paid(entry_id, paid_at=timezone.now())
    if changed:
        Entry.objects.accept(entry_id)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models
from django.utils import timezone

from registrations.state_machines import EntryStatus, PaymentStatus

if TYPE_CHECKING:
    from datetime import datetime
    from decimal import Decimal
    from uuid import UUID


class EntryQuerySet(models.QuerySet):
    """QuerySet for Entry with the store's lookups and conditional writes."""

    def for_participant(self, category_id: UUID | str, participant):
        """Return the participant's entry in a category, or None."""
        return self.filter(category_id=category_id, created_by=participant).first()

    def with_summary(self) -> EntryQuerySet:
        """Join the category and tournament for display and eligibility checks."""
        return self.select_related("category", "category__tournament")

    def record_checkout(
        self,
        entry_id: UUID | str,
        reference: str,
        amount: Decimal,
        currency: str,
    ) -> int:
        """
        Store the checkout session on an entry that is still unpaid.

        A newer session replaces an older one. Returns rows changed.
        """
        return self.filter(pk=entry_id, payment_status=PaymentStatus.UNPAID).update(
            payment_reference=reference,
            payment_amount=amount,
            payment_currency=currency,
            updated_at=timezone.now(),
        )

    def mark_paid(self, entry_id: UUID | str, paid_at: datetime) -> int:
        """
        Move an unpaid or waived entry to paid.

        Paid and refunded entries are never touched, so redelivered and
        late events are no-ops. Returns rows changed.
        """
        return self.filter(
            pk=entry_id, payment_status__in=PaymentStatus.settleable()
        ).update(
            payment_status=PaymentStatus.PAID,
            paid_at=paid_at,
            updated_at=timezone.now(),
        )

    def accept(self, entry_id: UUID | str) -> int:
        """Move a pending entry to accepted. Returns rows changed."""
        return self.filter(pk=entry_id, status=EntryStatus.PENDING).update(
            status=EntryStatus.ACCEPTED,
            updated_at=timezone.now(),
        )
