"""
Entry settlement from confirmed Stripe payments.

Applies checkout.session.completed to the entry store with two conditional
updates, so delivering the same event any number of times, or delivering it
after an organizer refunded the entry, leaves the entry where it should be.

Usage:
    from payments.services import EntrySettlementService

    result = EntrySettlementService.settle(metadata.get("entry_id"))
    if not result:
        webhook_event.mark_failed(result.error)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from django.db import InterfaceError, OperationalError
from django.utils import timezone

from core.services import BaseService, ServiceResult
from registrations.models import Entry


@dataclass(frozen=True)
class SettlementOutcome:
    """
    What settle() changed.

    entry_id is None when the event did not name a usable entry.
    """

    entry_id: uuid.UUID | None
    marked_paid: bool = False
    accepted: bool = False


class EntrySettlementService(BaseService):
    """Marks entries paid and accepted when Stripe confirms a checkout."""

    @classmethod
    def settle(
        cls,
        raw_entry_id: object,
        session_id: str | None = None,
    ) -> ServiceResult[SettlementOutcome]:
        """
        Mark the entry paid (from unpaid or waived) and accept it if pending.

        Zero rows changed is a success: the entry was already settled,
        refunded, accepted or withdrawn.

        Args:
            raw_entry_id: metadata.entry_id from the Checkout Session
            session_id: Checkout Session id, for logging

        Returns:
            ServiceResult success with SettlementOutcome, or failure with
            STORAGE_UNAVAILABLE so the event is retried
        """
        logger = cls.get_logger()

        try:
            entry_id = uuid.UUID(str(raw_entry_id)) if raw_entry_id else None
        except ValueError:
            entry_id = None

        if entry_id is None:
            logger.warning(
                "No usable entry_id in checkout session metadata",
                extra={"checkout_session_id": session_id, "entry_id": raw_entry_id},
            )
            return ServiceResult.success(SettlementOutcome(entry_id=None))

        try:
            with cls.atomic():
                paid = Entry.objects.mark_paid(entry_id, paid_at=timezone.now())
                accepted = Entry.objects.accept(entry_id)
        except (OperationalError, InterfaceError) as e:
            logger.error(
                f"Entry store unavailable while settling entry {entry_id}: {e}",
                extra={"entry_id": str(entry_id), "checkout_session_id": session_id},
            )
            return ServiceResult.failure(
                f"Entry store unavailable: {e}", "STORAGE_UNAVAILABLE"
            )

        logger.info(
            f"Settled entry {entry_id}",
            extra={
                "entry_id": str(entry_id),
                "checkout_session_id": session_id,
                "marked_paid": bool(paid),
                "accepted": bool(accepted),
            },
        )
        return ServiceResult.success(
            SettlementOutcome(
                entry_id=entry_id,
                marked_paid=bool(paid),
                accepted=bool(accepted),
            )
        )
