"""
Entry admission service.

Creates the registration entry a participant pays for, once and only once
per (category, participant), even when the same participant submits from
several devices at the same time.

Usage:
    from registrations.services import EntryAdmissionService

    result = EntryAdmissionService.ensure_entry(request.user, category_id)
    result.entry_id  # existing or newly created entry
    result.created   # True only for the request that inserted the row

Error handling:
    - InvalidReferenceError: category missing or insert rejected (not retryable)
    - StorageUnavailableError: database unreachable (retryable)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError, InterfaceError, OperationalError

from core.exceptions import StorageUnavailableError
from core.services import BaseService
from registrations.exceptions import InvalidReferenceError
from registrations.models import Entry, EntryMember
from tournaments.models import Category

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of ensure_entry()."""

    entry_id: UUID
    created: bool


class EntryAdmissionService(BaseService):
    """
    Idempotent entry creation.

    The unique constraint on (category, created_by) decides concurrent
    inserts. The loser of a race re-reads once and returns the winner's id,
    so callers never see the duplicate.
    """

    @classmethod
    def ensure_entry(cls, participant, category_id: UUID | str) -> AdmissionResult:
        """
        Return the participant's entry in the category, creating it if needed.

        Args:
            participant: User registering for the category
            category_id: Category to register into

        Returns:
            AdmissionResult with the entry id and whether this call created it

        Raises:
            InvalidReferenceError: Category missing or insert rejected
            StorageUnavailableError: Database unreachable
        """
        logger = cls.get_logger()

        try:
            existing = Entry.objects.for_participant(category_id, participant)
            if existing is not None:
                return AdmissionResult(entry_id=existing.id, created=False)

            if not Category.objects.filter(pk=category_id).exists():
                raise InvalidReferenceError(
                    f"Category {category_id} does not exist",
                    details={"category_id": str(category_id)},
                )

            try:
                with cls.atomic():
                    entry = Entry.objects.create(
                        category_id=category_id,
                        created_by=participant,
                        payment_currency=settings.DEFAULT_ENTRY_CURRENCY,
                    )
                    EntryMember.objects.create(entry=entry, member=participant)
            except IntegrityError as e:
                return cls._resolve_conflict(participant, category_id, e)

        except (OperationalError, InterfaceError) as e:
            logger.error(
                f"Entry store unavailable during admission: {e}",
                extra={
                    "category_id": str(category_id),
                    "participant_id": str(participant.pk),
                },
            )
            raise StorageUnavailableError(
                "Entry store is temporarily unavailable",
                details={"category_id": str(category_id)},
            ) from e

        logger.info(
            f"Created entry {entry.id}",
            extra={
                "entry_id": str(entry.id),
                "category_id": str(category_id),
                "participant_id": str(participant.pk),
            },
        )
        return AdmissionResult(entry_id=entry.id, created=True)

    @classmethod
    def _resolve_conflict(
        cls, participant, category_id: UUID | str, error: IntegrityError
    ) -> AdmissionResult:
        """Re-read once after a rejected insert and return the winning entry."""
        winner = Entry.objects.for_participant(category_id, participant)
        if winner is None:
            cls.get_logger().warning(
                f"Entry insert rejected without a competing entry: {error}",
                extra={
                    "category_id": str(category_id),
                    "participant_id": str(participant.pk),
                },
            )
            raise InvalidReferenceError(
                "Entry could not be created for this category",
                details={"category_id": str(category_id)},
            ) from error

        cls.get_logger().info(
            f"Concurrent admission resolved to existing entry {winner.id}",
            extra={"entry_id": str(winner.id), "category_id": str(category_id)},
        )
        return AdmissionResult(entry_id=winner.id, created=False)
