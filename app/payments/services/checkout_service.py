"""
Checkout initiation for registration entries.

CheckoutService turns an unpaid entry into a hosted Stripe Checkout page.
It never changes status or payment_status; only the webhook does that.

Precondition order (first failure wins):
    1. Entry exists                              -> EntryNotFoundError
    2. Caller is the creator or the organizer    -> CheckoutForbiddenError
    3. Tournament open and inside its window     -> RegistrationClosedError
    4. Entry still unpaid                        -> AlreadySettledError
    5. Category fee present and positive         -> InvalidFeeError

Usage:
    from payments.services import CheckoutService

    session = CheckoutService.create_checkout(entry_id, caller=request.user)
    return Response({"url": session.url, "session_id": session.session_id})
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from django.conf import settings
from django.db import InterfaceError, OperationalError
from django.utils import timezone

from core.exceptions import StorageUnavailableError
from core.services import BaseService
from payments.adapters import (
    CreateCheckoutSessionParams,
    IdempotencyKeyGenerator,
    StripeAdapter,
)
from payments.exceptions import (
    AlreadySettledError,
    CheckoutForbiddenError,
    InvalidFeeError,
    RegistrationClosedError,
)
from registrations.exceptions import EntryNotFoundError
from registrations.models import Entry
from registrations.state_machines import PaymentStatus

if TYPE_CHECKING:
    from uuid import UUID


# Stripe substitutes this placeholder itself, so it must stay unencoded
SESSION_ID_PLACEHOLDER = "session_id={CHECKOUT_SESSION_ID}"


@dataclass(frozen=True)
class CheckoutSession:
    """Hosted checkout page returned to the client."""

    url: str
    session_id: str


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to cents, rounding half up."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def with_query_params(url: str, params: dict[str, str], raw_suffix: str = "") -> str:
    """
    Add query parameters that the URL does not already carry.

    raw_suffix is appended without encoding (and replaces any earlier
    session_id parameter when it is the session placeholder).
    """
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    if raw_suffix == SESSION_ID_PLACEHOLDER:
        query = [(key, value) for key, value in query if key != "session_id"]

    present = {key for key, _ in query}
    query += [(key, value) for key, value in params.items() if key not in present]

    encoded = urlencode(query)
    if raw_suffix:
        encoded = f"{encoded}&{raw_suffix}" if encoded else raw_suffix
    return urlunsplit(parts._replace(query=encoded))


class CheckoutService(BaseService):
    """Creates Stripe Checkout sessions for unpaid entries."""

    @classmethod
    def create_checkout(
        cls,
        entry_id: UUID | str,
        caller,
        success_url: str | None = None,
        cancel_url: str | None = None,
    ) -> CheckoutSession:
        """
        Start a checkout for an entry and record its session reference.

        Args:
            entry_id: Entry to pay for
            caller: Authenticated user requesting the checkout
            success_url: Redirect after payment (defaults to the app's register page)
            cancel_url: Redirect when the payer backs out

        Returns:
            CheckoutSession with the hosted page URL and session id

        Raises:
            EntryNotFoundError, CheckoutForbiddenError, RegistrationClosedError,
            AlreadySettledError, InvalidFeeError: Preconditions, in that order
            ExternalProcessorError: Stripe call failed; nothing persisted
            StorageUnavailableError: Database unreachable
        """
        logger = cls.get_logger()
        entry = cls._load_entry(entry_id)
        category = entry.category
        tournament = category.tournament

        if caller.pk not in (entry.created_by_id, tournament.organizer_id):
            logger.warning(
                "Checkout refused: caller is neither creator nor organizer",
                extra={"entry_id": str(entry.id), "caller_id": str(caller.pk)},
            )
            raise CheckoutForbiddenError(
                "Only the entrant or the tournament organizer can pay for this entry",
                details={"entry_id": str(entry.id)},
            )

        now = timezone.now()
        if not tournament.is_registration_open(now):
            raise RegistrationClosedError(
                "Registration is closed",
                details={
                    "tournament_id": str(tournament.id),
                    "tournament_status": tournament.status,
                },
            )

        if entry.payment_status != PaymentStatus.UNPAID:
            raise AlreadySettledError(
                "Entry is already paid, waived or refunded",
                details={
                    "entry_id": str(entry.id),
                    "payment_status": entry.payment_status,
                },
            )

        fee = category.registration_fee
        if fee is None or fee <= 0:
            raise InvalidFeeError(
                "Invalid registration fee",
                details={"category_id": str(category.id)},
            )

        currency = (entry.payment_currency or settings.DEFAULT_ENTRY_CURRENCY).lower()
        success_url = cls._success_url(entry.id, success_url)
        cancel_url = cls._cancel_url(entry.id, cancel_url)
        session = StripeAdapter.create_checkout_session(
            CreateCheckoutSessionParams(
                line_item_name=category.checkout_label,
                unit_amount_cents=to_minor_units(fee),
                currency=currency,
                success_url=success_url,
                cancel_url=cancel_url,
                metadata={
                    "entry_id": str(entry.id),
                    "category_id": str(category.id),
                    "tournament_id": str(tournament.id),
                    "user_id": str(caller.pk),
                },
                idempotency_key=IdempotencyKeyGenerator.generate(
                    operation="checkout",
                    entity_id=entry.id,
                    attempt=int(now.timestamp()),
                    fingerprint=f"{caller.pk}|{success_url}|{cancel_url}",
                ),
            )
        )

        try:
            recorded = Entry.objects.record_checkout(
                entry.id, reference=session.id, amount=fee, currency=currency
            )
        except (OperationalError, InterfaceError) as e:
            logger.error(
                f"Could not record checkout session {session.id}: {e}",
                extra={"entry_id": str(entry.id), "checkout_session_id": session.id},
            )
            raise StorageUnavailableError(
                "Entry store is temporarily unavailable",
                details={"entry_id": str(entry.id)},
            ) from e

        if not recorded:
            # Settled between the precondition check and the write
            logger.warning(
                f"Entry settled during checkout; session {session.id} not recorded",
                extra={"entry_id": str(entry.id), "checkout_session_id": session.id},
            )
            raise AlreadySettledError(
                "Entry is already paid, waived or refunded",
                details={"entry_id": str(entry.id)},
            )

        logger.info(
            f"Checkout session {session.id} created for entry {entry.id}",
            extra={
                "entry_id": str(entry.id),
                "checkout_session_id": session.id,
                "amount": str(fee),
                "currency": currency,
            },
        )
        return CheckoutSession(url=session.url, session_id=session.id)

    @classmethod
    def _load_entry(cls, entry_id: UUID | str) -> Entry:
        try:
            entry = Entry.objects.with_summary().filter(pk=entry_id).first()
        except (OperationalError, InterfaceError) as e:
            raise StorageUnavailableError(
                "Entry store is temporarily unavailable",
                details={"entry_id": str(entry_id)},
            ) from e

        if entry is None:
            raise EntryNotFoundError(
                "Entry not found",
                details={"entry_id": str(entry_id)},
            )
        return entry

    @staticmethod
    def _register_url(payment: str) -> str:
        base = settings.CHECKOUT_BASE_URL.rstrip("/")
        return f"{base}/tournaments/register?payment={payment}"

    @classmethod
    def _success_url(cls, entry_id, success_url: str | None) -> str:
        return with_query_params(
            success_url or cls._register_url("success"),
            {"entry_id": str(entry_id)},
            raw_suffix=SESSION_ID_PLACEHOLDER,
        )

    @classmethod
    def _cancel_url(cls, entry_id, cancel_url: str | None) -> str:
        return with_query_params(
            cancel_url or cls._register_url("cancel"),
            {"entry_id": str(entry_id)},
        )
