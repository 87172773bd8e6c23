"""
Client-side confirmation poll after the checkout redirect.

Stripe redirects the participant back to the app before (or after) the
webhook has been processed. The client therefore re-reads the entry a fixed
number of times until payment_status is "paid", then gives up with a
"delayed" message. The webhook, not the poll, is what settles the entry.

Usage:
    from registrations.polling import EntryPaymentPoller, EntryStatusClient

    client = EntryStatusClient(base_url="https://api.example.com", access_token=token)
    poller = EntryPaymentPoller(client.fetch_payment_status)

    result = poller.handle_redirect({"payment": "success", "entry_id": entry_id})
    print(result.message)
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import requests
from django.conf import settings

from registrations.state_machines import PaymentStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)


class PollOutcome(str, enum.Enum):
    CONFIRMED = "confirmed"
    DELAYED = "delayed"
    CANCELLED = "cancelled"


OUTCOME_MESSAGES = {
    PollOutcome.CONFIRMED: "Payment confirmed. Entry accepted.",
    PollOutcome.DELAYED: "Payment processing delayed. Please refresh in a moment.",
    PollOutcome.CANCELLED: "Payment canceled. You can try again anytime.",
}


@dataclass(frozen=True)
class PollResult:
    outcome: PollOutcome
    attempts: int = 0

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome]


class EntryPaymentPoller:
    """
    Poll an entry's payment status with fixed attempts and a fixed delay.

    Attributes:
        fetch_payment_status: Callable returning the entry's payment_status,
            or None when it could not be read this round
        attempts: Maximum number of reads (ENTRY_POLL_ATTEMPTS)
        delay_seconds: Pause between reads (ENTRY_POLL_DELAY_SECONDS)
    """

    def __init__(
        self,
        fetch_payment_status: Callable[[str], str | None],
        attempts: int | None = None,
        delay_seconds: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.fetch_payment_status = fetch_payment_status
        self.attempts = attempts if attempts is not None else settings.ENTRY_POLL_ATTEMPTS
        self.delay_seconds = (
            delay_seconds
            if delay_seconds is not None
            else settings.ENTRY_POLL_DELAY_SECONDS
        )
        self._sleep = sleep

    def wait_for_payment(self, entry_id: str) -> PollResult:
        """
        Read the entry until it is paid or the attempts run out.

        Returns:
            PollResult with CONFIRMED on the first paid read, else DELAYED
        """
        for attempt in range(1, self.attempts + 1):
            if self.fetch_payment_status(entry_id) == PaymentStatus.PAID:
                return PollResult(PollOutcome.CONFIRMED, attempts=attempt)
            if attempt < self.attempts:
                self._sleep(self.delay_seconds)

        logger.info(
            f"Payment for entry {entry_id} not confirmed after {self.attempts} reads",
            extra={"entry_id": entry_id, "attempts": self.attempts},
        )
        return PollResult(PollOutcome.DELAYED, attempts=self.attempts)

    def handle_redirect(self, params: Mapping[str, str]) -> PollResult | None:
        """
        Interpret the query parameters of the checkout return URL.

        Returns None when the URL is not a checkout return.
        """
        payment = params.get("payment")
        if payment == "cancel":
            return PollResult(PollOutcome.CANCELLED)

        entry_id = params.get("entry_id")
        if payment == "success" and entry_id:
            return self.wait_for_payment(entry_id)

        return None


class EntryStatusClient:
    """
    Reads entry status from the registrations API with a bearer token.

    Usage:
        client = EntryStatusClient("https://api.example.com", access_token)
        client.fetch_payment_status(entry_id)  # "paid", "unpaid", ... or None
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"Bearer {access_token}"

    def fetch_payment_status(self, entry_id: str) -> str | None:
        url = f"{self.base_url}/api/v1/registrations/entries/{entry_id}/"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            # Includes bodies that are not JSON. Counts as "not paid yet";
            # the poll decides when to stop
            logger.warning(
                f"Entry status read failed for {entry_id}: {e}",
                extra={"entry_id": entry_id},
            )
            return None
        if not isinstance(body, dict):
            return None
        return body.get("payment_status")
