"""
Tests for the checkout-return poll.

Tests cover:
- Confirmation on the first paid read
- Fixed attempts and fixed delay, then "delayed"
- Redirect handling for success and cancel
- EntryStatusClient over HTTP, including unreadable bodies
"""

from unittest.mock import MagicMock, call

import pytest
import requests

from registrations.polling import (
    EntryPaymentPoller,
    EntryStatusClient,
    PollOutcome,
    PollResult,
)


@pytest.fixture
def sleep():
    return MagicMock()


class TestWaitForPayment:
    """Tests for EntryPaymentPoller.wait_for_payment()."""

    def test_confirmed_on_first_paid_read(self, sleep):
        fetch = MagicMock(side_effect=["unpaid", None, "paid"])
        poller = EntryPaymentPoller(fetch, attempts=5, delay_seconds=0.75, sleep=sleep)

        result = poller.wait_for_payment("entry-1")

        assert result == PollResult(PollOutcome.CONFIRMED, attempts=3)
        assert result.message == "Payment confirmed. Entry accepted."
        assert fetch.call_count == 3
        assert sleep.call_args_list == [call(0.75), call(0.75)]

    def test_delayed_after_all_attempts(self, sleep):
        """
        Given the webhook has not been processed yet
        When every read still says unpaid
        Then the poll stops after the fixed number of reads without a final sleep
        """
        fetch = MagicMock(return_value="unpaid")
        poller = EntryPaymentPoller(fetch, attempts=4, delay_seconds=0.5, sleep=sleep)

        result = poller.wait_for_payment("entry-1")

        assert result.outcome == PollOutcome.DELAYED
        assert result.attempts == 4
        assert result.message == "Payment processing delayed. Please refresh in a moment."
        assert fetch.call_count == 4
        assert sleep.call_count == 3

    def test_defaults_come_from_settings(self, settings, sleep):
        settings.ENTRY_POLL_ATTEMPTS = 2
        settings.ENTRY_POLL_DELAY_SECONDS = 0.1
        fetch = MagicMock(return_value=None)

        result = EntryPaymentPoller(fetch, sleep=sleep).wait_for_payment("entry-1")

        assert result.attempts == 2
        sleep.assert_called_once_with(0.1)


class TestHandleRedirect:
    """Tests for EntryPaymentPoller.handle_redirect()."""

    def test_cancel_needs_no_reads(self, sleep):
        fetch = MagicMock()
        poller = EntryPaymentPoller(fetch, attempts=3, delay_seconds=0, sleep=sleep)

        result = poller.handle_redirect({"payment": "cancel", "entry_id": "entry-1"})

        assert result.outcome == PollOutcome.CANCELLED
        assert result.message == "Payment canceled. You can try again anytime."
        fetch.assert_not_called()

    def test_success_polls_named_entry(self, sleep):
        fetch = MagicMock(return_value="paid")
        poller = EntryPaymentPoller(fetch, attempts=3, delay_seconds=0, sleep=sleep)

        result = poller.handle_redirect(
            {"payment": "success", "entry_id": "entry-1", "session_id": "cs_1"}
        )

        assert result.outcome == PollOutcome.CONFIRMED
        fetch.assert_called_once_with("entry-1")

    @pytest.mark.parametrize(
        "params",
        [{}, {"payment": "success"}, {"entry_id": "entry-1"}],
    )
    def test_other_urls_are_ignored(self, params, sleep):
        poller = EntryPaymentPoller(MagicMock(), attempts=3, delay_seconds=0, sleep=sleep)

        assert poller.handle_redirect(params) is None


class TestEntryStatusClient:
    """Tests for EntryStatusClient.fetch_payment_status()."""

    @pytest.fixture
    def session(self):
        session = MagicMock()
        session.headers = {}
        return session

    def test_reads_payment_status_with_bearer_token(self, session):
        session.get.return_value.json.return_value = {"payment_status": "paid"}
        client = EntryStatusClient(
            "https://api.example.com/", "token-123", timeout=2.0, session=session
        )

        assert client.fetch_payment_status("entry-1") == "paid"
        assert session.headers["Authorization"] == "Bearer token-123"
        session.get.assert_called_once_with(
            "https://api.example.com/api/v1/registrations/entries/entry-1/",
            timeout=2.0,
        )

    def test_http_error_reads_as_none(self, session):
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError(
            "503 Service Unavailable"
        )
        client = EntryStatusClient("https://api.example.com", "token", session=session)

        assert client.fetch_payment_status("entry-1") is None

    def test_connection_error_reads_as_none(self, session):
        session.get.side_effect = requests.ConnectionError("refused")
        client = EntryStatusClient("https://api.example.com", "token", session=session)

        assert client.fetch_payment_status("entry-1") is None

    def test_body_that_is_not_json_reads_as_none(self, session):
        """A 200 from a proxy error page does not break the poll."""
        session.get.return_value.json.side_effect = requests.JSONDecodeError(
            "Expecting value", "<html>Bad Gateway</html>", 0
        )
        client = EntryStatusClient("https://api.example.com", "token", session=session)

        assert client.fetch_payment_status("entry-1") is None

    def test_body_that_is_not_an_object_reads_as_none(self, session):
        session.get.return_value.json.return_value = ["paid"]
        client = EntryStatusClient("https://api.example.com", "token", session=session)

        assert client.fetch_payment_status("entry-1") is None

    def test_poll_ends_delayed_when_bodies_are_not_json(self, session, sleep):
        session.get.return_value.json.side_effect = requests.JSONDecodeError(
            "Expecting value", "", 0
        )
        client = EntryStatusClient("https://api.example.com", "token", session=session)
        poller = EntryPaymentPoller(
            client.fetch_payment_status, attempts=3, delay_seconds=0.1, sleep=sleep
        )

        result = poller.wait_for_payment("entry-1")

        assert result.outcome == PollOutcome.DELAYED
        assert session.get.call_count == 3
