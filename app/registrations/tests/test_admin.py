"""
Tests for the Entry admin bulk actions.

Actions go through the django-fsm transitions, so entries in the wrong
source state are skipped rather than forced.
"""

import pytest
from django.urls import reverse

from registrations.state_machines import EntryStatus, PaymentStatus
from registrations.tests.factories import EntryFactory


def run_action(admin_client, action, entries):
    return admin_client.post(
        reverse("admin:registrations_entry_changelist"),
        {"action": action, "_selected_action": [str(e.pk) for e in entries]},
        follow=True,
    )


@pytest.mark.django_db
class TestEntryAdminActions:
    def test_waive_payments_skips_paid_entries(self, admin_client):
        unpaid = EntryFactory()
        paid = EntryFactory(paid=True)

        response = run_action(admin_client, "waive_payments", [unpaid, paid])

        unpaid.refresh_from_db()
        paid.refresh_from_db()
        assert unpaid.payment_status == PaymentStatus.WAIVED
        assert paid.payment_status == PaymentStatus.PAID
        messages = [str(m) for m in response.context["messages"]]
        assert "Waived payment for 1 entries." in messages
        assert "Skipped 1 entries not in a valid state." in messages

    def test_refund_payments(self, admin_client):
        paid = EntryFactory(paid=True, status=EntryStatus.ACCEPTED)

        run_action(admin_client, "refund_payments", [paid])

        paid.refresh_from_db()
        assert paid.payment_status == PaymentStatus.REFUNDED
        assert paid.status == EntryStatus.ACCEPTED

    def test_withdraw_entries(self, admin_client):
        entry = EntryFactory()

        run_action(admin_client, "withdraw_entries", [entry])

        entry.refresh_from_db()
        assert entry.status == EntryStatus.WITHDRAWN

    def test_entries_cannot_be_deleted(self, admin_client):
        entry = EntryFactory()

        response = admin_client.get(
            reverse("admin:registrations_entry_delete", args=[entry.pk])
        )

        assert response.status_code == 403
