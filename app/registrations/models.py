"""
Registration entry models.

Entry is the single source of truth for both the roster status and the
payment status of one participant in one category. EntryMember lists the
participants on the entry (the creator is always a member).

Usage:
    from registrations.models import Entry

    entry = Entry.objects.for_participant(category_id, user)

    # Back-office transitions using django-fsm
    entry.waive_payment()  # unpaid -> waived
    entry.save(update_fields=["payment_status", "updated_at"])

Note:
    The payment flow never calls save() on an Entry. Checkout and webhook
    writes go through the conditional updates in managers.EntryQuerySet.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from registrations.managers import EntryQuerySet
from registrations.state_machines import EntryStatus, PaymentStatus


class Entry(UUIDPrimaryKeyMixin, BaseModel):
    """
    A participant's registration in a tournament category.

    Only one entry may exist per (category, created_by); the database
    constraint decides concurrent admissions.

    State Flow:
        status:         PENDING -> ACCEPTED, PENDING/ACCEPTED -> WITHDRAWN
        payment_status: UNPAID -> PAID -> REFUNDED, UNPAID -> WAIVED -> PAID
    """

    category = models.ForeignKey(
        "tournaments.Category",
        on_delete=models.PROTECT,
        related_name="entries",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="entries",
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="EntryMember",
        related_name="entry_memberships",
    )

    status = FSMField(
        default=EntryStatus.PENDING,
        choices=EntryStatus.choices,
        db_index=True,
        help_text="Roster status of the entry",
    )
    payment_status = FSMField(
        default=PaymentStatus.UNPAID,
        choices=PaymentStatus.choices,
        db_index=True,
        help_text="Payment status of the entry",
    )

    # ==========================================================================
    # Checkout Snapshot
    # ==========================================================================

    payment_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text="Stripe Checkout Session ID of the latest checkout",
    )
    payment_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Fee charged at the latest checkout (major units)",
    )
    payment_currency = models.CharField(
        max_length=3,
        default="usd",
        help_text="ISO currency code (lowercase)",
    )
    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payment was confirmed",
    )

    objects = EntryQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "entries"
        indexes = [
            models.Index(
                fields=["created_by", "created_at"],
                name="entry_creator_created_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["category", "created_by"],
                name="entry_unique_category_creator",
            ),
            models.CheckConstraint(
                condition=models.Q(payment_amount__isnull=True)
                | models.Q(payment_amount__gt=0),
                name="entry_payment_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Entry({self.id}, {self.status}, {self.payment_status})"

    # ==========================================================================
    # Back-office Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=[EntryStatus.PENDING, EntryStatus.ACCEPTED],
        target=EntryStatus.WITHDRAWN,
    )
    def withdraw(self):
        """
        Remove the entry from the roster.

        Transition: PENDING/ACCEPTED -> WITHDRAWN

        Payment status is left alone; refunds are a separate decision.
        """

    @transition(
        field=payment_status,
        source=PaymentStatus.UNPAID,
        target=PaymentStatus.WAIVED,
    )
    def waive_payment(self):
        """
        Let the entry play without paying.

        Transition: UNPAID -> WAIVED
        """

    @transition(
        field=payment_status,
        source=PaymentStatus.PAID,
        target=PaymentStatus.REFUNDED,
    )
    def refund_payment(self):
        """
        Record that the fee was returned outside the checkout flow.

        Transition: PAID -> REFUNDED

        A refunded entry is final: a late or redelivered webhook cannot
        move it back to PAID.
        """


class EntryMember(BaseModel):
    """A participant listed on an entry."""

    entry = models.ForeignKey(
        Entry,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="entry_member_rows",
    )

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["entry", "member"],
                name="entry_member_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"EntryMember({self.entry_id}, {self.member_id})"
