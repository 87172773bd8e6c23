"""
State enums for the Entry model.

An entry carries two independent state machines, both managed by django-fsm.

Entry status:
    pending → accepted (payment confirmed by webhook)
    pending/accepted → withdrawn (back office)

Payment status:
    unpaid → paid (webhook)
    unpaid → waived (back office)
    waived → paid (webhook for a checkout started before the waiver)
    paid → refunded (back office)
"""

from django.db import models


class EntryStatus(models.TextChoices):
    """
    Roster status of an entry.

    Terminal state: WITHDRAWN
    """

    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    WITHDRAWN = "withdrawn", "Withdrawn"


class PaymentStatus(models.TextChoices):
    """
    Payment status of an entry.

    Terminal state: REFUNDED. Only UNPAID entries may start a checkout.
    """

    UNPAID = "unpaid", "Unpaid"
    PAID = "paid", "Paid"
    WAIVED = "waived", "Waived"
    REFUNDED = "refunded", "Refunded"

    @classmethod
    def settleable(cls) -> list[str]:
        """States a confirmed payment may move to PAID from."""
        return [cls.UNPAID, cls.WAIVED]
