"""
Tournament and category models.

Models:
    Tournament: An event hosted by an organizer with a registration window
    Category: A division of a tournament that participants register into

Registration and checkout only read these rows:
    - Category.registration_fee: amount charged at checkout
    - Tournament.status + registration window: whether checkout is allowed
    - Tournament.organizer: may start checkout on behalf of an entrant

Usage:
    from tournaments.models import Category

    category = Category.objects.select_related("tournament").get(pk=category_id)
    if category.tournament.is_registration_open():
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

if TYPE_CHECKING:
    from datetime import datetime


class TournamentStatus(models.TextChoices):
    """Publication and lifecycle states of a tournament."""

    DRAFT = "draft", "Draft"
    REGISTRATION_OPEN = "registration_open", "Registration Open"
    REGISTRATION_CLOSED = "registration_closed", "Registration Closed"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class ParticipationType(models.TextChoices):
    """Whether entries in a category are one player or a team."""

    INDIVIDUAL = "individual", "Individual"
    TEAM = "team", "Team"


class Tournament(UUIDPrimaryKeyMixin, BaseModel):
    """
    A tournament hosted by an organizer.

    Registration is open when the status is REGISTRATION_OPEN and the
    current time falls inside [registration_start_date, registration_end_date],
    both bounds inclusive.
    """

    title = models.CharField(max_length=200)
    organizer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="organized_tournaments",
    )
    status = models.CharField(
        max_length=30,
        choices=TournamentStatus.choices,
        default=TournamentStatus.DRAFT,
        db_index=True,
    )
    registration_start_date = models.DateTimeField()
    registration_end_date = models.DateTimeField()
    start_date = models.DateTimeField(null=True, blank=True)
    venue_name = models.CharField(max_length=200, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(
                    registration_end_date__gte=models.F("registration_start_date")
                ),
                name="tournament_registration_window_ordered",
            ),
        ]

    def __str__(self) -> str:
        return self.title

    def is_registration_open(self, at: datetime | None = None) -> bool:
        """
        Check whether entrants may pay for this tournament at the given time.

        Args:
            at: Moment to check (defaults to now)
        """
        at = at or timezone.now()
        return (
            self.status == TournamentStatus.REGISTRATION_OPEN
            and self.registration_start_date <= at <= self.registration_end_date
        )


class Category(UUIDPrimaryKeyMixin, BaseModel):
    """
    A registrable division within a tournament (e.g. "Men's Doubles").

    registration_fee is nullable because organizers may publish a category
    before pricing it; checkout refuses entries whose fee is missing or not
    positive.
    """

    tournament = models.ForeignKey(
        Tournament,
        on_delete=models.CASCADE,
        related_name="categories",
    )
    name = models.CharField(max_length=100)
    registration_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Entry fee in the entry currency (major units)",
    )
    max_teams = models.PositiveIntegerField(null=True, blank=True)
    participation_type = models.CharField(
        max_length=20,
        choices=ParticipationType.choices,
        default=ParticipationType.INDIVIDUAL,
    )

    class Meta:
        ordering = ["tournament", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return f"{self.tournament.title} - {self.name}"

    @property
    def checkout_label(self) -> str:
        """Line item name shown on the hosted checkout page."""
        return f"{self.tournament.title} - {self.name}"
