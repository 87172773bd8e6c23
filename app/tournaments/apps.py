"""
Django app configuration for tournaments.
"""

from django.apps import AppConfig


class TournamentsConfig(AppConfig):
    """Configuration for the tournaments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "tournaments"
    verbose_name = "Tournaments"
