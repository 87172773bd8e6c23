"""
Payments app configuration.

This app owns the payment half of the entry lifecycle:
- Stripe Checkout session creation
- Webhook verification and reconciliation
- Recovery tasks for failed webhook deliveries
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
