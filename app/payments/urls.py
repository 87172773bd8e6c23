"""
URL configuration for the payments app.

Routes:
    - POST /checkout/ - Create a Checkout session for an entry
    - POST /webhooks/stripe/ - Stripe webhook endpoint

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments.views import CreateCheckoutSessionView
from payments.webhooks.views import stripe_webhook

app_name = "payments"

urlpatterns = [
    path("checkout/", CreateCheckoutSessionView.as_view(), name="checkout"),
    path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
]
