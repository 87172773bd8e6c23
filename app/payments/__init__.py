"""
Payments app for Stripe Checkout of tournament entry fees.

This app handles:
- Checkout sessions for unpaid registration entries
- Stripe webhook verification and event storage
- Settling entries (paid + accepted) on checkout.session.completed

Related apps:
    - registrations: Entry model and its conditional store writes
    - tournaments: Registration window and category fees

Usage:
    from payments.services import CheckoutService

    session = CheckoutService.create_checkout(entry_id, caller=request.user)
"""
