"""
Payment services.

- CheckoutService: Create a Stripe Checkout session for an unpaid entry
- EntrySettlementService: Apply a confirmed payment to an entry

Usage:
    from payments.services import CheckoutService, EntrySettlementService
"""

from payments.services.checkout_service import CheckoutService, CheckoutSession
from payments.services.settlement_service import (
    EntrySettlementService,
    SettlementOutcome,
)

__all__ = [
    "CheckoutService",
    "CheckoutSession",
    "EntrySettlementService",
    "SettlementOutcome",
]
