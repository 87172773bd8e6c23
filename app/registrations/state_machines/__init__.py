"""
State enums for registration entries.

Usage:
    from registrations.state_machines import EntryStatus, PaymentStatus
"""

from registrations.state_machines.states import EntryStatus, PaymentStatus

__all__ = [
    "EntryStatus",
    "PaymentStatus",
]
