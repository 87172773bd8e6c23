"""
Registrations app.

Owns the registration entry: one row per (category, participant) pair that
carries both the roster status and the payment status.

Modules:
    - models.py: Entry, EntryMember
    - managers.py: EntryQuerySet (conditional store writes)
    - services.py: EntryAdmissionService.ensure_entry()
    - polling.py: EntryPaymentPoller used after the checkout redirect
    - views.py: Entry API (ensure, list, status)
"""
