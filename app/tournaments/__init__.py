"""
Tournaments app.

Tournament and Category are maintained by organizers through the admin and
are only read by the registration and payment flows (fee, registration
window, tournament status, organizer).
"""
