"""
Authentication app.

Holds the email-based User model shared by participants and organizers.
Bearer tokens are issued by rest_framework_simplejwt (see config/urls.py).
"""
