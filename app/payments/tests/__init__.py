"""
Tests for payments app.

This package contains test modules for:
- test_models.py: WebhookEvent model tests
- test_views.py: Checkout endpoint tests
- test_integration.py: Register, pay and confirm through the API

Service, adapter and webhook tests live beside their packages
(services/tests, adapters/tests, webhooks/tests).

Usage:
    pytest payments/
    pytest payments/tests/test_integration.py
"""
