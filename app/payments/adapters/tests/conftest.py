"""
Pytest fixtures for Stripe adapter tests.

This module provides fixtures for testing the Stripe adapter, including
mock Stripe API responses, error conditions, and test data.

Sections:
    - Test Data Fixtures
    - Mock Stripe Client Fixtures
    - Mock Stripe Error Fixtures
"""

import uuid
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from payments.adapters import CreateCheckoutSessionParams


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def entry_id():
    """Generate a random entry UUID for testing."""
    return uuid.uuid4()


@pytest.fixture
def checkout_params(entry_id):
    """Valid parameters for a one-line-item checkout."""
    return CreateCheckoutSessionParams(
        line_item_name="Spring Open - Men's Singles",
        unit_amount_cents=2500,
        currency="usd",
        success_url="https://app.example.com/done?entry_id=1&session_id={CHECKOUT_SESSION_ID}",
        cancel_url="https://app.example.com/cancel?entry_id=1",
        idempotency_key=f"checkout:{entry_id}:1:abcd1234",
        metadata={"entry_id": str(entry_id)},
    )


# =============================================================================
# Mock Stripe Client Fixtures
# =============================================================================


@pytest.fixture
def mock_stripe_http_client():
    """Mock stripe.RequestsClient so no real HTTP client is built."""
    with patch("stripe.RequestsClient") as mock:
        yield mock


@pytest.fixture
def mock_checkout_session(mock_stripe_http_client):
    """Mock stripe.checkout.Session API with a successful create."""
    with patch("stripe.checkout.Session") as mock:
        mock.create.return_value = SimpleNamespace(
            id="cs_test_a1b2c3",
            url="https://checkout.stripe.com/c/pay/cs_test_a1b2c3",
        )
        yield mock


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""
    return stripe.InvalidRequestError(
        "Invalid currency: xyz",
        "currency",
        code="parameter_invalid",
    )


@pytest.fixture
def rate_limit_error():
    """Create a Stripe RateLimitError."""
    return stripe.RateLimitError(message="Too many requests hit the API too quickly.")


@pytest.fixture
def api_connection_error():
    """Create a Stripe APIConnectionError (also raised on timeouts)."""
    return stripe.APIConnectionError(message="Could not connect to Stripe.")


@pytest.fixture
def api_error():
    """Create a Stripe APIError."""
    return stripe.APIError(message="Something went wrong on Stripe's end.")


@pytest.fixture
def authentication_error():
    """Create a Stripe AuthenticationError."""
    return stripe.AuthenticationError(message="Invalid API Key provided.")


@pytest.fixture
def idempotency_error():
    """Create a Stripe IdempotencyError (key reused with other parameters)."""
    return stripe.IdempotencyError(
        message="Keys for idempotent requests can only be used with the same "
        "parameters they were first used with."
    )
