"""
Payment-specific exceptions for checkout and webhook reconciliation.

Exception Hierarchy:
    PermissionDeniedError
    └── CheckoutForbiddenError - Caller may not pay for this entry
    ValidationError
    ├── RegistrationClosedError - Tournament not accepting registrations
    ├── InvalidFeeError - Category fee missing or not positive
    └── InvalidSignatureError - Webhook signature missing or wrong
    ConflictError
    └── AlreadySettledError - Entry is no longer unpaid
    ExternalServiceError
    └── ExternalProcessorError - Payment processor call failed
        ├── StripeInvalidRequestError - Rejected request (permanent)
        ├── StripeRateLimitError - Rate limited (transient, retry)
        └── StripeAPIUnavailableError - Network or server error (transient, retry)

Entry lookups raise registrations.exceptions.EntryNotFoundError and
database outages raise core.exceptions.StorageUnavailableError.

Usage:
    from payments.exceptions import AlreadySettledError

    if entry.payment_status != PaymentStatus.UNPAID:
        raise AlreadySettledError(
            "Entry is already paid, waived or refunded",
            details={"payment_status": entry.payment_status},
        )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    ConflictError,
    ExternalServiceError,
    PermissionDeniedError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Checkout Preconditions
# =============================================================================


class CheckoutForbiddenError(PermissionDeniedError):
    """
    Raised when the caller neither created the entry nor organizes the tournament.

    Checked before any processor call, so a forbidden caller never causes a
    checkout session to be created.
    """

    default_error_code: str = "CHECKOUT_FORBIDDEN"


class RegistrationClosedError(ValidationError):
    """
    Raised when the tournament is not open for registration.

    Either the status is not registration_open or the current time is
    outside the registration window.
    """

    default_error_code: str = "REGISTRATION_CLOSED"


class AlreadySettledError(ConflictError):
    """
    Raised when checkout is requested for an entry that is not unpaid.

    Also raised when the entry was settled between the precondition check
    and the write of the checkout reference.
    """

    default_error_code: str = "ALREADY_SETTLED"


class InvalidFeeError(ValidationError):
    """Raised when the category fee is missing, zero or negative."""

    default_error_code: str = "INVALID_FEE"


# =============================================================================
# Webhook Authenticity
# =============================================================================


class InvalidSignatureError(ValidationError):
    """
    Raised when a webhook's Stripe-Signature header is missing or invalid.

    Nothing from the payload may be trusted or persisted after this error.
    """

    default_error_code: str = "INVALID_SIGNATURE"


# =============================================================================
# Payment Processor Errors
# =============================================================================


class ExternalProcessorError(ExternalServiceError):
    """
    Base exception for payment processor failures.

    Attributes:
        stripe_code: Stripe's internal error code, when Stripe supplied one
        is_retryable: Whether the same request may be sent again

    Example:
        try:
            StripeAdapter.create_checkout_session(params)
        except ExternalProcessorError as e:
            if e.is_retryable:
                ...
    """

    default_error_code: str = "EXTERNAL_PROCESSOR_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code


class StripeInvalidRequestError(ExternalProcessorError):
    """
    Raised when Stripe rejects the request itself.

    Covers invalid parameters, authentication failures (bad API key) and
    idempotency keys reused with different parameters.
    Retrying the same request will fail the same way.
    """

    default_error_code: str = "STRIPE_INVALID_REQUEST"


class StripeRateLimitError(ExternalProcessorError):
    """Raised when Stripe rate limits the account. Retry with backoff."""

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(ExternalProcessorError):
    """
    Raised on network failures, timeouts and Stripe server errors.

    Checkout sessions are created with an idempotency key, so a retry
    within the same second returns the same session.
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True
