"""
Stripe API adapter for checkout operations.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions. All Stripe calls should go through this
adapter to ensure consistent error handling, timeouts, idempotency,
and observability.

Features:
- Bounded timeout on every API call
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Idempotency keys on session creation

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_WEBHOOK_SECRET: Webhook signing secret
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- STRIPE_MAX_RETRIES: Network retries performed by the SDK (default: 0)

Usage:
    from payments.adapters import CreateCheckoutSessionParams, StripeAdapter

    session = StripeAdapter.create_checkout_session(
        CreateCheckoutSessionParams(
            line_item_name="Spring Open - Men's Singles",
            unit_amount_cents=2500,
            currency="usd",
            success_url="https://app.example.com/tournaments/register?payment=success",
            cancel_url="https://app.example.com/tournaments/register?payment=cancel",
            metadata={"entry_id": str(entry.id)},
            idempotency_key=IdempotencyKeyGenerator.generate("checkout", entry.id),
        )
    )
    session.url  # hosted payment page
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

import stripe
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from payments.exceptions import (
    ExternalProcessorError,
    InvalidSignatureError,
    StripeAPIUnavailableError,
    StripeInvalidRequestError,
    StripeRateLimitError,
)


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreateCheckoutSessionParams:
    """
    Parameters for creating a one-off Stripe Checkout Session.

    Attributes:
        line_item_name: Product name shown on the hosted page
        unit_amount_cents: Price in the smallest currency unit
        currency: ISO 4217 currency code (lowercase)
        success_url: Redirect after payment (may contain {CHECKOUT_SESSION_ID})
        cancel_url: Redirect when the payer backs out
        idempotency_key: Unique key for idempotent creation
        metadata: Key-value pairs echoed back in the webhook event
        allow_promotion_codes: Whether the payer may enter a promotion code
    """

    line_item_name: str
    unit_amount_cents: int
    currency: str
    success_url: str
    cancel_url: str
    idempotency_key: str
    metadata: dict[str, str] = field(default_factory=dict)
    allow_promotion_codes: bool = True

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if self.unit_amount_cents <= 0:
            raise ValueError("unit_amount_cents must be positive")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")
        if not self.currency:
            raise ValueError("currency is required")


@dataclass
class CheckoutSessionResult:
    """
    Result from Stripe Checkout Session creation.

    Attributes:
        id: Checkout Session ID (cs_xxx)
        url: Hosted payment page URL
    """

    id: str
    url: str


# =============================================================================
# Idempotency Key Generator
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for Stripe API calls.

    Format: "{operation}:{entity_id}:{attempt}:{hash}"

    The attempt component separates deliberate new attempts (a fresh
    checkout after the payer abandoned one) from network retries of the
    same attempt, which must reuse the key. The fingerprint carries
    the request parameters that vary between attempts and only feeds the
    hash.

    Example:
        key = IdempotencyKeyGenerator.generate(
            operation="checkout",
            entity_id=entry.id,
            attempt=int(timezone.now().timestamp()),
            fingerprint=f"{caller.pk}|{success_url}|{cancel_url}",
        )
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | str,
        attempt: int = 1,
        fingerprint: str = "",
    ) -> str:
        entity_str = str(entity_id)
        hash_input = (
            f"{operation}:{entity_str}:{attempt}:{fingerprint}:{settings.SECRET_KEY}"
        )
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    All methods are class methods - no instance state is maintained.

    Usage:
        session = StripeAdapter.create_checkout_session(params)
        event = StripeAdapter.verify_webhook_signature(payload, signature)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _configure_stripe() -> None:
        """Configure Stripe client with API key, timeout and retries."""
        if not settings.STRIPE_SECRET_KEY:
            raise ImproperlyConfigured("STRIPE_SECRET_KEY is not set")

        stripe.api_key = settings.STRIPE_SECRET_KEY
        stripe.max_network_retries = settings.STRIPE_MAX_RETRIES
        stripe.default_http_client = stripe.RequestsClient(
            timeout=settings.STRIPE_API_TIMEOUT_SECONDS
        )

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Checkout
    # =========================================================================

    @classmethod
    def create_checkout_session(
        cls,
        params: CreateCheckoutSessionParams,
    ) -> CheckoutSessionResult:
        """
        Create a Stripe Checkout Session in payment mode with one line item.

        Args:
            params: Parameters for creating the session

        Returns:
            CheckoutSessionResult with the session id and hosted page URL

        Raises:
            StripeInvalidRequestError: Invalid parameters, API key or reused
                idempotency key
            StripeRateLimitError: Rate limited
            StripeAPIUnavailableError: Network failure, timeout or Stripe outage
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_checkout_session",
            "unit_amount_cents": params.unit_amount_cents,
            "currency": params.currency,
            "entry_id": params.metadata.get("entry_id"),
            "idempotency_key": params.idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            session = stripe.checkout.Session.create(
                mode="payment",
                line_items=[
                    {
                        "quantity": 1,
                        "price_data": {
                            "currency": params.currency,
                            "unit_amount": params.unit_amount_cents,
                            "product_data": {"name": params.line_item_name},
                        },
                    }
                ],
                success_url=params.success_url,
                cancel_url=params.cancel_url,
                metadata=params.metadata,
                allow_promotion_codes=params.allow_promotion_codes,
                idempotency_key=params.idempotency_key,
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise  # Never reached, but satisfies type checker

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Stripe operation completed",
            extra={
                **log_context,
                "checkout_session_id": session.id,
                "duration_ms": duration_ms,
            },
        )

        return CheckoutSessionResult(id=session.id, url=session.url)

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def verify_webhook_signature(
        cls,
        payload: bytes,
        signature: str | None,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        Args:
            payload: Raw webhook payload bytes, exactly as received
            signature: Stripe-Signature header value

        Returns:
            Parsed event data dict

        Raises:
            InvalidSignatureError: Header missing, signature wrong or stale,
                or payload not valid JSON
        """
        if not signature:
            raise InvalidSignatureError("Missing Stripe-Signature header")

        if not settings.STRIPE_WEBHOOK_SECRET:
            cls.get_logger().error("STRIPE_WEBHOOK_SECRET is not set; rejecting webhook")
            raise InvalidSignatureError("Invalid webhook signature")

        try:
            stripe.Webhook.construct_event(
                payload,
                signature,
                settings.STRIPE_WEBHOOK_SECRET,
            )
        except stripe.SignatureVerificationError as e:
            raise InvalidSignatureError(
                "Invalid webhook signature",
                details={"error": str(e)},
            ) from e
        except ValueError as e:
            raise InvalidSignatureError(
                "Invalid webhook payload",
                details={"error": str(e)},
            ) from e

        return json.loads(payload)

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Raises:
            StripeInvalidRequestError: Invalid request, authentication failure
                or idempotency key conflict
            StripeRateLimitError: Rate limited
            StripeAPIUnavailableError: Network error, timeout or server error
        """
        logger = cls.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, ExternalProcessorError):
            raise error

        if isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )
            raise StripeInvalidRequestError(
                str(error),
                stripe_code=error.code,
            ) from error

        if isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeInvalidRequestError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            ) from error

        if isinstance(error, stripe.IdempotencyError):
            # Key reused with different parameters; resending cannot succeed
            logger.error(
                "Stripe rejected a reused idempotency key",
                extra=log_context,
            )
            raise StripeInvalidRequestError(
                "Checkout request conflicts with an earlier attempt",
                stripe_code="idempotency_error",
            ) from error

        if isinstance(error, stripe.RateLimitError):
            logger.warning("Rate limited by Stripe", extra=log_context)
            raise StripeRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
            ) from error

        if isinstance(error, stripe.APIConnectionError):
            # Includes client-side timeouts
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            ) from error

        if isinstance(error, stripe.StripeError):
            logger.error(
                f"Stripe API error: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Stripe service error. Please retry.",
                stripe_code=getattr(error, "code", None) or "api_error",
            ) from error

        # Not a Stripe error: let it propagate unchanged
        raise error
