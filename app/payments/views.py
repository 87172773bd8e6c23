"""
DRF views for payments app.

Endpoints:
    POST /api/v1/payments/checkout/ - Create a Stripe Checkout session for an entry

The Stripe webhook endpoint lives in payments.webhooks.views.

Security:
    - Checkout requires a bearer token; the caller must be the entrant or
      the tournament organizer
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
    StorageUnavailableError,
    ValidationError,
)
from payments.serializers import (
    CheckoutRequestSerializer,
    CheckoutResponseSerializer,
    ErrorResponseSerializer,
)
from payments.services import CheckoutService

# Checked in order; first match wins
ERROR_STATUS_CODES: tuple[tuple[type[BaseApplicationError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (StorageUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
)


def error_status_code(error: BaseApplicationError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


class CreateCheckoutSessionView(APIView):
    """
    Create Stripe Checkout session for a registration entry.

    POST /api/v1/payments/checkout/

    Request body:
        {
            "entry_id": "6f1c...",
            "success_url": "https://app.example.com/done",   # optional
            "cancel_url": "https://app.example.com/cancel"   # optional
        }

    Returns:
        {"url": "https://checkout.stripe.com/...", "session_id": "cs_..."}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_checkout_session",
        summary="Start checkout for an entry",
        request=CheckoutRequestSerializer,
        responses={
            200: CheckoutResponseSerializer,
            400: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Registration closed or invalid fee",
            ),
            403: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Caller is neither entrant nor organizer",
            ),
            404: OpenApiResponse(
                response=ErrorResponseSerializer, description="Entry not found"
            ),
            409: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Entry already paid, waived or refunded",
            ),
            502: OpenApiResponse(
                response=ErrorResponseSerializer, description="Stripe call failed"
            ),
            503: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Entry store unavailable, retry",
            ),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            session = CheckoutService.create_checkout(
                data["entry_id"],
                caller=request.user,
                success_url=data.get("success_url"),
                cancel_url=data.get("cancel_url"),
            )
        except BaseApplicationError as e:
            body = {"error": e.message, "error_code": e.error_code}
            return Response(body, status=error_status_code(e))

        return Response({"url": session.url, "session_id": session.session_id})
