"""
Serializers for payment endpoints.
"""

from rest_framework import serializers


class CheckoutRequestSerializer(serializers.Serializer):
    """Request body for POST /checkout/."""

    entry_id = serializers.UUIDField()
    success_url = serializers.URLField(required=False, allow_blank=False)
    cancel_url = serializers.URLField(required=False, allow_blank=False)


class CheckoutResponseSerializer(serializers.Serializer):
    url = serializers.URLField()
    session_id = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    error_code = serializers.CharField()
