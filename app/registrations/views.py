"""
API views for registration entries.

Endpoints:
    GET  /api/v1/registrations/entries/           - List caller's entries, newest first
    POST /api/v1/registrations/entries/           - Ensure an entry for a category
    GET  /api/v1/registrations/entries/{id}/      - Entry status (creator or organizer)

Related files:
    - services.py: EntryAdmissionService
    - serializers.py: Request/response serializers
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import StorageUnavailableError
from registrations.exceptions import InvalidReferenceError
from registrations.models import Entry
from registrations.serializers import (
    EntryAdmissionResultSerializer,
    EntryAdmissionSerializer,
    EntrySerializer,
)
from registrations.services import EntryAdmissionService


class EntryListCreateView(APIView):
    """
    List the caller's entries or ensure an entry for a category.

    Authentication:
        Requires valid JWT token.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_my_entries",
        summary="List my entries",
        responses={200: EntrySerializer(many=True)},
        tags=["Registrations"],
    )
    def get(self, request):
        """List entries created by the caller, newest first."""
        entries = (
            Entry.objects.with_summary()
            .filter(created_by=request.user)
            .order_by("-created_at")
        )
        return Response(EntrySerializer(entries, many=True).data)

    @extend_schema(
        operation_id="ensure_entry",
        summary="Register for a category",
        description=(
            "Returns the caller's entry for the category, creating it on the "
            "first call. Repeated and concurrent calls return the same entry."
        ),
        request=EntryAdmissionSerializer,
        responses={
            201: OpenApiResponse(
                response=EntryAdmissionResultSerializer,
                description="Entry created",
            ),
            200: OpenApiResponse(
                response=EntryAdmissionResultSerializer,
                description="Entry already existed",
            ),
            400: OpenApiResponse(description="Unknown category"),
            503: OpenApiResponse(description="Entry store unavailable, retry"),
        },
        tags=["Registrations"],
    )
    def post(self, request):
        serializer = EntryAdmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = EntryAdmissionService.ensure_entry(
                request.user, serializer.validated_data["category_id"]
            )
        except InvalidReferenceError as e:
            return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)
        except StorageUnavailableError as e:
            return Response(e.to_dict(), status=status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response(
            {"entry_id": str(result.entry_id), "created": result.created},
            status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )


class EntryDetailView(APIView):
    """
    Entry status for the creator or the tournament organizer.

    GET /api/v1/registrations/entries/{entry_id}/

    Response:
        200 OK: Entry details
        403 Forbidden: Caller neither created the entry nor hosts the tournament
        404 Not Found: Entry doesn't exist
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_entry",
        summary="Get entry status",
        responses={
            200: EntrySerializer,
            403: OpenApiResponse(description="Access denied"),
            404: OpenApiResponse(description="Entry not found"),
        },
        tags=["Registrations"],
    )
    def get(self, request, entry_id):
        entry = Entry.objects.with_summary().filter(pk=entry_id).first()
        if entry is None:
            return Response(
                {"error": "Entry not found", "error_code": "ENTRY_NOT_FOUND"},
                status=status.HTTP_404_NOT_FOUND,
            )

        if request.user.pk not in (
            entry.created_by_id,
            entry.category.tournament.organizer_id,
        ):
            return Response(
                {"error": "You don't have access to this entry", "error_code": "PERMISSION_DENIED"},
                status=status.HTTP_403_FORBIDDEN,
            )

        return Response(EntrySerializer(entry).data)
