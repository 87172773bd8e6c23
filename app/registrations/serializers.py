"""
Serializers for the Entry API.

Related files:
    - views.py: Entry endpoints
"""

from rest_framework import serializers

from registrations.models import Entry


class EntryAdmissionSerializer(serializers.Serializer):
    """Request body for POST /entries/."""

    category_id = serializers.UUIDField()


class EntryAdmissionResultSerializer(serializers.Serializer):
    """Response body for POST /entries/."""

    entry_id = serializers.UUIDField()
    created = serializers.BooleanField()


class EntrySerializer(serializers.ModelSerializer):
    """
    Entry with its category and tournament summary.

    Returned by the list endpoint and by the status endpoint the client
    polls after the checkout redirect.
    """

    category_id = serializers.UUIDField(read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True)
    registration_fee = serializers.DecimalField(
        source="category.registration_fee",
        max_digits=10,
        decimal_places=2,
        read_only=True,
    )
    tournament_id = serializers.UUIDField(source="category.tournament_id", read_only=True)
    tournament_title = serializers.CharField(
        source="category.tournament.title", read_only=True
    )

    class Meta:
        model = Entry
        fields = [
            "id",
            "category_id",
            "category_name",
            "registration_fee",
            "tournament_id",
            "tournament_title",
            "status",
            "payment_status",
            "payment_amount",
            "payment_currency",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields
