"""
Django admin configuration for tournaments.

Organizers manage tournaments and categories here; the API only reads them.
"""

from django.contrib import admin

from tournaments.models import Category, Tournament


class CategoryInline(admin.TabularInline):
    model = Category
    extra = 0
    fields = ("name", "registration_fee", "participation_type", "max_teams")


@admin.register(Tournament)
class TournamentAdmin(admin.ModelAdmin):
    """Admin for tournaments with their categories inline."""

    list_display = (
        "title",
        "organizer",
        "status",
        "registration_start_date",
        "registration_end_date",
        "start_date",
    )
    list_filter = ("status",)
    search_fields = ("title", "venue_name", "organizer__email")
    raw_id_fields = ("organizer",)
    inlines = [CategoryInline]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "tournament", "registration_fee", "participation_type")
    list_filter = ("participation_type", "tournament__status")
    search_fields = ("name", "tournament__title")
    raw_id_fields = ("tournament",)
