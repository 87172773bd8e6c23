"""
URL configuration for the registrations app.

All routes are prefixed with /api/v1/registrations/ when included in the main URLconf.
"""

from django.urls import path

from registrations.views import EntryDetailView, EntryListCreateView

app_name = "registrations"

urlpatterns = [
    path("entries/", EntryListCreateView.as_view(), name="entries"),
    path("entries/<uuid:entry_id>/", EntryDetailView.as_view(), name="entry_detail"),
]
