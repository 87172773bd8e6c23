"""
Pytest fixtures for registration tests.

Usage:
    def test_list_entries(authenticated_client, entry):
        response = authenticated_client.get(reverse("registrations:entries"))
        assert response.data[0]["id"] == str(entry.id)
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from registrations.tests.factories import EntryFactory
from tournaments.tests.factories import CategoryFactory


@pytest.fixture
def participant(db):
    """The user registering for a category."""
    return UserFactory()


@pytest.fixture
def category(db):
    """A category in an open tournament with a 25.00 fee."""
    return CategoryFactory()


@pytest.fixture
def entry(db, participant, category):
    """A pending, unpaid entry created by the participant."""
    return EntryFactory(created_by=participant, category=category)


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client(participant):
    """API client carrying the participant's bearer token."""
    client = APIClient()
    token = RefreshToken.for_user(participant).access_token
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture
def client_for():
    """Build an API client authenticated as any user."""

    def _client_for(user):
        client = APIClient()
        token = RefreshToken.for_user(user).access_token
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _client_for
