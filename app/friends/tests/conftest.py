"""
Test configuration and fixtures for friends tests.

This module provides:
- Three users (alice, bob, carol)
- JWT-authenticated API clients
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.sessions import Session


@pytest.fixture
def alice(db):
    return UserFactory(handle="alice", email="alice@example.com", display_name="Alice")


@pytest.fixture
def bob(db):
    return UserFactory(handle="bob", email="bob@example.com", display_name="Bob")


@pytest.fixture
def carol(db):
    return UserFactory(handle="carol", email="carol@example.com", display_name="Carol")


@pytest.fixture
def go_online(session_registry):
    """Bind a live session "sid-<handle>" for a user."""

    def _bind(user):
        session_registry.bind(
            Session(user_id=str(user.id), connection_id=f"sid-{user.handle}", handle=user.handle)
        )

    return _bind


@pytest.fixture
def client_for(db):
    """Factory to create JWT-authenticated clients."""

    def _make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client
