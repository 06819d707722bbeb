"""
Test configuration and fixtures for chat tests.

This module provides:
- Two conversation participants plus an outsider
- A relay engine wired to a RecordingTransport
- A helper that binds a live session for a user
- API client helpers for authenticated requests

Usage:
    def test_example(engine, recorder, alice, bob, go_online):
        go_online(bob)
        async_to_sync(engine.send)(alice.id, bob.id, text="hi")
        assert recorder.named("receive_message")
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.locks import KeyedLock
from chat.relay import RelayEngine
from chat.sessions import Session
from chat.tests.transport import RecordingTransport


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    """Create the usual sender."""
    return UserFactory(handle="alice", email="alice@example.com", display_name="Alice")


@pytest.fixture
def bob(db):
    """Create the usual receiver."""
    return UserFactory(handle="bob", email="bob@example.com", display_name="Bob")


@pytest.fixture
def carol(db):
    """Create a user outside the alice/bob conversation."""
    return UserFactory(handle="carol", email="carol@example.com", display_name="Carol")


# =============================================================================
# Relay Fixtures
# =============================================================================


@pytest.fixture
def recorder():
    return RecordingTransport()


@pytest.fixture
def engine(session_registry, recorder):
    """
    A relay engine sharing the process registry, with recorded pushes.

    Uses its own lock family so tests never contend with the
    process-wide engine.
    """
    return RelayEngine(registry=session_registry, transport=recorder, locks=KeyedLock())


@pytest.fixture
def go_online(session_registry):
    """
    Bind a live session for a user without going through presence.

    The connection id is "sid-<handle>" unless given.

    Usage:
        go_online(bob)
        go_online(bob, "second-tab")
    """

    def _bind(user, connection_id=None):
        session = Session(
            user_id=str(user.id),
            connection_id=connection_id or f"sid-{user.handle}",
            handle=user.handle,
            display_name=user.display_name,
            avatar=user.avatar,
        )
        session_registry.bind(session)
        return session

    return _bind


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def client_for(db):
    """
    Factory to create JWT-authenticated clients.

    Usage:
        response = client_for(alice).get("/api/v1/chat/conversations/")
    """

    def _make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client


@pytest.fixture
def alice_client(client_for, alice):
    return client_for(alice)


@pytest.fixture
def bob_client(client_for, bob):
    return client_for(bob)
