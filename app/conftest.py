"""
Project-wide pytest configuration and fixtures.

This module adjusts settings for fast, isolated test runs and provides
fixtures shared by every app:
    - Fast password hashing
    - A fresh session registry per test
    - Temporary MEDIA_ROOT for attachment storage
"""

import pytest


def pytest_configure():
    """Override settings that are slow or need external services."""
    from django.conf import settings

    # Use fast password hasher for tests (PBKDF2 is slow by design)
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py, test_consumers.py → e2e
    - test_models.py, test_keys.py, test_sessions.py, test_events.py → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py", "test_consumers.py"]
    unit_patterns = [
        "test_models.py",
        "test_keys.py",
        "test_sessions.py",
        "test_events.py",
        "test_locks.py",
        "test_transport.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def media_root(tmp_path, settings):
    """Store uploaded attachments in a per-test temporary directory."""
    settings.MEDIA_ROOT = tmp_path / "uploads"
    return settings.MEDIA_ROOT


@pytest.fixture(autouse=True)
def session_registry():
    """
    Reset the process-wide session registry around every test.

    Presence is derived from the registry, so leftover bindings from one
    test would leak into the snapshots observed by the next.
    """
    from chat.sessions import get_session_registry

    registry = get_session_registry()
    registry.clear()
    yield registry
    registry.clear()


@pytest.fixture
def transport():
    """
    Attach a recording transport to the process-wide relay engine.

    Services that push through get_relay_engine() (uploads, friend
    requests) are then observable without a Socket.IO server.
    """
    from chat.relay import get_relay_engine
    from chat.tests.transport import RecordingTransport

    engine = get_relay_engine()
    previous = engine.transport
    engine.transport = RecordingTransport()
    yield engine.transport
    engine.transport = previous
