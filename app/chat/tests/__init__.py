"""
Tests for chat app.

This package contains test modules for:
- test_keys.py / test_sessions.py / test_locks.py: building blocks
- test_repository.py: message persistence
- test_relay.py: RelayEngine delivery semantics
- test_presence.py: presence broadcasting
- test_consumers.py: Socket.IO namespace handlers
- test_attachments.py / test_views.py: HTTP surface

Usage:
    pytest chat/tests/
    pytest chat/tests/test_relay.py
"""
