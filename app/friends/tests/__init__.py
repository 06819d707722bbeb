"""
Tests for friends app.

This package contains test modules for:
- test_services.py: FriendService state transitions and notifications
- test_views.py: REST API endpoint tests
"""
