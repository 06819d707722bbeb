"""
Authentication application.

This app owns user identity: registration, login, public profiles,
the user directory and account deletion.

Key components:
    - User model: handle-based identity with profile and relationship lists
    - AccountService: Business logic for account operations
    - JWT tokens (simplejwt) for the REST API and the Socket.IO handshake

Usage:
    from authentication.models import User
    from authentication.services import AccountService
"""
