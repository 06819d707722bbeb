"""
Account services.

This module provides the AccountService class for registration, login,
user lookup, profile updates and account deletion.

Related files:
    - models.py: User model
    - serializers.py: Input validation for the HTTP surface
    - chat.signals: Attachment blob cleanup on account deletion

Security:
    - Passwords hashed with Django's password hashers
    - Login failures use one generic message so callers cannot tell
      whether the handle or the password was wrong
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.constants import ACCOUNT_CONFIG, generate_avatar
from authentication.models import User, UserStatus
from core.exceptions import (
    AuthError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from core.services import BaseService

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID


class AccountService(BaseService):
    """
    Account lifecycle and directory lookups.

    Usage:
        from authentication.services import AccountService

        user = AccountService.register(
            handle="alice",
            email="alice@example.com",
            password="secret123",
            display_name="Alice",
        )
        user = AccountService.authenticate("alice@example.com", "secret123")
        tokens = AccountService.issue_tokens(user)
    """

    @classmethod
    def register(
        cls,
        handle: str,
        email: str,
        password: str,
        display_name: str,
        avatar_style: str | None = None,
    ) -> User:
        """
        Create a new account.

        Args:
            handle: Requested handle (stored lower-case)
            email: Email address (stored lower-case)
            password: Raw password
            display_name: Name shown to other users
            avatar_style: Style for the generated avatar

        Returns:
            The created User

        Raises:
            ValidationError: A required field is missing or malformed
            ConflictError: Handle or email already registered
        """
        if not all([handle, email, password, display_name]):
            raise ValidationError(
                "All fields are required",
                error_code="MISSING_FIELDS",
            )

        handle = handle.strip().lower()
        email = email.strip().lower()

        if not ACCOUNT_CONFIG.HANDLE_PATTERN.match(handle):
            raise ValidationError("Invalid handle", error_code="INVALID_HANDLE")

        if User.objects.filter(handle__iexact=handle).exists():
            raise ConflictError("Handle already taken", error_code="HANDLE_EXISTS")
        if User.objects.filter(email__iexact=email).exists():
            raise ConflictError("Email already registered", error_code="EMAIL_EXISTS")

        style = avatar_style or ACCOUNT_CONFIG.DEFAULT_AVATAR_STYLE

        # Concurrent registrations are caught by the unique constraints
        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    handle=handle,
                    email=email,
                    password=password,
                    display_name=display_name.strip(),
                    avatar=generate_avatar(handle, style),
                    avatar_style=style,
                )
        except IntegrityError as exc:
            raise ConflictError(
                "Handle or email already registered",
                error_code="ACCOUNT_EXISTS",
            ) from exc

        cls.get_logger().info(f"Registered user {user.id} ({user.handle})")
        return user

    @classmethod
    def authenticate(cls, login: str, password: str) -> User:
        """
        Verify credentials given a handle or an email.

        Updates last_seen on success.

        Raises:
            ValidationError: Login or password missing
            AuthError: Unknown account or wrong password
        """
        if not login or not password:
            raise ValidationError(
                "Handle and password required",
                error_code="MISSING_FIELDS",
            )

        login = login.strip()
        user = (
            User.objects.filter(Q(handle__iexact=login) | Q(email__iexact=login))
            .filter(is_active=True)
            .first()
        )
        if user is None or not user.check_password(password):
            cls.get_logger().warning("Failed login attempt")
            raise AuthError("Invalid credentials")

        cls.touch_last_seen(user.id)
        user.refresh_from_db(fields=["last_seen"])
        return user

    @staticmethod
    def issue_tokens(user: User) -> dict[str, str]:
        """Return a fresh JWT access/refresh pair for the user."""
        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}

    @staticmethod
    def get_user(user_id: UUID | str) -> User:
        """
        Fetch an active user by id.

        Raises:
            NotFoundError: No such user (malformed ids included)
        """
        try:
            return User.objects.get(pk=user_id, is_active=True)
        except (User.DoesNotExist, ValueError, TypeError, DjangoValidationError):
            raise NotFoundError("User not found", error_code="USER_NOT_FOUND")

    @staticmethod
    def get_users(user_ids: Iterable[UUID | str]) -> list[User]:
        """Fetch several users, silently skipping unknown ids."""
        return list(User.objects.filter(pk__in=list(user_ids), is_active=True))

    @staticmethod
    def list_users():
        """All active users, ordered by handle."""
        return User.objects.filter(is_active=True)

    @staticmethod
    def search(query: str):
        """
        Case-insensitive substring search over handle and display name.

        An empty query returns the plain directory listing.
        """
        users = User.objects.filter(is_active=True)
        query = (query or "").strip()
        if query:
            users = users.filter(
                Q(handle__icontains=query) | Q(display_name__icontains=query)
            )
        return users[: ACCOUNT_CONFIG.SEARCH_MAX_RESULTS]

    @classmethod
    def update_profile(cls, user: User, **fields) -> User:
        """
        Update profile fields on the user's own record.

        Args:
            user: User being updated
            **fields: Any of display_name, email, bio, status, avatar

        Raises:
            ValidationError: Unknown status value
            ConflictError: Email already used by another account
        """
        allowed = {"display_name", "email", "bio", "status", "avatar"}
        changes = {key: value for key, value in fields.items() if key in allowed}

        if "status" in changes and changes["status"] not in UserStatus.values:
            raise ValidationError("Invalid status", error_code="INVALID_STATUS")

        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            taken = (
                User.objects.filter(email__iexact=changes["email"])
                .exclude(pk=user.pk)
                .exists()
            )
            if taken:
                raise ConflictError(
                    "Email already registered",
                    error_code="EMAIL_EXISTS",
                )

        if not changes:
            return user

        for key, value in changes.items():
            setattr(user, key, value)

        with cls.atomic():
            user.save(update_fields=[*changes.keys(), "updated_at"])

        cls.get_logger().info(f"Profile updated for {user.id}: {sorted(changes)}")
        return user

    @classmethod
    def set_status(cls, user_id: UUID | str, status: str) -> User:
        """
        Persist the advertised status of a user.

        Raises:
            ValidationError: Unknown status value
            NotFoundError: No such user
        """
        if status not in UserStatus.values:
            raise ValidationError("Invalid status", error_code="INVALID_STATUS")

        user = cls.get_user(user_id)
        user.status = status
        with cls.atomic():
            user.save(update_fields=["status", "updated_at"])
        return user

    @classmethod
    def mark_presence(cls, user_id: UUID | str, online: bool) -> None:
        """Record a session bind or unbind on the user record."""
        status = UserStatus.ONLINE if online else UserStatus.OFFLINE
        with cls.atomic():
            User.objects.filter(pk=user_id).update(
                status=status,
                last_seen=timezone.now(),
            )

    @classmethod
    def touch_last_seen(cls, user_id: UUID | str) -> None:
        with cls.atomic():
            User.objects.filter(pk=user_id).update(last_seen=timezone.now())

    @classmethod
    def delete_account(cls, user: User) -> None:
        """
        Hard-delete an account.

        Messages, friend requests and hidden-message markers cascade with
        the user row; attachment blobs are removed after commit by
        chat.signals.
        """
        user_id = user.id
        with cls.atomic():
            user.delete()

        cls.get_logger().info(f"Deleted account {user_id}")
