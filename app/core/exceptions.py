"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across HTTP and Socket.IO transports
- Machine-readable error codes for client handling
- One HTTP status class per failure category

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Missing or malformed input (400)
    ├── AuthError - Bad credentials (401)
    │   └── PermissionDeniedError - Not allowed to act on the entity (403)
    ├── NotFoundError - Unknown user, message or request (404)
    ├── ConflictError - Duplicates, invalid state transitions (409)
    └── StorageError - Durable write did not complete (500)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Message must carry text or an attachment")

    # Raise with error code for client handling
    raise ConflictError("Handle already taken", error_code="HANDLE_EXISTS")

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.status_code)

Note:
    Validation, auth, conflict and not-found errors are expected and are
    always reported back to the caller in-band. StorageError is the only
    category that is also logged as an error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status used when rendered by the REST layer

    Example:
        try:
            user = AccountService.get_user(user_id)
        except NotFoundError as e:
            logger.warning(f"User not found: {e.error_code}")
            return Response(e.to_dict(), status=e.status_code)
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "User not found",
                "error_code": "USER_NOT_FOUND",
                "details": {"user_id": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Missing required fields
    - Invalid field formats (handle, media type, status)
    - Payload rules (a message needs text or an attachment)

    Nothing is mutated before this is raised.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class AuthError(BaseApplicationError):
    """
    Raised when credentials are invalid.

    The message is deliberately generic: it never says whether the
    handle or the password was wrong.
    """

    default_error_code: str = "INVALID_CREDENTIALS"
    status_code: int = 401


class PermissionDeniedError(AuthError):
    """
    Raised when the caller may not act on an entity.

    Use for:
    - Deleting someone else's message for everyone
    - Accepting or rejecting a request addressed to another user
    - Realtime events whose identity fields do not match the session
    - Messaging a user who has blocked the sender
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested entity is not found.

    Example:
        user = User.objects.filter(id=user_id).first()
        if not user:
            raise NotFoundError("User not found", error_code="USER_NOT_FOUND")
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current state.

    Use for:
    - Duplicate handle or email at registration
    - A second pending friend request for the same pair
    - Friend requests between users who are already friends
    - Accepting a request that is no longer pending
    """

    default_error_code: str = "CONFLICT"
    status_code: int = 409


class StorageError(BaseApplicationError):
    """
    Raised when a durable write did not complete.

    The enclosing transaction has been rolled back, so the caller must
    not report success. Surfaced as a 500.
    """

    default_error_code: str = "STORAGE_ERROR"
    status_code: int = 500
