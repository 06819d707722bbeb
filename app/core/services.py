"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- BaseService: Base class with logging and transaction utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views, consumers and
    models. Views and consumers handle transport concerns, models handle
    data, services handle logic.

Failure Handling:
    Services raise core.exceptions for every failure (validation, auth,
    conflict, not found, storage). The REST layer renders them through
    core.exception_handler and the Socket.IO namespace turns them into
    error frames, so both transports report the same error codes.

Usage:
    from core.services import BaseService
    from core.exceptions import ConflictError

    class AccountService(BaseService):
        @classmethod
        def register(cls, handle: str, password: str) -> User:
            if User.objects.filter(handle__iexact=handle).exists():
                raise ConflictError("Handle already taken", "HANDLE_EXISTS")

            with cls.atomic():
                user = User.objects.create_user(handle=handle, password=password)

            cls.get_logger().info(f"Registered user {user.id}")
            return user
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import DatabaseError, transaction

from core.exceptions import StorageError

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management with storage failure mapping

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Raise core.exceptions for expected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back. Database failures surface as
        StorageError once the rollback has happened, so callers
        never see a half-applied write reported as success.

        Example:
            with cls.atomic():
                message = Message.objects.create(...)
                message.mark_delivered()
        """
        try:
            with transaction.atomic():
                yield
        except DatabaseError as exc:
            cls.get_logger().exception(f"Durable write failed: {exc}")
            raise StorageError(
                "The change could not be saved",
                error_code="STORAGE_ERROR",
            ) from exc
