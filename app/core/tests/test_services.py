"""
Tests for BaseService.

Covers:
- Logger naming
- atomic(): commit, rollback, and DatabaseError mapped to StorageError
"""

import pytest
from django.db import DatabaseError

from authentication.models import User
from authentication.tests.factories import UserFactory
from core.exceptions import NotFoundError, StorageError
from core.services import BaseService


class SampleService(BaseService):
    pass


class TestGetLogger:
    def test_logger_named_after_service(self):
        assert SampleService.get_logger().name == f"{__name__}.SampleService"


# =============================================================================
# TestAtomic
# =============================================================================


class TestAtomic:
    """Tests for BaseService.atomic()."""

    def test_commits_on_success(self, db):
        with SampleService.atomic():
            UserFactory(handle="dana", email="dana@example.com")

        assert User.objects.filter(handle="dana").exists()

    def test_database_error_becomes_storage_error_after_rollback(self, db):
        """
        A failed durable write is reported, never half-applied.

        Why it matters: Callers push notifications only after a write
        succeeded, so a rolled-back write must surface as an error.
        """
        with pytest.raises(StorageError) as exc_info:
            with SampleService.atomic():
                UserFactory(handle="dana", email="dana@example.com")
                raise DatabaseError("disk full")

        assert exc_info.value.error_code == "STORAGE_ERROR"
        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, DatabaseError)
        assert not User.objects.filter(handle="dana").exists()

    def test_application_errors_pass_through(self, db):
        with pytest.raises(NotFoundError):
            with SampleService.atomic():
                UserFactory(handle="dana", email="dana@example.com")
                raise NotFoundError("gone")

        assert not User.objects.filter(handle="dana").exists()
