"""
Tests for AccountService.

Covers registration, login, lookup, search, profile updates, presence
bookkeeping and account deletion.
"""

from datetime import datetime, timezone

import pytest
from freezegun import freeze_time

from authentication.constants import ACCOUNT_CONFIG
from authentication.models import User, UserStatus
from authentication.services import AccountService
from authentication.tests.factories import UserFactory
from core.exceptions import AuthError, ConflictError, NotFoundError, ValidationError


# =============================================================================
# TestRegister
# =============================================================================


class TestRegister:
    """Tests for AccountService.register()."""

    def test_creates_user_with_generated_avatar(self, db):
        """
        Registration stores the profile and derives the avatar from the handle.

        Why it matters: Every user needs an avatar reference from day one.
        """
        user = AccountService.register(
            handle="Dave",
            email="dave@example.com",
            password="secret123",
            display_name="Dave",
        )

        assert user.handle == "dave"
        assert user.check_password("secret123")
        assert user.bio == ACCOUNT_CONFIG.DEFAULT_BIO
        assert "seed=dave" in user.avatar
        assert ACCOUNT_CONFIG.DEFAULT_AVATAR_STYLE in user.avatar

    def test_custom_avatar_style(self, db):
        user = AccountService.register(
            handle="erin",
            email="erin@example.com",
            password="secret123",
            display_name="Erin",
            avatar_style="bottts",
        )

        assert "/bottts/" in user.avatar
        assert user.avatar_style == "bottts"

    def test_duplicate_handle_any_case_is_conflict(self, db):
        """
        A handle differing only in case is a duplicate.

        Why it matters: Handle uniqueness is case-insensitive.
        """
        UserFactory(handle="frank")

        with pytest.raises(ConflictError) as exc_info:
            AccountService.register(
                handle="FRANK",
                email="new@example.com",
                password="secret123",
                display_name="Frank",
            )

        assert exc_info.value.error_code == "HANDLE_EXISTS"
        assert exc_info.value.status_code == 409

    def test_duplicate_email_is_conflict(self, db):
        UserFactory(email="taken@example.com")

        with pytest.raises(ConflictError) as exc_info:
            AccountService.register(
                handle="newname",
                email="TAKEN@example.com",
                password="secret123",
                display_name="New",
            )

        assert exc_info.value.error_code == "EMAIL_EXISTS"

    def test_missing_fields_is_validation_error(self, db):
        with pytest.raises(ValidationError) as exc_info:
            AccountService.register(handle="", email="a@example.com", password="x", display_name="A")

        assert exc_info.value.error_code == "MISSING_FIELDS"
        assert User.objects.count() == 0

    def test_invalid_handle_is_validation_error(self, db):
        with pytest.raises(ValidationError) as exc_info:
            AccountService.register(
                handle="no spaces!",
                email="a@example.com",
                password="secret123",
                display_name="A",
            )

        assert exc_info.value.error_code == "INVALID_HANDLE"


# =============================================================================
# TestAuthenticate
# =============================================================================


class TestAuthenticate:
    """Tests for AccountService.authenticate()."""

    def test_login_by_handle(self, user):
        assert AccountService.authenticate("alice", "TestPass123!") == user

    def test_login_by_email_any_case(self, user):
        assert AccountService.authenticate("ALICE@example.com", "TestPass123!") == user

    @freeze_time("2024-01-15 12:00:00")
    def test_login_updates_last_seen(self, user):
        logged_in = AccountService.authenticate("alice", "TestPass123!")

        assert logged_in.last_seen == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def test_wrong_password_and_unknown_user_look_the_same(self, user):
        """
        Both failures raise the same generic AuthError.

        Why it matters: Callers must not learn which part was wrong.
        """
        with pytest.raises(AuthError) as wrong_password:
            AccountService.authenticate("alice", "nope")
        with pytest.raises(AuthError) as unknown_user:
            AccountService.authenticate("nobody", "TestPass123!")

        assert wrong_password.value.message == unknown_user.value.message
        assert wrong_password.value.status_code == 401

    def test_inactive_user_cannot_log_in(self, deactivated_user):
        with pytest.raises(AuthError):
            AccountService.authenticate(deactivated_user.handle, "TestPass123!")

    def test_issue_tokens_returns_pair(self, user):
        tokens = AccountService.issue_tokens(user)

        assert set(tokens) == {"access", "refresh"}


# =============================================================================
# TestLookup
# =============================================================================


class TestLookup:
    """Tests for get_user() and search()."""

    def test_get_user(self, user):
        assert AccountService.get_user(user.id) == user
        assert AccountService.get_user(str(user.id)) == user

    @pytest.mark.parametrize("bad_id", ["not-a-uuid", "00000000-0000-0000-0000-000000000000"])
    def test_get_unknown_user_is_not_found(self, db, bad_id):
        with pytest.raises(NotFoundError) as exc_info:
            AccountService.get_user(bad_id)

        assert exc_info.value.error_code == "USER_NOT_FOUND"

    def test_search_matches_handle_and_display_name(self, db):
        grace = UserFactory(handle="grace", display_name="Grace Hopper")
        hopper = UserFactory(handle="hoppy", display_name="Someone")
        UserFactory(handle="zed", display_name="Zed")

        by_name = list(AccountService.search("HOPPER"))
        by_handle = list(AccountService.search("hopp"))

        assert by_name == [grace]
        assert set(by_handle) == {grace, hopper}


# =============================================================================
# TestProfile
# =============================================================================


class TestProfile:
    """Tests for update_profile(), set_status() and mark_presence()."""

    def test_update_profile_fields(self, user):
        updated = AccountService.update_profile(user, display_name="Alice B", bio="Hi")

        updated.refresh_from_db()
        assert updated.display_name == "Alice B"
        assert updated.bio == "Hi"

    def test_update_ignores_unknown_fields(self, user):
        AccountService.update_profile(user, handle="hacked")

        user.refresh_from_db()
        assert user.handle == "alice"

    def test_update_email_taken_is_conflict(self, user, other_user):
        with pytest.raises(ConflictError):
            AccountService.update_profile(user, email=other_user.email)

    def test_set_status_rejects_unknown_value(self, user):
        with pytest.raises(ValidationError) as exc_info:
            AccountService.set_status(user.id, "sleeping")

        assert exc_info.value.error_code == "INVALID_STATUS"

    def test_set_status_persists(self, user):
        AccountService.set_status(user.id, UserStatus.BUSY)

        user.refresh_from_db()
        assert user.status == UserStatus.BUSY

    def test_mark_presence_toggles_status(self, user):
        AccountService.mark_presence(user.id, online=True)
        user.refresh_from_db()
        assert user.status == UserStatus.ONLINE

        AccountService.mark_presence(user.id, online=False)
        user.refresh_from_db()
        assert user.status == UserStatus.OFFLINE


# =============================================================================
# TestDeleteAccount
# =============================================================================


class TestDeleteAccount:
    """Tests for delete_account()."""

    def test_deletes_user(self, user):
        AccountService.delete_account(user)

        assert not User.objects.filter(handle="alice").exists()
