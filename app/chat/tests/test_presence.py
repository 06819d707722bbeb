"""
Tests for PresenceBroadcaster.

Presence is derived from the session registry: every join or leave
pushes the full online_users snapshot to every live session, plus a
user_status_changed point event.
"""

import pytest
from asgiref.sync import async_to_sync

from authentication.models import UserStatus
from chat.events import Outbound
from chat.presence import PresenceBroadcaster
from core.exceptions import ValidationError


@pytest.fixture
def presence(engine):
    return PresenceBroadcaster(engine)


# =============================================================================
# TestComeOnline
# =============================================================================


class TestComeOnline:
    """Tests for come_online()."""

    def test_binds_session_and_marks_user_online(self, presence, session_registry, alice):
        async_to_sync(presence.come_online)(alice, "c-alice")

        assert session_registry.lookup(str(alice.id)).connection_id == "c-alice"
        alice.refresh_from_db()
        assert alice.status == UserStatus.ONLINE

    def test_everyone_gets_snapshot_others_get_status(self, presence, recorder, alice, bob):
        """
        A join is announced to every live session.

        Why it matters: Each client renders its online list from the
        latest snapshot; the joining user needs it too.
        """
        async_to_sync(presence.come_online)(alice, "c-alice")
        recorder.clear()

        async_to_sync(presence.come_online)(bob, "c-bob")

        snapshots = recorder.named(Outbound.ONLINE_USERS)
        assert {cid for cid, _ in snapshots} == {"c-alice", "c-bob"}
        [(_, snapshot)] = [entry for entry in snapshots if entry[0] == "c-bob"]
        assert [entry["handle"] for entry in snapshot] == ["alice", "bob"]

        assert recorder.named(Outbound.USER_STATUS_CHANGED) == [
            ("c-alice", {"user_id": str(bob.id), "status": "online"})
        ]

    def test_announced_profile_overrides_stored_one(self, presence, alice):
        async_to_sync(presence.come_online)(alice, "c-alice", display_name="Ally", avatar="a.png")

        [entry] = presence.online_users()
        assert entry == {
            "user_id": str(alice.id),
            "handle": "alice",
            "display_name": "Ally",
            "avatar": "a.png",
        }

    def test_reconnect_returns_replaced_session(self, presence, session_registry, alice):
        async_to_sync(presence.come_online)(alice, "old")

        replaced = async_to_sync(presence.come_online)(alice, "new")

        assert replaced.connection_id == "old"
        assert len(session_registry) == 1


# =============================================================================
# TestGoOffline
# =============================================================================


class TestGoOffline:
    """Tests for go_offline()."""

    def test_leave_is_announced(self, presence, recorder, alice, bob):
        async_to_sync(presence.come_online)(alice, "c-alice")
        async_to_sync(presence.come_online)(bob, "c-bob")
        recorder.clear()

        assert async_to_sync(presence.go_offline)(bob.id, "c-bob") is True

        assert recorder.named(Outbound.ONLINE_USERS)[0] == (
            "c-alice",
            [
                {
                    "user_id": str(alice.id),
                    "handle": "alice",
                    "display_name": "Alice",
                    "avatar": alice.avatar,
                }
            ],
        )
        assert recorder.named(Outbound.USER_STATUS_CHANGED) == [
            ("c-alice", {"user_id": str(bob.id), "status": "offline"})
        ]
        bob.refresh_from_db()
        assert bob.status == UserStatus.OFFLINE

    def test_stale_connection_changes_nothing(self, presence, recorder, session_registry, alice):
        """
        The old tab closing after a reconnect keeps the user online.

        Why it matters: Presence must follow the authoritative session
        only.
        """
        async_to_sync(presence.come_online)(alice, "old")
        async_to_sync(presence.come_online)(alice, "new")
        recorder.clear()

        assert async_to_sync(presence.go_offline)(alice.id, "old") is False

        assert session_registry.lookup(str(alice.id)).connection_id == "new"
        assert recorder.pushes == []

    def test_unknown_user(self, presence, db):
        assert async_to_sync(presence.go_offline)("nobody") is False


# =============================================================================
# TestSetStatus
# =============================================================================


class TestSetStatus:
    """Tests for set_status()."""

    def test_status_persisted_and_broadcast(self, presence, recorder, alice, bob):
        async_to_sync(presence.come_online)(alice, "c-alice")
        async_to_sync(presence.come_online)(bob, "c-bob")
        recorder.clear()

        async_to_sync(presence.set_status)(alice.id, "away")

        alice.refresh_from_db()
        assert alice.status == "away"
        assert {cid for cid, _ in recorder.named(Outbound.USER_STATUS_CHANGED)} == {
            "c-alice",
            "c-bob",
        }

    def test_invalid_status(self, presence, alice):
        with pytest.raises(ValidationError):
            async_to_sync(presence.set_status)(alice.id, "hiding")
