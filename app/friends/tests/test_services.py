"""
Tests for FriendService.

Covers:
- Request lifecycle: send, accept, reject
- Conflict rules: self, duplicates, already friends, blocked
- Friendship status from either side
- Mute and block lists, including block side effects
- Live notifications for requests and acceptances
"""

import pytest

from chat.events import Outbound
from core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from friends.models import FriendRequest, FriendRequestState, FriendshipStatus
from friends.services import FriendService
from friends.tests.factories import FriendRequestFactory


# =============================================================================
# TestSendRequest
# =============================================================================


class TestSendRequest:
    """Tests for FriendService.send_request()."""

    def test_creates_pending_request_and_notifies_recipient(
        self, alice, bob, transport, go_online
    ):
        """
        The recipient's live session learns about the request at once.

        Why it matters: Clients show incoming requests without polling.
        """
        go_online(bob)

        friend_request = FriendService.send_request(alice, bob.id)

        assert friend_request.is_pending
        [(connection_id, data)] = transport.named(Outbound.FRIEND_REQUEST_RECEIVED)
        assert connection_id == "sid-bob"
        assert data["id"] == str(friend_request.id)
        assert data["sender"]["handle"] == "alice"

    def test_offline_recipient_still_gets_request(self, alice, bob, transport):
        FriendService.send_request(alice, bob.id)

        assert FriendService.incoming(bob).count() == 1
        assert transport.pushes == []

    def test_cannot_befriend_self(self, alice):
        with pytest.raises(ValidationError) as exc_info:
            FriendService.send_request(alice, alice.id)

        assert exc_info.value.error_code == "SELF_REQUEST"

    def test_unknown_recipient(self, alice):
        with pytest.raises(NotFoundError):
            FriendService.send_request(alice, "00000000-0000-0000-0000-000000000000")

    def test_duplicate_in_either_direction(self, alice, bob, transport):
        """
        Only one request may be pending per pair.

        Why it matters: A second request from the other side would leave
        two competing requests for one relationship.
        """
        FriendService.send_request(alice, bob.id)

        with pytest.raises(ConflictError) as same_way:
            FriendService.send_request(alice, bob.id)
        with pytest.raises(ConflictError) as other_way:
            FriendService.send_request(bob, alice.id)

        assert same_way.value.error_code == "REQUEST_PENDING"
        assert other_way.value.error_code == "REQUEST_PENDING"

    def test_already_friends(self, alice, bob):
        alice.friends.add(bob)

        with pytest.raises(ConflictError) as exc_info:
            FriendService.send_request(alice, bob.id)

        assert exc_info.value.error_code == "ALREADY_FRIENDS"

    def test_blocked_by_recipient(self, alice, bob):
        bob.blocked_users.add(alice)

        with pytest.raises(PermissionDeniedError):
            FriendService.send_request(alice, bob.id)

    def test_new_request_after_rejection(self, alice, bob, transport):
        first = FriendService.send_request(alice, bob.id)
        FriendService.reject(first.id, bob)

        second = FriendService.send_request(alice, bob.id)

        assert second.id != first.id


# =============================================================================
# TestAnswerRequest
# =============================================================================


class TestAnswerRequest:
    """Tests for accept() and reject()."""

    def test_accept_makes_both_friends_and_notifies_sender(
        self, alice, bob, transport, go_online
    ):
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)
        go_online(alice)

        FriendService.accept(friend_request.id, bob)

        friend_request.refresh_from_db()
        assert friend_request.state == FriendRequestState.ACCEPTED
        assert friend_request.responded_at is not None
        assert alice.is_friends_with(bob)
        assert bob.is_friends_with(alice)
        [(connection_id, data)] = transport.named(Outbound.FRIEND_REQUEST_ACCEPTED)
        assert connection_id == "sid-alice"
        assert data["request_id"] == str(friend_request.id)
        assert data["user"]["handle"] == "bob"

    def test_reject_changes_no_lists(self, alice, bob, transport):
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)

        FriendService.reject(friend_request.id, bob)

        friend_request.refresh_from_db()
        assert friend_request.state == FriendRequestState.REJECTED
        assert not alice.is_friends_with(bob)

    def test_only_recipient_may_answer(self, alice, bob):
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)

        with pytest.raises(PermissionDeniedError) as exc_info:
            FriendService.accept(friend_request.id, alice)

        assert exc_info.value.error_code == "NOT_RECIPIENT"

    def test_cannot_answer_twice(self, alice, bob, transport):
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)
        FriendService.accept(friend_request.id, bob)

        with pytest.raises(ConflictError) as exc_info:
            FriendService.reject(friend_request.id, bob)

        assert exc_info.value.error_code == "REQUEST_NOT_PENDING"

    def test_block_landing_before_accept_is_kept(self, alice, bob, transport, mocker):
        """
        A block that closes the request after it was read wins over the accept.

        Why it matters: Block implies unfriend; a stale accept must not
        write the friendship back.
        """
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)
        answerable = FriendService._answerable

        def read_then_block(request_id, user):
            stale = answerable(request_id, user)
            FriendService.block(bob, alice.id)
            return stale

        mocker.patch.object(FriendService, "_answerable", side_effect=read_then_block)

        with pytest.raises(ConflictError) as exc_info:
            FriendService.accept(friend_request.id, bob)

        assert exc_info.value.error_code == "REQUEST_NOT_PENDING"
        friend_request.refresh_from_db()
        assert friend_request.state == FriendRequestState.REJECTED
        assert not alice.is_friends_with(bob)
        assert bob.has_blocked(alice)
        assert transport.named(Outbound.FRIEND_REQUEST_ACCEPTED) == []

    def test_accept_landing_before_reject_is_kept(self, alice, bob, transport, mocker):
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)
        answerable = FriendService._answerable

        def read_then_accept(request_id, user):
            stale = answerable(request_id, user)
            mocker.stopall()
            FriendService.accept(request_id, user)
            return stale

        mocker.patch.object(FriendService, "_answerable", side_effect=read_then_accept)

        with pytest.raises(ConflictError):
            FriendService.reject(friend_request.id, bob)

        friend_request.refresh_from_db()
        assert friend_request.state == FriendRequestState.ACCEPTED
        assert alice.is_friends_with(bob)

    @pytest.mark.parametrize("request_id", ["nope", "00000000-0000-0000-0000-000000000000"])
    def test_unknown_request(self, bob, request_id):
        with pytest.raises(NotFoundError) as exc_info:
            FriendService.accept(request_id, bob)

        assert exc_info.value.error_code == "REQUEST_NOT_FOUND"


# =============================================================================
# TestFriendList
# =============================================================================


class TestFriendList:
    """Tests for friends(), remove(), incoming(), outgoing() and status()."""

    def test_remove_is_symmetrical(self, alice, bob):
        alice.friends.add(bob)

        FriendService.remove(bob, alice.id)

        assert list(FriendService.friends(alice)) == []
        assert list(FriendService.friends(bob)) == []

    def test_incoming_and_outgoing(self, alice, bob, carol):
        to_bob = FriendRequestFactory(sender=alice, recipient=bob)
        from_carol = FriendRequestFactory(sender=carol, recipient=alice)

        assert list(FriendService.outgoing(alice)) == [to_bob]
        assert list(FriendService.incoming(alice)) == [from_carol]

    def test_status_from_both_sides(self, alice, bob, carol):
        FriendRequestFactory(sender=alice, recipient=bob)
        alice.friends.add(carol)

        assert FriendService.status(alice, bob.id) == FriendshipStatus.PENDING_SENT
        assert FriendService.status(bob, alice.id) == FriendshipStatus.PENDING_RECEIVED
        assert FriendService.status(alice, carol.id) == FriendshipStatus.FRIENDS
        assert FriendService.status(bob, carol.id) == FriendshipStatus.NONE

    def test_blocked_either_way(self, alice, bob):
        bob.blocked_users.add(alice)

        assert FriendService.status(alice, bob.id) == FriendshipStatus.BLOCKED
        assert FriendService.status(bob, alice.id) == FriendshipStatus.BLOCKED


# =============================================================================
# TestMuteAndBlock
# =============================================================================


class TestMuteAndBlock:
    """Tests for mute(), unmute(), block() and unblock()."""

    def test_mute_and_unmute(self, alice, bob):
        FriendService.mute(alice, bob.id)
        assert alice.muted_users.filter(pk=bob.pk).exists()

        FriendService.unmute(alice, bob.id)
        assert not alice.muted_users.filter(pk=bob.pk).exists()

    def test_mute_is_one_directional(self, alice, bob):
        FriendService.mute(alice, bob.id)

        assert not bob.muted_users.exists()

    def test_block_removes_friendship_and_pending_requests(self, alice, bob, carol):
        """
        Blocking ends every other relationship with the target.

        Why it matters: A blocked user must not stay a friend or be able
        to have an old request accepted later.
        """
        alice.friends.add(bob)
        pending = FriendRequestFactory(sender=carol, recipient=alice)

        FriendService.block(alice, bob.id)
        FriendService.block(alice, carol.id)

        pending.refresh_from_db()
        assert alice.has_blocked(bob)
        assert not alice.is_friends_with(bob)
        assert pending.state == FriendRequestState.REJECTED

    def test_unblock(self, alice, bob):
        FriendService.block(alice, bob.id)

        FriendService.unblock(alice, bob.id)

        assert not alice.has_blocked(bob)

    def test_cannot_target_self(self, alice):
        with pytest.raises(ValidationError) as exc_info:
            FriendService.block(alice, alice.id)

        assert exc_info.value.error_code == "SELF_TARGET"

    def test_pending_constraint_allows_history(self, alice, bob):
        FriendRequestFactory(sender=alice, recipient=bob, state=FriendRequestState.REJECTED)
        FriendRequestFactory(sender=alice, recipient=bob, state=FriendRequestState.REJECTED)

        assert FriendRequest.objects.count() == 2
