"""
Tests for friends API views.

Covers:
- Sending and answering requests over HTTP
- Friend list, removal and status
- Mute and block endpoints
"""

from django.urls import reverse

from friends.models import FriendRequestState
from friends.tests.factories import FriendRequestFactory


# =============================================================================
# TestRequestViews
# =============================================================================


class TestRequestViews:
    """Tests for /api/v1/friends/requests/..."""

    def test_send_request(self, client_for, alice, bob, transport):
        response = client_for(alice).post(
            reverse("friends:request-create"), {"recipient_id": str(bob.id)}, format="json"
        )

        assert response.status_code == 201
        assert response.data["recipient"]["handle"] == "bob"
        assert response.data["state"] == "pending"

    def test_duplicate_request_is_409(self, client_for, alice, bob, transport):
        FriendRequestFactory(sender=bob, recipient=alice)

        response = client_for(alice).post(
            reverse("friends:request-create"), {"recipient_id": str(bob.id)}, format="json"
        )

        assert response.status_code == 409
        assert response.data["error_code"] == "REQUEST_PENDING"

    def test_bad_recipient_id_is_400(self, client_for, alice):
        response = client_for(alice).post(
            reverse("friends:request-create"), {"recipient_id": "nope"}, format="json"
        )

        assert response.status_code == 400

    def test_incoming_and_outgoing(self, client_for, alice, bob):
        FriendRequestFactory(sender=alice, recipient=bob)

        incoming = client_for(bob).get(reverse("friends:request-incoming"))
        outgoing = client_for(alice).get(reverse("friends:request-outgoing"))

        assert [r["sender"]["handle"] for r in incoming.data] == ["alice"]
        assert [r["recipient"]["handle"] for r in outgoing.data] == ["bob"]

    def test_accept(self, client_for, alice, bob, transport):
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)

        response = client_for(bob).post(
            reverse("friends:request-accept", kwargs={"request_id": friend_request.id})
        )

        assert response.status_code == 200
        assert response.data["state"] == FriendRequestState.ACCEPTED
        assert alice.is_friends_with(bob)

    def test_sender_cannot_accept_own_request(self, client_for, alice, bob):
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)

        response = client_for(alice).post(
            reverse("friends:request-accept", kwargs={"request_id": friend_request.id})
        )

        assert response.status_code == 403

    def test_reject(self, client_for, alice, bob):
        friend_request = FriendRequestFactory(sender=alice, recipient=bob)

        response = client_for(bob).post(
            reverse("friends:request-reject", kwargs={"request_id": friend_request.id})
        )

        assert response.status_code == 200
        assert response.data["state"] == FriendRequestState.REJECTED


# =============================================================================
# TestFriendViews
# =============================================================================


class TestFriendViews:
    """Tests for the friend list, removal and status endpoints."""

    def test_list_friends(self, client_for, alice, bob, carol):
        alice.friends.add(bob, carol)

        response = client_for(alice).get(reverse("friends:friend-list"))

        assert response.status_code == 200
        assert [f["handle"] for f in response.data] == ["bob", "carol"]

    def test_remove_friend(self, client_for, alice, bob):
        alice.friends.add(bob)

        response = client_for(alice).delete(
            reverse("friends:friend-detail", kwargs={"user_id": bob.id})
        )

        assert response.status_code == 204
        assert not bob.is_friends_with(alice)

    def test_status(self, client_for, alice, bob):
        FriendRequestFactory(sender=bob, recipient=alice)

        response = client_for(alice).get(
            reverse("friends:status", kwargs={"user_id": bob.id})
        )

        assert response.data == {"user_id": str(bob.id), "status": "pending_received"}


# =============================================================================
# TestMuteBlockViews
# =============================================================================


class TestMuteBlockViews:
    """Tests for mute and block endpoints."""

    def test_mute_and_unmute(self, client_for, alice, bob):
        url = reverse("friends:mute", kwargs={"user_id": bob.id})
        client = client_for(alice)

        muted = client.post(url)
        unmuted = client.delete(url)

        assert muted.status_code == 200
        assert muted.data["muted_users"] == [str(bob.id)]
        assert unmuted.data["muted_users"] == []

    def test_block(self, client_for, alice, bob):
        response = client_for(alice).post(reverse("friends:block", kwargs={"user_id": bob.id}))

        assert response.status_code == 200
        assert response.data["blocked_users"] == [str(bob.id)]

    def test_block_self_is_400(self, client_for, alice):
        response = client_for(alice).post(reverse("friends:block", kwargs={"user_id": alice.id}))

        assert response.status_code == 400
        assert response.data["error_code"] == "SELF_TARGET"

    def test_block_unknown_user_is_404(self, client_for, alice):
        response = client_for(alice).post(
            "/api/v1/friends/block/00000000-0000-0000-0000-000000000000/"
        )

        assert response.status_code == 404
