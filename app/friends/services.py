"""
Friend-relationship coordinator.

This module provides the FriendService class, which owns every
relationship transition between two users.

State machine per unordered pair:
    none -> pending(A->B) -> accepted | rejected
    accepted -> none (remove)

Independent, unilateral lists on the acting user:
    muted_users: mute / unmute
    blocked_users: block / unblock (block also removes the friend edge
        and closes pending requests between the pair)

Notifications (pushed only to live sessions):
    friend_request_received -> recipient, on request
    friend_request_accepted -> original sender, on accept

Related files:
    - models.py: FriendRequest
    - authentication.models: User relationship lists
    - chat.relay: push to live sessions
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from authentication.services import AccountService
from chat.events import Outbound
from chat.keys import conversation_key
from chat.relay import get_relay_engine, public_profile
from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import BaseService
from friends.models import FriendRequest, FriendRequestState, FriendshipStatus
from friends.serializers import FriendRequestSerializer

if TYPE_CHECKING:
    from uuid import UUID

    from authentication.models import User


class FriendService(BaseService):
    """
    Friend requests, friend list, mute and block.

    Usage:
        from friends.services import FriendService

        request = FriendService.send_request(alice, bob.id)
        FriendService.accept(request.id, bob)
        FriendService.status(alice, bob.id)   # "friends"
    """

    # =========================================================================
    # Requests
    # =========================================================================

    @classmethod
    def send_request(cls, sender: User, recipient_id: UUID | str) -> FriendRequest:
        """
        Ask ``recipient_id`` to become friends.

        Raises:
            ValidationError: Request to self
            NotFoundError: Unknown recipient
            PermissionDeniedError: Recipient blocked the sender
            ConflictError: Already friends, or a request is pending either way
        """
        recipient = AccountService.get_user(recipient_id)
        if recipient.pk == sender.pk:
            raise ValidationError("Cannot befriend yourself", error_code="SELF_REQUEST")
        if recipient.has_blocked(sender):
            raise PermissionDeniedError(
                "You cannot send a request to this user",
                error_code="BLOCKED",
            )
        if sender.is_friends_with(recipient):
            raise ConflictError("Already friends", error_code="ALREADY_FRIENDS")

        pair_key = conversation_key(sender.pk, recipient.pk)
        if FriendRequest.objects.pending().for_pair(pair_key).exists():
            raise ConflictError(
                "A friend request is already pending",
                error_code="REQUEST_PENDING",
            )

        # Concurrent requests are caught by the partial unique constraint
        try:
            with transaction.atomic():
                friend_request = FriendRequest.objects.create(
                    sender=sender,
                    recipient=recipient,
                    pair_key=pair_key,
                )
        except IntegrityError as exc:
            raise ConflictError(
                "A friend request is already pending",
                error_code="REQUEST_PENDING",
            ) from exc

        cls.get_logger().info(
            f"Friend request {friend_request.id}: {sender.id} -> {recipient.id}"
        )
        get_relay_engine().notify(
            recipient.pk,
            Outbound.FRIEND_REQUEST_RECEIVED,
            dict(FriendRequestSerializer(friend_request).data),
        )
        return friend_request

    @classmethod
    def get_request(cls, request_id: UUID | str) -> FriendRequest:
        try:
            return FriendRequest.objects.select_related("sender", "recipient").get(
                pk=request_id
            )
        except (FriendRequest.DoesNotExist, DjangoValidationError, ValueError) as exc:
            raise NotFoundError(
                "Friend request not found",
                error_code="REQUEST_NOT_FOUND",
            ) from exc

    @classmethod
    def _answerable(cls, request_id, user: User) -> FriendRequest:
        friend_request = cls.get_request(request_id)
        if friend_request.recipient_id != user.pk:
            raise PermissionDeniedError(
                "Only the recipient can answer this request",
                error_code="NOT_RECIPIENT",
            )
        return friend_request

    @staticmethod
    def _lock(friend_request: FriendRequest) -> FriendRequest:
        # Re-fetch with lock; a block or another answer may have closed it since
        return FriendRequest.objects.select_for_update().get(pk=friend_request.pk)

    @staticmethod
    def _transition(friend_request: FriendRequest, name: str) -> None:
        try:
            getattr(friend_request, name)()
        except TransitionNotAllowed as exc:
            raise ConflictError(
                "Friend request is no longer pending",
                error_code="REQUEST_NOT_PENDING",
                details={"state": friend_request.state},
            ) from exc

    @classmethod
    def accept(cls, request_id: UUID | str, accepter: User) -> FriendRequest:
        """
        Accept a pending request addressed to ``accepter``.

        Both users' friend lists gain the edge.

        Raises:
            NotFoundError: Unknown request
            PermissionDeniedError: Request is addressed to someone else
            ConflictError: Request is not pending
        """
        friend_request = cls._answerable(request_id, accepter)

        with cls.atomic():
            friend_request = cls._lock(friend_request)
            cls._transition(friend_request, "accept")
            friend_request.save(update_fields=["state", "responded_at", "updated_at"])
            # friends is symmetrical: one add updates both lists
            accepter.friends.add(friend_request.sender)

        cls.get_logger().info(
            f"Friend request {friend_request.id} accepted by {accepter.id}"
        )
        get_relay_engine().notify(
            friend_request.sender_id,
            Outbound.FRIEND_REQUEST_ACCEPTED,
            {
                "request_id": str(friend_request.id),
                "user": public_profile(accepter),
            },
        )
        return friend_request

    @classmethod
    def reject(cls, request_id: UUID | str, rejecter: User) -> FriendRequest:
        """Reject a pending request addressed to ``rejecter``. No list changes."""
        friend_request = cls._answerable(request_id, rejecter)

        with cls.atomic():
            friend_request = cls._lock(friend_request)
            cls._transition(friend_request, "reject")
            friend_request.save(update_fields=["state", "responded_at", "updated_at"])

        cls.get_logger().info(
            f"Friend request {friend_request.id} rejected by {rejecter.id}"
        )
        return friend_request

    # =========================================================================
    # Friend list
    # =========================================================================

    @classmethod
    def remove(cls, user: User, friend_id: UUID | str) -> None:
        """Remove the friend edge in both directions. No-op if not friends."""
        friend = AccountService.get_user(friend_id)
        with cls.atomic():
            user.friends.remove(friend)
        cls.get_logger().info(f"{user.id} and {friend.id} are no longer friends")

    @staticmethod
    def friends(user: User):
        return user.friends.all()

    @staticmethod
    def incoming(user: User):
        return FriendRequest.objects.pending().filter(recipient=user).select_related(
            "sender", "recipient"
        )

    @staticmethod
    def outgoing(user: User):
        return FriendRequest.objects.pending().filter(sender=user).select_related(
            "sender", "recipient"
        )

    @classmethod
    def status(cls, user: User, other_id: UUID | str) -> str:
        """
        Relationship between ``user`` and ``other_id``, from ``user``'s side.

        Returns:
            One of FriendshipStatus: blocked (either way), friends,
            pending_sent, pending_received or none
        """
        other = AccountService.get_user(other_id)
        if user.has_blocked(other) or other.has_blocked(user):
            return FriendshipStatus.BLOCKED
        if user.is_friends_with(other):
            return FriendshipStatus.FRIENDS

        pending = (
            FriendRequest.objects.pending()
            .for_pair(conversation_key(user.pk, other.pk))
            .first()
        )
        if pending is None:
            return FriendshipStatus.NONE
        if pending.sender_id == user.pk:
            return FriendshipStatus.PENDING_SENT
        return FriendshipStatus.PENDING_RECEIVED

    # =========================================================================
    # Mute / block
    # =========================================================================

    @classmethod
    def _target(cls, user: User, target_id) -> User:
        target = AccountService.get_user(target_id)
        if target.pk == user.pk:
            raise ValidationError("Cannot target yourself", error_code="SELF_TARGET")
        return target

    @classmethod
    def mute(cls, user: User, target_id: UUID | str) -> None:
        target = cls._target(user, target_id)
        with cls.atomic():
            user.muted_users.add(target)
        cls.get_logger().info(f"{user.id} muted {target.id}")

    @classmethod
    def unmute(cls, user: User, target_id: UUID | str) -> None:
        target = cls._target(user, target_id)
        with cls.atomic():
            user.muted_users.remove(target)
        cls.get_logger().info(f"{user.id} unmuted {target.id}")

    @classmethod
    def block(cls, user: User, target_id: UUID | str) -> None:
        """
        Block ``target_id``.

        Also removes any friend edge and closes pending requests between
        the two, so neither can be accepted later.
        """
        target = cls._target(user, target_id)
        pair_key = conversation_key(user.pk, target.pk)
        with cls.atomic():
            user.blocked_users.add(target)
            user.friends.remove(target)
            FriendRequest.objects.pending().for_pair(pair_key).update(
                state=FriendRequestState.REJECTED,
                responded_at=timezone.now(),
                updated_at=timezone.now(),
            )
        cls.get_logger().info(f"{user.id} blocked {target.id}")

    @classmethod
    def unblock(cls, user: User, target_id: UUID | str) -> None:
        target = cls._target(user, target_id)
        with cls.atomic():
            user.blocked_users.remove(target)
        cls.get_logger().info(f"{user.id} unblocked {target.id}")

