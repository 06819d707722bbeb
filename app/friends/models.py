"""
Friend request model.

Models:
    FriendRequestState: pending, accepted, rejected
    FriendshipStatus: Derived relationship between two users
    FriendRequest: A request from one user to another

Design Decisions:
    - pair_key is the sorted pair of user ids, so "one pending request per
      unordered pair" is a single partial unique constraint
    - Accepted friendships live on User.friends; the request row is the
      audit trail of how the edge came to be
    - state is an FSMField; accept() and reject() are the only ways out
      of pending for a single request
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class FriendRequestState(models.TextChoices):
    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    REJECTED = "rejected", "Rejected"


class FriendshipStatus(models.TextChoices):
    """Relationship between two users, as seen from the first one."""

    NONE = "none", "None"
    FRIENDS = "friends", "Friends"
    PENDING_SENT = "pending_sent", "Request sent"
    PENDING_RECEIVED = "pending_received", "Request received"
    BLOCKED = "blocked", "Blocked"


class FriendRequestQuerySet(models.QuerySet):
    def pending(self):
        return self.filter(state=FriendRequestState.PENDING)

    def for_pair(self, pair_key: str):
        return self.filter(pair_key=pair_key)


class FriendRequest(UUIDPrimaryKeyMixin, BaseModel):
    """
    A friend request.

    Fields:
        sender: User who asked
        recipient: User who may accept or reject
        state: pending until the recipient answers
        pair_key: Sorted sender/recipient ids
        responded_at: When the request left the pending state
    """

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_friend_requests",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_friend_requests",
    )
    state = FSMField(
        default=FriendRequestState.PENDING,
        choices=FriendRequestState.choices,
        db_index=True,
    )
    pair_key = models.CharField(max_length=80, db_index=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    objects = FriendRequestQuerySet.as_manager()

    class Meta:
        db_table = "friends_request"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["pair_key"],
                condition=Q(state="pending"),
                name="friends_one_pending_per_pair",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.sender_id} -> {self.recipient_id} ({self.state})"

    @property
    def is_pending(self) -> bool:
        return self.state == FriendRequestState.PENDING

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=state,
        source=FriendRequestState.PENDING,
        target=FriendRequestState.ACCEPTED,
    )
    def accept(self):
        """
        Transition: PENDING -> ACCEPTED

        The friend edge itself is added by the caller.
        """
        self.responded_at = timezone.now()

    @transition(
        field=state,
        source=FriendRequestState.PENDING,
        target=FriendRequestState.REJECTED,
    )
    def reject(self):
        """Transition: PENDING -> REJECTED"""
        self.responded_at = timezone.now()
