"""
Chat system models.

This module defines the data models for direct messaging:
- Message: a message between two users, grouped by conversation key
- HiddenMessage: a per-user "delete for me" marker

Models:
    MediaKind: Kind of attached media (image, video, audio, document)
    Message: Text and/or attachment sent from one user to another
    HiddenMessage: Message hidden from one participant's history

Design Decisions:
    - Conversations are not stored: a conversation is every message with
      the same conversation_key (see chat.keys)
    - Each message gets a per-conversation sequence number, assigned on
      the serialized write path, so history order equals commit order
    - Delete for everyone keeps the row as a tombstone (id, sequence and
      timestamps survive, payload is scrubbed)
    - read is monotonic: it is only ever set, never cleared
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class MediaKind(models.TextChoices):
    """
    Kind of media attached to a message.

    Derived from the declared content type of the upload.
    """

    IMAGE = "image", "Image"
    VIDEO = "video", "Video"
    AUDIO = "audio", "Audio"
    DOCUMENT = "document", "Document"


class MessageQuerySet(models.QuerySet):
    """Query helpers for conversation history."""

    def in_conversation(self, key: str):
        return self.filter(conversation_key=key)

    def visible_to(self, user_id):
        """Exclude messages the user has hidden for themselves."""
        return self.exclude(hidden_for__user_id=user_id)

    def unread_for(self, user_id):
        return self.filter(receiver_id=user_id, read=False)

    def involving(self, user_id):
        return self.filter(Q(sender_id=user_id) | Q(receiver_id=user_id))


class Message(UUIDPrimaryKeyMixin, BaseModel):
    """
    A direct message from one user to another.

    A message carries text, an attachment, or both. Never neither.

    Fields:
        conversation_key: Canonical key of the sender/receiver pair
        sequence: Position within the conversation (1-based, gapless)
        sender: User who sent the message
        receiver: User the message is addressed to
        text: Message text (empty for attachment-only messages)
        attachment_url: Public reference of the stored blob
        attachment_name: Original file name of the upload
        attachment_size: Size of the upload in bytes
        attachment_kind: MediaKind of the upload
        delivered: True only if the receiver had a live session at send time
        read: Set by the receiver's read receipt, never cleared
        deleted_for_everyone: Tombstone marker
        deleted_at: When the tombstone was made
        created_at: Send timestamp (from BaseModel)
    """

    conversation_key = models.CharField(
        max_length=80,
        db_index=True,
        help_text="Sorted sender/receiver ids joined by '_'",
    )
    sequence = models.PositiveIntegerField(
        help_text="Position of this message within its conversation",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    text = models.TextField(blank=True, default="")

    attachment_url = models.CharField(max_length=500, blank=True, default="")
    attachment_name = models.CharField(max_length=255, blank=True, default="")
    attachment_size = models.PositiveBigIntegerField(null=True, blank=True)
    attachment_kind = models.CharField(
        max_length=10,
        choices=MediaKind.choices,
        blank=True,
        default="",
    )

    delivered = models.BooleanField(default=False)
    read = models.BooleanField(default=False)

    deleted_for_everyone = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = MessageQuerySet.as_manager()

    class Meta:
        db_table = "chat_message"
        ordering = ["conversation_key", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["conversation_key", "sequence"],
                name="chat_msg_unique_sequence",
            ),
        ]
        indexes = [
            # Unread messages for a receiver
            models.Index(
                fields=["receiver", "read"],
                name="chat_msg_receiver_read_idx",
            ),
            # Latest message per conversation
            models.Index(
                fields=["conversation_key", "-sequence"],
                name="chat_msg_conv_latest_idx",
            ),
        ]

    def __str__(self) -> str:
        if self.deleted_for_everyone:
            preview = "[deleted]"
        elif self.text:
            preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        else:
            preview = f"[{self.attachment_kind}] {self.attachment_name}"
        return f"{self.sender_id} -> {self.receiver_id}: {preview}"

    @property
    def has_attachment(self) -> bool:
        return bool(self.attachment_url)

    @property
    def attachment(self) -> dict | None:
        """Attachment descriptor, or None for text-only messages."""
        if not self.has_attachment:
            return None
        return {
            "url": self.attachment_url,
            "name": self.attachment_name,
            "size": self.attachment_size,
            "kind": self.attachment_kind,
        }

    def scrub(self) -> None:
        """Clear the payload, keeping id, sequence and timestamps."""
        self.text = ""
        self.attachment_url = ""
        self.attachment_name = ""
        self.attachment_size = None
        self.attachment_kind = ""


class HiddenMessage(BaseModel):
    """
    A message one participant deleted for themselves.

    The message stays in the other participant's history and in the
    conversation; only the owner's history views skip it.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hidden_messages",
    )
    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name="hidden_for",
    )

    class Meta:
        db_table = "chat_hidden_message"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "message"],
                name="chat_hidden_unique_user_message",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.message_id} hidden for {self.user_id}"
