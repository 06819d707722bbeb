"""
Message persistence.

The relay engine talks to storage only through a MessageRepository, so
the backing store can change without touching delivery logic. Every
write is atomic per entity (one message, or one conversation's read
batch) and fails with StorageError after rolling back.

Implementations:
    DjangoMessageRepository: Django ORM over chat.models

The implementation is selected with settings.CHAT_MESSAGE_REPOSITORY and
obtained through get_message_repository().

Ordering:
    append() assigns the next per-conversation sequence. Callers hold the
    conversation lock from chat.locks, so the read-max-then-insert step
    does not race inside one process. The unique constraint on
    (conversation_key, sequence) backs that up across processes.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Protocol

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Max, Q
from django.utils import timezone
from django.utils.module_loading import import_string

from chat.keys import conversation_key
from chat.models import HiddenMessage, Message
from chat.storage import BlobStorageService
from core.exceptions import NotFoundError
from core.services import BaseService

if TYPE_CHECKING:
    from uuid import UUID


# Attempts at claiming a sequence number before giving up
SEQUENCE_ATTEMPTS = 3


class MessageRepository(Protocol):
    """Interface every message repository provides."""

    def append(
        self,
        sender_id: UUID | str,
        receiver_id: UUID | str,
        text: str = "",
        attachment: dict | None = None,
    ) -> Message: ...

    def mark_delivered(self, message: Message) -> Message: ...

    def mark_read(self, reader_id: UUID | str, other_id: UUID | str) -> int: ...

    def history(self, user_id: UUID | str, other_id: UUID | str) -> list[Message]: ...

    def get(self, message_id: UUID | str) -> Message: ...

    def tombstone(self, message: Message) -> Message: ...

    def hide(self, user_id: UUID | str, message: Message) -> bool: ...

    def conversations(self, user_id: UUID | str) -> list[dict]: ...


class DjangoMessageRepository(BaseService):
    """Message repository backed by the Django ORM."""

    def append(self, sender_id, receiver_id, text="", attachment=None) -> Message:
        """
        Durably store a new, undelivered message at the end of its conversation.

        Args:
            sender_id: Sending user
            receiver_id: Receiving user
            text: Message text, may be empty when an attachment is given
            attachment: Optional dict with url, name, size and kind

        Returns:
            The stored Message, with sequence assigned

        Raises:
            StorageError: The write did not complete
        """
        key = conversation_key(sender_id, receiver_id)
        attachment = attachment or {}

        with self.atomic():
            for attempt in range(1, SEQUENCE_ATTEMPTS + 1):
                last = Message.objects.in_conversation(key).aggregate(
                    last=Max("sequence")
                )["last"]
                try:
                    with transaction.atomic():
                        message = Message.objects.create(
                            conversation_key=key,
                            sequence=(last or 0) + 1,
                            sender_id=sender_id,
                            receiver_id=receiver_id,
                            text=text or "",
                            attachment_url=attachment.get("url", ""),
                            attachment_name=attachment.get("name", ""),
                            attachment_size=attachment.get("size"),
                            attachment_kind=attachment.get("kind", ""),
                        )
                    break
                except IntegrityError:
                    if attempt == SEQUENCE_ATTEMPTS:
                        raise
                    self.get_logger().warning(
                        f"Sequence {(last or 0) + 1} in {key} taken, retrying"
                    )

        self.get_logger().info(
            f"Message {message.id} persisted in {key} at sequence {message.sequence}"
        )
        return message

    def mark_delivered(self, message: Message) -> Message:
        with self.atomic():
            Message.objects.filter(pk=message.pk).update(
                delivered=True, updated_at=timezone.now()
            )
        message.delivered = True
        return message

    def mark_read(self, reader_id, other_id) -> int:
        """
        Flip every unread message addressed to ``reader_id`` in the conversation.

        Returns:
            Number of messages that changed (0 when nothing was unread)
        """
        key = conversation_key(reader_id, other_id)
        with self.atomic():
            flipped = (
                Message.objects.in_conversation(key)
                .unread_for(reader_id)
                .update(read=True, updated_at=timezone.now())
            )
        self.get_logger().debug(f"Read batch in {key} for {reader_id}: {flipped}")
        return flipped

    def history(self, user_id, other_id) -> list[Message]:
        """Messages between the pair, in send order, minus those ``user_id`` hid."""
        key = conversation_key(user_id, other_id)
        return list(
            Message.objects.in_conversation(key)
            .visible_to(user_id)
            .select_related("sender", "receiver")
            .order_by("sequence")
        )

    def get(self, message_id) -> Message:
        try:
            return Message.objects.select_related("sender", "receiver").get(pk=message_id)
        except (Message.DoesNotExist, DjangoValidationError, ValueError, TypeError) as exc:
            raise NotFoundError(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
            ) from exc

    def tombstone(self, message: Message) -> Message:
        """
        Scrub the payload of ``message`` for both participants.

        The id, sequence and timestamps stay. A blob the message pointed
        at is removed once the transaction commits.
        """
        blob_url = message.attachment_url

        with self.atomic():
            message.scrub()
            message.deleted_for_everyone = True
            message.deleted_at = timezone.now()
            message.save()
            if blob_url:
                transaction.on_commit(lambda: BlobStorageService.discard(blob_url))

        self.get_logger().info(f"Message {message.id} deleted for everyone")
        return message

    def hide(self, user_id, message: Message) -> bool:
        """
        Hide ``message`` from ``user_id``'s own history.

        Returns:
            True if the message was newly hidden, False if it already was
        """
        with self.atomic():
            _, created = HiddenMessage.objects.get_or_create(
                user_id=user_id,
                message=message,
            )
        return created

    def conversations(self, user_id) -> list[dict]:
        """
        Summaries of every conversation ``user_id`` takes part in.

        Returns:
            Dicts with other_user, last_message, unread_count and
            updated_at, newest first
        """
        rows = (
            Message.objects.involving(user_id)
            .order_by()
            .values("conversation_key")
            .annotate(
                last_sequence=Max("sequence"),
                unread_count=Count("id", filter=Q(receiver_id=user_id, read=False)),
            )
        )

        summaries = []
        for row in rows:
            last_message = Message.objects.select_related("sender", "receiver").get(
                conversation_key=row["conversation_key"],
                sequence=row["last_sequence"],
            )
            if str(last_message.sender_id) == str(user_id):
                other_user = last_message.receiver
            else:
                other_user = last_message.sender
            summaries.append(
                {
                    "conversation_id": row["conversation_key"],
                    "other_user": other_user,
                    "last_message": last_message,
                    "unread_count": row["unread_count"],
                    "updated_at": last_message.created_at,
                }
            )

        summaries.sort(key=lambda summary: summary["updated_at"], reverse=True)
        return summaries


@lru_cache(maxsize=None)
def get_message_repository() -> MessageRepository:
    """Return the repository configured by CHAT_MESSAGE_REPOSITORY."""
    repository_class = import_string(settings.CHAT_MESSAGE_REPOSITORY)
    return repository_class()
