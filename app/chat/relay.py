"""
Message relay engine.

Accepts the message-level operations (send, typing, read, delete,
history), applies them to the repository and pushes the resulting
events to the live sessions that should see them.

Message lifecycle:
    persisted (delivered=False)
      -> delivered, if the receiver had a live session at send time
      -> read, once the receiver sends a read receipt (never reverts)
    side tracks: hidden for one participant, deleted for everyone

Guarantees:
    - A message is durably stored before any push about it happens
    - Within one conversation, writes and their pushes happen under the
      conversation lock, so a live receiver sees messages in commit order
    - An offline receiver is not an error: the message simply stays
      undelivered and shows up in the next history fetch
    - A failed push is logged and treated like an offline receiver

Related files:
    - repository.py: durable storage
    - sessions.py: who is online, and on which connection
    - locks.py: per-conversation serialization
    - transport.py: outbound push
    - consumers.py / views.py / attachments.py: callers

Usage:
    from chat.relay import get_relay_engine

    engine = get_relay_engine()
    message = await engine.send(sender.id, receiver.id, text="hello")
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync, sync_to_async
from django.conf import settings

from authentication.models import User
from authentication.serializers import PublicUserSerializer
from authentication.services import AccountService
from chat.constants import MESSAGE_CONFIG
from chat.events import Outbound
from chat.keys import conversation_key
from chat.locks import KeyedLock, conversation_locks
from chat.repository import MessageRepository, get_message_repository
from chat.serializers import MessageSerializer
from chat.sessions import SessionRegistry, get_session_registry
from core.exceptions import NotFoundError, PermissionDeniedError, ValidationError

if TYPE_CHECKING:
    from uuid import UUID

    from chat.models import Message
    from chat.transport import Transport

logger = logging.getLogger(__name__)


class BlockPolicy:
    REJECT = "reject"
    DROP = "drop"


def public_profile(user: User) -> dict:
    return dict(PublicUserSerializer(user).data)


def message_payload(message: Message) -> dict:
    return dict(MessageSerializer(message).data)


class RelayEngine:
    """
    Core message state machine.

    Attributes:
        registry: Session registry used for delivery decisions
        repository: Message repository
        transport: Outbound transport; None means nothing is pushed
        locks: Per-conversation locks
    """

    def __init__(
        self,
        registry: SessionRegistry | None = None,
        repository: MessageRepository | None = None,
        transport: Transport | None = None,
        locks: KeyedLock | None = None,
    ):
        self.registry = registry or get_session_registry()
        self.repository = repository or get_message_repository()
        self.transport = transport
        self.locks = locks or conversation_locks

    # =========================================================================
    # Push
    # =========================================================================

    async def push(self, user_id: UUID | str, event: str, data: dict | list) -> bool:
        """
        Push ``event`` to the live session of ``user_id``.

        Returns:
            True if the event was handed to the transport, False if the
            user is offline or the push failed
        """
        session = self.registry.lookup(str(user_id))
        if session is None or self.transport is None:
            return False

        try:
            await self.transport.push(session.connection_id, event, data)
        except Exception:
            logger.warning(
                f"Push of {event} to {user_id} ({session.connection_id}) failed",
                exc_info=True,
            )
            return False
        return True

    async def broadcast(self, event: str, data: dict | list, exclude: str | None = None) -> int:
        """Push ``event`` to every live session except ``exclude``'s."""
        delivered = 0
        for session in self.registry.snapshot():
            if session.user_id == exclude:
                continue
            if await self.push(session.user_id, event, data):
                delivered += 1
        return delivered

    def notify(self, user_id: UUID | str, event: str, data: dict | list) -> bool:
        """Blocking push for synchronous callers (HTTP views, services)."""
        return async_to_sync(self.push)(user_id, event, data)

    # =========================================================================
    # Send
    # =========================================================================

    async def send(
        self,
        sender_id: UUID | str,
        receiver_id: UUID | str,
        text: str = "",
        attachment: dict | None = None,
    ) -> Message | None:
        """
        Store a message and deliver it if the receiver is online.

        Args:
            sender_id: Sending user
            receiver_id: Receiving user
            text: Message text
            attachment: Stored attachment descriptor (url, name, size, kind)

        Returns:
            The stored message, or None when the receiver blocked the
            sender and CHAT_BLOCK_POLICY is "drop"

        Raises:
            ValidationError: Empty or oversized message, or sending to self
            NotFoundError: Sender or receiver does not exist
            PermissionDeniedError: Receiver blocked the sender (reject policy)
            StorageError: The message could not be stored
        """
        text = text or ""
        if not text.strip() and not attachment:
            raise ValidationError(
                "Message must carry text or an attachment",
                error_code="EMPTY_MESSAGE",
            )
        if len(text) > MESSAGE_CONFIG.MAX_TEXT_LENGTH:
            raise ValidationError(
                f"Message text exceeds {MESSAGE_CONFIG.MAX_TEXT_LENGTH} characters",
                error_code="TEXT_TOO_LONG",
            )
        if str(sender_id) == str(receiver_id):
            raise ValidationError("Cannot message yourself", error_code="SELF_MESSAGE")

        sender, receiver, blocked = await sync_to_async(self._load_pair)(
            sender_id, receiver_id
        )
        if blocked:
            if settings.CHAT_BLOCK_POLICY == BlockPolicy.DROP:
                logger.info(f"Dropped message from {sender.id}: blocked by {receiver.id}")
                return None
            raise PermissionDeniedError(
                "You cannot message this user",
                error_code="BLOCKED",
            )

        key = conversation_key(sender.id, receiver.id)
        async with self.locks.hold(key):
            # Finish the write even if the caller goes away mid-send
            message = await asyncio.shield(
                sync_to_async(self.repository.append)(
                    sender.id, receiver.id, text=text, attachment=attachment
                )
            )

            receiver_online = self.registry.lookup(str(receiver.id)) is not None
            if receiver_online:
                message = await sync_to_async(self.repository.mark_delivered)(message)

            payload = message_payload(message)
            if receiver_online:
                await self.push(
                    receiver.id,
                    Outbound.RECEIVE_MESSAGE,
                    {"message": payload, "sender": public_profile(sender)},
                )
            await self.push(sender.id, Outbound.MESSAGE_SENT, {"message": payload})

        return message

    def _load_pair(self, sender_id, receiver_id) -> tuple[User, User, bool]:
        sender = AccountService.get_user(sender_id)
        receiver = AccountService.get_user(receiver_id)
        return sender, receiver, receiver.has_blocked(sender)

    # =========================================================================
    # Typing
    # =========================================================================

    async def typing(
        self,
        sender_id: UUID | str,
        receiver_id: UUID | str,
        active: bool = True,
    ) -> bool:
        """
        Relay a typing indicator. Nothing is stored.

        Returns:
            True if the receiver's session got the event
        """
        blocked = await sync_to_async(self._is_blocked)(receiver_id, sender_id)
        if blocked:
            return False

        event = Outbound.USER_TYPING if active else Outbound.USER_STOPPED_TYPING
        relayed = await self.push(receiver_id, event, {"user_id": str(sender_id)})
        logger.debug(f"{event} {sender_id} -> {receiver_id}: relayed={relayed}")
        return relayed

    @staticmethod
    def _is_blocked(blocker_id, blocked_id) -> bool:
        return User.objects.filter(pk=blocker_id, blocked_users__pk=blocked_id).exists()

    # =========================================================================
    # Read receipts
    # =========================================================================

    async def mark_read(self, reader_id: UUID | str, other_user_id: UUID | str) -> int:
        """
        Mark everything ``other_user_id`` sent to ``reader_id`` as read.

        The other party is told only when at least one message changed.

        Returns:
            Number of messages flipped to read

        Raises:
            NotFoundError: The other user does not exist
        """
        await sync_to_async(AccountService.get_user)(other_user_id)

        key = conversation_key(reader_id, other_user_id)
        async with self.locks.hold(key):
            flipped = await sync_to_async(self.repository.mark_read)(reader_id, other_user_id)
            if flipped:
                await self.push(
                    other_user_id,
                    Outbound.MESSAGES_READ,
                    {"user_id": str(reader_id), "conversation_id": key},
                )
        return flipped

    # =========================================================================
    # Deletion
    # =========================================================================

    async def delete_for_everyone(
        self,
        message_id: UUID | str,
        requester_id: UUID | str,
    ) -> Message:
        """
        Tombstone a message for both participants.

        Only the sender may do this. The peer's live session is told so
        it can replace the message with a tombstone. Deleting a message
        that is already a tombstone changes nothing and pushes nothing.

        Raises:
            NotFoundError: Unknown message
            PermissionDeniedError: Requester is not the sender
        """
        message = await sync_to_async(self.repository.get)(message_id)
        if str(message.sender_id) != str(requester_id):
            raise PermissionDeniedError(
                "Only the sender can delete a message for everyone",
                error_code="NOT_SENDER",
            )

        async with self.locks.hold(message.conversation_key):
            message = await sync_to_async(self.repository.get)(message_id)
            if message.deleted_for_everyone:
                return message

            message = await asyncio.shield(
                sync_to_async(self.repository.tombstone)(message)
            )
            await self.push(
                message.receiver_id,
                Outbound.MESSAGE_DELETED_EVERYONE,
                {
                    "message_id": str(message.id),
                    "conversation_id": message.conversation_key,
                    "sender_name": message.sender.display_name
                    or MESSAGE_CONFIG.FALLBACK_SENDER_NAME,
                },
            )
        return message

    async def delete_for_me(
        self,
        message_id: UUID | str,
        requester_id: UUID | str,
    ) -> bool:
        """
        Hide a message from the requester's own history.

        The other participant's copy is untouched and nothing is pushed
        to them. The requester's own live session gets message_hidden so
        every view of their history drops it.

        Returns:
            True if the message was newly hidden

        Raises:
            NotFoundError: Unknown message, or requester not a participant
        """
        message = await sync_to_async(self.repository.get)(message_id)
        if str(requester_id) not in (str(message.sender_id), str(message.receiver_id)):
            raise NotFoundError("Message not found", error_code="MESSAGE_NOT_FOUND")

        hidden = await sync_to_async(self.repository.hide)(requester_id, message)
        await self.push(
            requester_id,
            Outbound.MESSAGE_HIDDEN,
            {"message_id": str(message.id), "conversation_id": message.conversation_key},
        )
        return hidden

    # =========================================================================
    # Queries
    # =========================================================================

    async def fetch_history(
        self,
        user_id: UUID | str,
        other_user_id: UUID | str,
    ) -> list[Message]:
        """
        Messages between the two users in send order, minus the ones
        ``user_id`` hid for themselves.

        Raises:
            NotFoundError: The other user does not exist
        """
        await sync_to_async(AccountService.get_user)(other_user_id)
        return await sync_to_async(self.repository.history)(user_id, other_user_id)


@lru_cache(maxsize=None)
def get_relay_engine() -> RelayEngine:
    """Return the process-wide relay engine (transport attached by chat.routing)."""
    return RelayEngine()
