"""
Realtime event vocabulary.

Every event name the relay sends or accepts is declared here, and every
inbound event has a fixed payload schema. Payloads are validated at the
boundary (consumers.RelayNamespace) before anything reaches the relay
engine, so the engine only ever sees well-formed, typed arguments.

Inbound (client -> server):
    user_online, user_offline, send_message, typing_start, typing_stop,
    mark_read, get_messages, message_deleted_everyone,
    delete_message_for_me, update_status, mute_user, unmute_user,
    block_user, unblock_user

Outbound (server -> client):
    receive_message, message_sent, online_users, user_status_changed,
    user_typing, user_stopped_typing, messages_read,
    message_deleted_everyone, message_hidden, friend_request_received,
    friend_request_accepted, error

Usage:
    from chat.events import INBOUND_SCHEMAS, Inbound, validate_payload

    data = validate_payload(Inbound.SEND_MESSAGE, payload)
"""

from __future__ import annotations

from typing import Final

from rest_framework import serializers

from authentication.models import UserStatus
from chat.constants import MESSAGE_CONFIG
from core.exceptions import ValidationError


class Inbound:
    """Events a client may emit."""

    USER_ONLINE: Final[str] = "user_online"
    USER_OFFLINE: Final[str] = "user_offline"
    SEND_MESSAGE: Final[str] = "send_message"
    TYPING_START: Final[str] = "typing_start"
    TYPING_STOP: Final[str] = "typing_stop"
    MARK_READ: Final[str] = "mark_read"
    GET_MESSAGES: Final[str] = "get_messages"
    DELETE_FOR_EVERYONE: Final[str] = "message_deleted_everyone"
    DELETE_FOR_ME: Final[str] = "delete_message_for_me"
    UPDATE_STATUS: Final[str] = "update_status"
    MUTE_USER: Final[str] = "mute_user"
    UNMUTE_USER: Final[str] = "unmute_user"
    BLOCK_USER: Final[str] = "block_user"
    UNBLOCK_USER: Final[str] = "unblock_user"


class Outbound:
    """Events the server pushes to one connection."""

    RECEIVE_MESSAGE: Final[str] = "receive_message"
    MESSAGE_SENT: Final[str] = "message_sent"
    ONLINE_USERS: Final[str] = "online_users"
    USER_STATUS_CHANGED: Final[str] = "user_status_changed"
    USER_TYPING: Final[str] = "user_typing"
    USER_STOPPED_TYPING: Final[str] = "user_stopped_typing"
    MESSAGES_READ: Final[str] = "messages_read"
    MESSAGE_DELETED_EVERYONE: Final[str] = "message_deleted_everyone"
    MESSAGE_HIDDEN: Final[str] = "message_hidden"
    FRIEND_REQUEST_RECEIVED: Final[str] = "friend_request_received"
    FRIEND_REQUEST_ACCEPTED: Final[str] = "friend_request_accepted"
    ERROR: Final[str] = "error"


# =============================================================================
# Inbound payload schemas
# =============================================================================


class UserOnlineSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    handle = serializers.CharField(required=False, allow_blank=True)
    display_name = serializers.CharField(required=False, allow_blank=True)
    avatar = serializers.CharField(required=False, allow_blank=True)


class UserOfflineSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class SendMessageSerializer(serializers.Serializer):
    """
    Text message from the realtime channel.

    Attachments travel over HTTP (see chat.attachments); an empty text is
    rejected by the relay engine, not here, so both paths share one rule.
    """

    sender_id = serializers.UUIDField()
    receiver_id = serializers.UUIDField()
    text = serializers.CharField(
        required=False,
        allow_blank=True,
        trim_whitespace=False,
        default="",
        max_length=MESSAGE_CONFIG.MAX_TEXT_LENGTH,
    )


class TypingSerializer(serializers.Serializer):
    sender_id = serializers.UUIDField()
    receiver_id = serializers.UUIDField()


class ConversationPairSerializer(serializers.Serializer):
    """Caller plus the other side of a conversation (mark_read, get_messages)."""

    user_id = serializers.UUIDField()
    other_user_id = serializers.UUIDField()


class DeleteForEveryoneSerializer(serializers.Serializer):
    """
    conversation_id and requester_name are accepted for client
    compatibility; the server derives both from the stored message.
    """

    message_id = serializers.UUIDField()
    conversation_id = serializers.CharField(required=False, allow_blank=True)
    requester_name = serializers.CharField(required=False, allow_blank=True)


class DeleteForMeSerializer(serializers.Serializer):
    message_id = serializers.UUIDField()


class UpdateStatusSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=UserStatus.choices)


class RelationshipSerializer(serializers.Serializer):
    """Mute/unmute/block/unblock: the acting user and their target."""

    user_id = serializers.UUIDField()
    target_user_id = serializers.UUIDField()


INBOUND_SCHEMAS: Final[dict[str, type[serializers.Serializer]]] = {
    Inbound.USER_ONLINE: UserOnlineSerializer,
    Inbound.USER_OFFLINE: UserOfflineSerializer,
    Inbound.SEND_MESSAGE: SendMessageSerializer,
    Inbound.TYPING_START: TypingSerializer,
    Inbound.TYPING_STOP: TypingSerializer,
    Inbound.MARK_READ: ConversationPairSerializer,
    Inbound.GET_MESSAGES: ConversationPairSerializer,
    Inbound.DELETE_FOR_EVERYONE: DeleteForEveryoneSerializer,
    Inbound.DELETE_FOR_ME: DeleteForMeSerializer,
    Inbound.UPDATE_STATUS: UpdateStatusSerializer,
    Inbound.MUTE_USER: RelationshipSerializer,
    Inbound.UNMUTE_USER: RelationshipSerializer,
    Inbound.BLOCK_USER: RelationshipSerializer,
    Inbound.UNBLOCK_USER: RelationshipSerializer,
}


def validate_payload(event: str, payload) -> dict:
    """
    Validate ``payload`` against the schema of ``event``.

    Returns:
        The validated data

    Raises:
        ValidationError: Unknown event, non-object payload or bad fields
    """
    schema = INBOUND_SCHEMAS.get(event)
    if schema is None:
        raise ValidationError(f"Unknown event: {event}", error_code="UNKNOWN_EVENT")
    if not isinstance(payload, dict):
        raise ValidationError("Event payload must be an object", error_code="INVALID_PAYLOAD")

    serializer = schema(data=payload)
    if not serializer.is_valid():
        raise ValidationError(
            "Invalid event payload",
            error_code="INVALID_PAYLOAD",
            details=serializer.errors,
        )
    return serializer.validated_data
