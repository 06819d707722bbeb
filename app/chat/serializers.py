"""
Serializers for chat API and realtime payloads.

This module provides serializers for the chat system:
- Message serializers (read)
- Conversation summary serializers (read)
- Attachment upload input

Serializer Hierarchy:
    AttachmentSerializer: Stored file descriptor
    MessageSerializer: Message as pushed to clients and returned over HTTP
    ConversationSerializer: One entry of the conversation list
    AttachmentUploadSerializer: Multipart upload input
    UploadResponseSerializer: Upload response (message or descriptor)

Design Decisions:
    - Every field renders as a JSON primitive (ids as strings, datetimes
      as ISO 8601) so the same data can be emitted over Socket.IO
    - Tombstoned messages render with empty text and no attachment
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import PublicUserSerializer
from chat.models import MediaKind, Message


class AttachmentSerializer(serializers.Serializer):
    """Descriptor of a stored attachment."""

    url = serializers.CharField()
    name = serializers.CharField()
    size = serializers.IntegerField()
    kind = serializers.ChoiceField(choices=MediaKind.choices)


class MessageSerializer(serializers.ModelSerializer):
    """
    A message as clients see it.

    conversation_id is the canonical conversation key of the pair.
    """

    conversation_id = serializers.CharField(source="conversation_key", read_only=True)
    sender_id = serializers.UUIDField(read_only=True)
    receiver_id = serializers.UUIDField(read_only=True)
    attachment = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "sequence",
            "sender_id",
            "receiver_id",
            "text",
            "attachment",
            "delivered",
            "read",
            "deleted_for_everyone",
            "deleted_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_attachment(self, obj: Message) -> dict | None:
        return obj.attachment


class ConversationSerializer(serializers.Serializer):
    """One conversation in the caller's list, newest first."""

    conversation_id = serializers.CharField()
    other_user = PublicUserSerializer()
    last_message = MessageSerializer()
    unread_count = serializers.IntegerField()
    updated_at = serializers.DateTimeField()


class AttachmentUploadSerializer(serializers.Serializer):
    """
    Multipart upload input.

    Without receiver_id the file is only stored and its descriptor
    returned; no message is created.
    """

    file = serializers.FileField()
    receiver_id = serializers.UUIDField(required=False, allow_null=True)
    text = serializers.CharField(required=False, allow_blank=True, default="")


class UploadResponseSerializer(serializers.Serializer):
    """Upload response: the created message, or only the file descriptor."""

    message = MessageSerializer(required=False)
    file = AttachmentSerializer()
