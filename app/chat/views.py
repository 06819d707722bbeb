"""
Chat API views.

This module provides the HTTP side of messaging:
- Conversation list and history
- Read receipts
- Delete for everyone / delete for me
- Attachment upload

URL Structure:
    /api/v1/chat/conversations/                          GET
    /api/v1/chat/conversations/{other_user_id}/messages/ GET
    /api/v1/chat/conversations/{other_user_id}/read/     POST
    /api/v1/chat/messages/{message_id}/                  DELETE
    /api/v1/chat/messages/{message_id}/hide/             POST
    /api/v1/chat/upload/                                 POST (multipart)

Design Decisions:
    - Every state change goes through the relay engine, so HTTP callers
      trigger the same pushes as realtime callers
    - The caller is always request.user; no identity fields in bodies
"""

from __future__ import annotations

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.attachments import AttachmentService
from chat.relay import get_relay_engine
from chat.repository import get_message_repository
from chat.serializers import (
    AttachmentUploadSerializer,
    ConversationSerializer,
    MessageSerializer,
    UploadResponseSerializer,
)


# =============================================================================
# Conversations
# =============================================================================


class ConversationListView(APIView):
    """
    GET: Conversations of the current user, newest first.

    Each entry carries the other participant, the last message and the
    number of messages the current user has not read.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        tags=["Chat - Conversations"],
        responses={200: ConversationSerializer(many=True)},
    )
    def get(self, request):
        summaries = get_message_repository().conversations(request.user.id)
        return Response(ConversationSerializer(summaries, many=True).data)


class ConversationMessagesView(APIView):
    """GET: History with another user, in send order."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_conversation_messages",
        summary="Conversation history",
        description="Messages hidden by the current user are left out.",
        tags=["Chat - Messages"],
        responses={
            200: MessageSerializer(many=True),
            404: OpenApiResponse(description="Unknown user"),
        },
    )
    def get(self, request, other_user_id):
        messages = async_to_sync(get_relay_engine().fetch_history)(
            request.user.id, other_user_id
        )
        return Response(MessageSerializer(messages, many=True).data)


class ConversationReadView(APIView):
    """POST: Mark everything the other user sent as read."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark conversation as read",
        tags=["Chat - Conversations"],
        request=None,
        responses={
            200: OpenApiResponse(description="Number of messages marked read"),
            404: OpenApiResponse(description="Unknown user"),
        },
    )
    def post(self, request, other_user_id):
        count = async_to_sync(get_relay_engine().mark_read)(request.user.id, other_user_id)
        return Response({"count": count})


# =============================================================================
# Messages
# =============================================================================


class MessageDetailView(APIView):
    """
    DELETE: Delete a message for everyone.

    Only the sender may do this. The message stays as a tombstone.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="delete_message_for_everyone",
        summary="Delete message for everyone",
        tags=["Chat - Messages"],
        responses={
            200: MessageSerializer,
            403: OpenApiResponse(description="Not the sender"),
            404: OpenApiResponse(description="Unknown message"),
        },
    )
    def delete(self, request, message_id):
        message = async_to_sync(get_relay_engine().delete_for_everyone)(
            message_id, request.user.id
        )
        return Response(MessageSerializer(message).data)


class MessageHideView(APIView):
    """POST: Delete a message for the current user only."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="delete_message_for_me",
        summary="Delete message for me",
        tags=["Chat - Messages"],
        request=None,
        responses={
            200: OpenApiResponse(description="Message hidden"),
            404: OpenApiResponse(description="Unknown message"),
        },
    )
    def post(self, request, message_id):
        hidden = async_to_sync(get_relay_engine().delete_for_me)(
            message_id, request.user.id
        )
        return Response({"message_id": str(message_id), "hidden": hidden})


# =============================================================================
# Uploads
# =============================================================================


class AttachmentUploadView(APIView):
    """
    POST: Upload a file, optionally sending it as a message.

    Request (multipart):
        file: The file
        receiver_id: Optional receiver; without it only the descriptor
                     is returned
        text: Optional caption
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        operation_id="upload_attachment",
        summary="Upload attachment",
        tags=["Chat - Messages"],
        request=AttachmentUploadSerializer,
        responses={
            201: UploadResponseSerializer,
            400: OpenApiResponse(description="Too large or unsupported type"),
            403: OpenApiResponse(description="Receiver blocked the sender"),
            404: OpenApiResponse(description="Unknown receiver"),
        },
    )
    def post(self, request):
        serializer = AttachmentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message, descriptor = AttachmentService.upload(
            sender=request.user,
            upload=serializer.validated_data["file"],
            receiver_id=serializer.validated_data.get("receiver_id"),
            text=serializer.validated_data.get("text", ""),
        )

        body = {"file": descriptor}
        if message is not None:
            body["message"] = MessageSerializer(message).data
        return Response(body, status=status.HTTP_201_CREATED)
