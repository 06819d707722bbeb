"""
Attachment upload handling.

Uploads arrive over HTTP, outside the realtime channel, but end up as
ordinary messages: after validation and storage, the file descriptor is
handed to RelayEngine.send, so an attachment message is persisted and
delivered exactly like a text message.

Validation:
    - Size ceiling from settings.CHAT_UPLOAD_MAX_BYTES
    - Declared content type must be in ATTACHMENT_CONFIG.ALLOWED_MIME_TYPES
      (which also decides the media kind)
    - File name extension must be in ATTACHMENT_CONFIG.ALLOWED_EXTENSIONS
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync
from django.conf import settings

from chat.constants import ATTACHMENT_CONFIG
from chat.relay import get_relay_engine
from chat.storage import BlobStorageService
from core.exceptions import BaseApplicationError, ValidationError
from core.services import BaseService

if TYPE_CHECKING:
    from uuid import UUID

    from django.core.files.uploadedfile import UploadedFile

    from authentication.models import User
    from chat.models import Message


class AttachmentService(BaseService):
    """
    Service for attachment uploads.

    Usage:
        message, descriptor = AttachmentService.upload(
            sender=request.user,
            upload=request.FILES["file"],
            receiver_id=receiver_id,
        )
    """

    @classmethod
    def media_kind(cls, content_type: str) -> str:
        """
        Media kind for a declared content type.

        Raises:
            ValidationError: Content type is not allowed
        """
        content_type = (content_type or "").split(";")[0].strip().lower()
        for kind, allowed in ATTACHMENT_CONFIG.ALLOWED_MIME_TYPES.items():
            if content_type in allowed:
                return kind
        raise ValidationError(
            f"Unsupported file type: {content_type or 'unknown'}",
            error_code="UNSUPPORTED_MEDIA_TYPE",
        )

    @classmethod
    def validate(cls, upload: UploadedFile) -> str:
        """
        Check size, extension and content type of ``upload``.

        Returns:
            The media kind of the upload
        """
        if not upload.size:
            raise ValidationError("File is empty", error_code="EMPTY_FILE")
        if upload.size > settings.CHAT_UPLOAD_MAX_BYTES:
            raise ValidationError(
                f"File exceeds {settings.CHAT_UPLOAD_MAX_BYTES} bytes",
                error_code="FILE_TOO_LARGE",
                details={"max_bytes": settings.CHAT_UPLOAD_MAX_BYTES},
            )

        extension = os.path.splitext(upload.name or "")[1].lstrip(".").lower()
        if extension not in ATTACHMENT_CONFIG.ALLOWED_EXTENSIONS:
            raise ValidationError(
                f"Unsupported file extension: {extension or 'none'}",
                error_code="UNSUPPORTED_MEDIA_TYPE",
            )

        return cls.media_kind(upload.content_type)

    @classmethod
    def upload(
        cls,
        sender: User,
        upload: UploadedFile,
        receiver_id: UUID | str | None = None,
        text: str = "",
    ) -> tuple[Message | None, dict]:
        """
        Store ``upload`` and, when a receiver is given, send it as a message.

        Returns:
            (message, descriptor). message is None when no receiver was
            given, or when the receiver blocked the sender under the drop
            policy.

        Raises:
            ValidationError: Upload failed validation
            NotFoundError: Unknown receiver
            PermissionDeniedError: Receiver blocked the sender
            StorageError: File or message could not be stored
        """
        kind = cls.validate(upload)
        url = BlobStorageService.store(upload)
        descriptor = {
            "url": url,
            "name": os.path.basename(upload.name or ""),
            "size": upload.size,
            "kind": kind,
        }

        if receiver_id is None:
            return None, descriptor

        try:
            message = async_to_sync(get_relay_engine().send)(
                sender.id,
                receiver_id,
                text=text,
                attachment=descriptor,
            )
        except BaseApplicationError:
            BlobStorageService.discard(url)
            raise

        if message is None:
            BlobStorageService.discard(url)
        else:
            cls.get_logger().info(
                f"Attachment message {message.id} ({kind}) from {sender.id} to {receiver_id}"
            )
        return message, descriptor
