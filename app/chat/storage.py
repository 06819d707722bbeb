"""
BlobStorageService for attachment content.

Provides:
- Saving uploaded bytes under the public media prefix
- Mapping a stored blob to its public reference and back
- Removing blobs once the message pointing at them is gone

Storage-agnostic: everything goes through Django's default_storage, so
the local FileSystemStorage used in development can be swapped for any
other backend without touching callers.
"""

from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.files.storage import default_storage

from chat.constants import ATTACHMENT_CONFIG
from core.exceptions import StorageError
from core.services import BaseService

if TYPE_CHECKING:
    from django.core.files.uploadedfile import UploadedFile


class BlobStorageService(BaseService):
    """
    Service for attachment blobs.

    Usage:
        url = BlobStorageService.store(request.FILES["file"])
        ...
        BlobStorageService.discard(url)
    """

    @classmethod
    def store(cls, upload: UploadedFile) -> str:
        """
        Persist ``upload`` and return its public reference.

        The stored name is random; only the extension of the original
        name is kept.

        Raises:
            StorageError: The backend could not write the blob
        """
        _, extension = os.path.splitext(upload.name or "")
        name = f"{ATTACHMENT_CONFIG.UPLOAD_DIRECTORY}/{uuid.uuid4().hex}{extension.lower()}"

        try:
            stored_name = default_storage.save(name, upload)
        except OSError as exc:
            cls.get_logger().exception(f"Could not store upload {upload.name!r}: {exc}")
            raise StorageError("The file could not be saved") from exc

        cls.get_logger().info(f"Stored attachment {stored_name} ({upload.size} bytes)")
        return default_storage.url(stored_name)

    @classmethod
    def name_for(cls, url: str) -> str | None:
        """Storage name behind a public reference, or None if it is not ours."""
        if not url or not url.startswith(settings.MEDIA_URL):
            return None
        return url[len(settings.MEDIA_URL) :]

    @classmethod
    def discard(cls, url: str) -> bool:
        """
        Delete the blob behind ``url``.

        Returns:
            True if a blob was deleted, False if there was nothing to delete
        """
        name = cls.name_for(url)
        if not name or not default_storage.exists(name):
            return False

        try:
            default_storage.delete(name)
        except OSError as exc:
            # Orphaned blobs are harmless; the message is already gone
            cls.get_logger().warning(f"Could not delete blob {name}: {exc}")
            return False

        cls.get_logger().info(f"Deleted attachment {name}")
        return True
