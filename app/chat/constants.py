"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message content limits and history queries
- Attachment handling (allowed media types by kind)

Import example:
    from chat.constants import MESSAGE_CONFIG, ATTACHMENT_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits
    MAX_TEXT_LENGTH: Final[int] = 10000  # Characters

    # Separator used in conversation keys ("<low id>_<high id>")
    CONVERSATION_KEY_SEPARATOR: Final[str] = "_"

    # Name shown in tombstone notifications when the sender has no display name
    FALLBACK_SENDER_NAME: Final[str] = "Someone"


# =============================================================================
# Attachment Configuration
# =============================================================================


class ATTACHMENT_CONFIG:
    """
    Configuration for message attachments.

    The size ceiling itself comes from settings.CHAT_UPLOAD_MAX_BYTES.
    """

    # Storage prefix inside MEDIA_ROOT
    UPLOAD_DIRECTORY: Final[str] = "chat"

    # File name extensions accepted alongside the declared content type
    ALLOWED_EXTENSIONS: Final[frozenset[str]] = frozenset(
        {
            "jpeg", "jpg", "png", "gif", "webp",
            "mp4", "webm", "mov",
            "mp3", "wav", "ogg",
            "pdf", "doc", "docx", "txt", "zip",
        }
    )  # fmt: skip

    # Declared content types accepted per media kind. Anything else under
    # image/, video/ or audio/ is rejected; documents are an explicit list.
    ALLOWED_MIME_TYPES: Final[dict[str, frozenset[str]]] = {
        "image": frozenset(
            {
                "image/jpeg",
                "image/png",
                "image/gif",
                "image/webp",
            }
        ),
        "video": frozenset(
            {
                "video/mp4",
                "video/webm",
                "video/quicktime",
            }
        ),
        "audio": frozenset(
            {
                "audio/mpeg",
                "audio/mp3",
                "audio/wav",
                "audio/x-wav",
                "audio/ogg",
                "audio/webm",
            }
        ),
        "document": frozenset(
            {
                "application/pdf",
                "application/msword",
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                "text/plain",
                "application/zip",
                "application/x-zip-compressed",
            }
        ),
    }
