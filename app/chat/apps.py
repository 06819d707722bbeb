"""
Chat application configuration.

This app provides direct messaging with:
- Realtime relay over Socket.IO (send, typing, read receipts, deletes)
- Presence derived from live sessions
- Conversation history and attachment uploads over HTTP
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    def ready(self):
        import chat.signals  # noqa: F401
