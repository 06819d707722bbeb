"""
URL configuration for chat API.

URL Structure:
    Conversations:
        /conversations/                          GET
        /conversations/{user_id}/messages/       GET
        /conversations/{user_id}/read/           POST

    Messages:
        /messages/{id}/                          DELETE
        /messages/{id}/hide/                     POST

    Uploads:
        /upload/                                 POST

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import path

from chat import views

app_name = "chat"

urlpatterns = [
    path(
        "conversations/",
        views.ConversationListView.as_view(),
        name="conversation-list",
    ),
    path(
        "conversations/<uuid:other_user_id>/messages/",
        views.ConversationMessagesView.as_view(),
        name="conversation-messages",
    ),
    path(
        "conversations/<uuid:other_user_id>/read/",
        views.ConversationReadView.as_view(),
        name="conversation-read",
    ),
    path(
        "messages/<uuid:message_id>/",
        views.MessageDetailView.as_view(),
        name="message-detail",
    ),
    path(
        "messages/<uuid:message_id>/hide/",
        views.MessageHideView.as_view(),
        name="message-hide",
    ),
    path(
        "upload/",
        views.AttachmentUploadView.as_view(),
        name="upload",
    ),
]
