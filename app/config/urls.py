"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /health/                               - Health check endpoint
    /schema/                               - OpenAPI schema (YAML)
    /uploads/<path>                        - Attachment blobs (public)
    /api/v1/auth/                          - Authentication endpoints
        register/                          - Create account
        login/                             - Handle or email + password
        token/refresh/                     - Refresh JWT access token
    /api/v1/users/                         - User directory
        ?q=<text>                          - Search by handle/display name
        {id}/                              - Get, update (self), delete (self)
    /api/v1/chat/                          - Chat endpoints
        conversations/                     - Conversations for current user
        conversations/{user_id}/messages/  - History with another user
        conversations/{user_id}/read/      - Mark conversation read
        messages/{id}/                     - Delete a message for everyone
        messages/{id}/hide/                - Delete a message for me
        upload/                            - Upload attachment (multipart)
    /api/v1/friends/                       - Friend endpoints
        /                                  - Friend list
        {user_id}/                         - Remove friend
        requests/                          - Send request
        requests/incoming/, outgoing/      - Pending requests
        requests/{id}/accept/, reject/     - Answer a request
        status/{user_id}/                  - Friendship status
        mute/{user_id}/, block/{user_id}/  - Mute/block (POST), undo (DELETE)

Realtime:
    /socket.io/                            - Socket.IO relay (mounted in config.asgi,
                                             handlers in chat.consumers)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.conf import settings
from django.urls import include, path, re_path
from django.views.static import serve
from drf_spectacular.views import SpectacularAPIView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Authentication and user directory
    path("", include("authentication.urls")),
    # Chat
    path("chat/", include("chat.urls")),
    # Friends
    path("friends/", include("friends.urls")),
]

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
    # Attachment blobs are publicly fetchable by reference
    re_path(
        r"^%s(?P<path>.*)$" % settings.MEDIA_URL.lstrip("/"),
        serve,
        {"document_root": settings.MEDIA_ROOT},
    ),
]
