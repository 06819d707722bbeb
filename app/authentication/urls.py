"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/register/            - Create account (POST)
    /api/v1/auth/login/               - Handle or email login (POST)
    /api/v1/auth/token/refresh/       - Refresh access token (POST)
    /api/v1/users/                    - Directory listing, ?q= search (GET)
    /api/v1/users/{user_id}/          - Profile (GET/PUT/PATCH/DELETE)
"""

from django.urls import path

from authentication.views import (
    LoginView,
    RefreshView,
    RegisterView,
    UserDetailView,
    UserListView,
)

app_name = "authentication"

urlpatterns = [
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/token/refresh/", RefreshView.as_view(), name="token-refresh"),
    path("users/", UserListView.as_view(), name="user-list"),
    path("users/<uuid:user_id>/", UserDetailView.as_view(), name="user-detail"),
]
