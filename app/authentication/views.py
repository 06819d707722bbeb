"""
Authentication views.

This module provides API views for:
- Registration and login (handle or email)
- JWT token refresh
- User directory and search
- Profile retrieval, update and account deletion

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (AccountService)
    - urls.py: URL routing

Note:
    Login returns a JWT pair. The same access token authenticates the
    realtime connection (see chat.socket_auth).
"""

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.serializers import (
    AuthResponseSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    PublicUserSerializer,
    RegisterSerializer,
    UserSerializer,
)
from authentication.services import AccountService
from core.exceptions import PermissionDeniedError


# =============================================================================
# Registration & Login
# =============================================================================


class RegisterView(APIView):
    """
    API view for account registration.

    POST: Create an account and return a JWT pair

    URL: /api/v1/auth/register/

    Request body:
        {
            "handle": "alice",
            "display_name": "Alice",
            "email": "alice@example.com",
            "password": "secret123",
            "avatar_style": "avataaars"   // Optional
        }
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Register",
        description="Create an account. Handle and email are unique case-insensitively.",
        tags=["Auth"],
        request=RegisterSerializer,
        responses={
            201: AuthResponseSerializer,
            400: OpenApiResponse(description="Missing or malformed fields"),
            409: OpenApiResponse(description="Handle or email already registered"),
        },
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AccountService.register(**serializer.validated_data)

        return Response(
            {"user": UserSerializer(user).data, **AccountService.issue_tokens(user)},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    """
    API view for login.

    POST: Verify handle-or-email plus password

    URL: /api/v1/auth/login/

    Returns:
        {
            "user": { ... },
            "access": "jwt_access_token",
            "refresh": "jwt_refresh_token"
        }
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        description="Log in with a handle or an email address.",
        tags=["Auth"],
        request=LoginSerializer,
        responses={
            200: AuthResponseSerializer,
            401: OpenApiResponse(description="Invalid credentials"),
        },
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AccountService.authenticate(
            serializer.validated_data["login"],
            serializer.validated_data["password"],
        )

        return Response(
            {"user": UserSerializer(user).data, **AccountService.issue_tokens(user)}
        )


@extend_schema(summary="Refresh access token", tags=["Auth"])
class RefreshView(TokenRefreshView):
    """POST: Exchange a refresh token for a new access token."""


# =============================================================================
# User Directory & Profile
# =============================================================================


class UserListView(APIView):
    """
    API view for the user directory.

    GET: List users, or search them with ?q=

    URL: /api/v1/users/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List or search users",
        tags=["Users"],
        parameters=[
            OpenApiParameter(
                name="q",
                description="Substring of handle or display name",
                required=False,
                type=str,
            ),
        ],
        responses={200: PublicUserSerializer(many=True)},
    )
    def get(self, request):
        query = request.query_params.get("q", "")
        if query:
            users = AccountService.search(query)
        else:
            users = AccountService.list_users()
        return Response(PublicUserSerializer(users, many=True).data)


class UserDetailView(APIView):
    """
    API view for a single user.

    GET: Public profile (full profile when it is the caller)
    PUT/PATCH: Update own profile
    DELETE: Delete own account

    URL: /api/v1/users/{user_id}/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Get user",
        tags=["Users"],
        responses={200: PublicUserSerializer, 404: OpenApiResponse(description="Not found")},
    )
    def get(self, request, user_id):
        user = AccountService.get_user(user_id)
        if user.pk == request.user.pk:
            return Response(UserSerializer(user).data)
        return Response(PublicUserSerializer(user).data)

    @extend_schema(
        summary="Update own profile",
        tags=["Users"],
        request=ProfileUpdateSerializer,
        responses={200: UserSerializer},
    )
    def put(self, request, user_id):
        return self._update_profile(request, user_id)

    @extend_schema(
        summary="Partially update own profile",
        tags=["Users"],
        request=ProfileUpdateSerializer,
        responses={200: UserSerializer},
    )
    def patch(self, request, user_id):
        return self._update_profile(request, user_id)

    @extend_schema(
        summary="Delete own account",
        description="Deletes the account with its messages and attachments.",
        tags=["Users"],
        responses={204: None},
    )
    def delete(self, request, user_id):
        user = self._own_account(request, user_id)
        AccountService.delete_account(user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _update_profile(self, request, user_id):
        user = self._own_account(request, user_id)
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        user = AccountService.update_profile(user, **serializer.validated_data)
        return Response(UserSerializer(user).data)

    def _own_account(self, request, user_id):
        user = AccountService.get_user(user_id)
        if user.pk != request.user.pk:
            raise PermissionDeniedError("You can only change your own account")
        return user
