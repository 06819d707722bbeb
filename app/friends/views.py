"""
Friends API views.

URL Structure:
    /api/v1/friends/                               GET
    /api/v1/friends/{user_id}/                     DELETE
    /api/v1/friends/requests/                      POST
    /api/v1/friends/requests/incoming/             GET
    /api/v1/friends/requests/outgoing/             GET
    /api/v1/friends/requests/{id}/accept/          POST
    /api/v1/friends/requests/{id}/reject/          POST
    /api/v1/friends/status/{user_id}/              GET
    /api/v1/friends/mute/{user_id}/                POST, DELETE
    /api/v1/friends/block/{user_id}/               POST, DELETE

Related files:
    - services.py: FriendService (all rules and notifications)
    - serializers.py: Request/response serialization
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import PublicUserSerializer, UserSerializer
from friends.serializers import (
    FriendRequestCreateSerializer,
    FriendRequestSerializer,
    FriendshipStatusSerializer,
)
from friends.services import FriendService


# =============================================================================
# Friend list
# =============================================================================


class FriendListView(APIView):
    """GET: Friends of the current user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List friends",
        tags=["Friends"],
        responses={200: PublicUserSerializer(many=True)},
    )
    def get(self, request):
        friends = FriendService.friends(request.user)
        return Response(PublicUserSerializer(friends, many=True).data)


class FriendDetailView(APIView):
    """DELETE: Remove a friend (both directions)."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Remove friend",
        tags=["Friends"],
        responses={204: None, 404: OpenApiResponse(description="Unknown user")},
    )
    def delete(self, request, user_id):
        FriendService.remove(request.user, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FriendshipStatusView(APIView):
    """GET: Relationship between the current user and another user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Friendship status",
        tags=["Friends"],
        responses={200: FriendshipStatusSerializer},
    )
    def get(self, request, user_id):
        relationship = FriendService.status(request.user, user_id)
        return Response({"user_id": str(user_id), "status": relationship})


# =============================================================================
# Requests
# =============================================================================


class FriendRequestCreateView(APIView):
    """
    POST: Send a friend request.

    Request body:
        {"recipient_id": "<uuid>"}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Send friend request",
        tags=["Friends"],
        request=FriendRequestCreateSerializer,
        responses={
            201: FriendRequestSerializer,
            404: OpenApiResponse(description="Unknown user"),
            409: OpenApiResponse(description="Already friends or request pending"),
        },
    )
    def post(self, request):
        serializer = FriendRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        friend_request = FriendService.send_request(
            request.user, serializer.validated_data["recipient_id"]
        )
        return Response(
            FriendRequestSerializer(friend_request).data,
            status=status.HTTP_201_CREATED,
        )


class IncomingRequestsView(APIView):
    """GET: Pending requests addressed to the current user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Incoming friend requests",
        tags=["Friends"],
        responses={200: FriendRequestSerializer(many=True)},
    )
    def get(self, request):
        requests = FriendService.incoming(request.user)
        return Response(FriendRequestSerializer(requests, many=True).data)


class OutgoingRequestsView(APIView):
    """GET: Pending requests the current user sent."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Sent friend requests",
        tags=["Friends"],
        responses={200: FriendRequestSerializer(many=True)},
    )
    def get(self, request):
        requests = FriendService.outgoing(request.user)
        return Response(FriendRequestSerializer(requests, many=True).data)


class AcceptRequestView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Accept friend request",
        tags=["Friends"],
        request=None,
        responses={
            200: FriendRequestSerializer,
            403: OpenApiResponse(description="Not addressed to you"),
            409: OpenApiResponse(description="No longer pending"),
        },
    )
    def post(self, request, request_id):
        friend_request = FriendService.accept(request_id, request.user)
        return Response(FriendRequestSerializer(friend_request).data)


class RejectRequestView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Reject friend request",
        tags=["Friends"],
        request=None,
        responses={
            200: FriendRequestSerializer,
            403: OpenApiResponse(description="Not addressed to you"),
            409: OpenApiResponse(description="No longer pending"),
        },
    )
    def post(self, request, request_id):
        friend_request = FriendService.reject(request_id, request.user)
        return Response(FriendRequestSerializer(friend_request).data)


# =============================================================================
# Mute / block
# =============================================================================


class MuteView(APIView):
    """
    POST: Mute a user
    DELETE: Unmute a user

    Returns the caller's updated profile.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Mute user",
        tags=["Friends"],
        request=None,
        responses={200: UserSerializer},
    )
    def post(self, request, user_id):
        FriendService.mute(request.user, user_id)
        return Response(UserSerializer(request.user).data)

    @extend_schema(summary="Unmute user", tags=["Friends"], responses={200: UserSerializer})
    def delete(self, request, user_id):
        FriendService.unmute(request.user, user_id)
        return Response(UserSerializer(request.user).data)


class BlockView(APIView):
    """
    POST: Block a user (also unfriends them)
    DELETE: Unblock a user

    Returns the caller's updated profile.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Block user",
        tags=["Friends"],
        request=None,
        responses={200: UserSerializer},
    )
    def post(self, request, user_id):
        FriendService.block(request.user, user_id)
        return Response(UserSerializer(request.user).data)

    @extend_schema(summary="Unblock user", tags=["Friends"], responses={200: UserSerializer})
    def delete(self, request, user_id):
        FriendService.unblock(request.user, user_id)
        return Response(UserSerializer(request.user).data)
