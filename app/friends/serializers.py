"""
Serializers for the friends API.

Serializer Hierarchy:
    FriendRequestSerializer: Request with both public profiles (also the
        friend_request_received push payload)
    FriendRequestCreateSerializer: Send a request
    FriendshipStatusSerializer: Status lookup response
"""

from rest_framework import serializers

from authentication.serializers import PublicUserSerializer
from friends.models import FriendRequest, FriendshipStatus


class FriendRequestSerializer(serializers.ModelSerializer):
    sender = PublicUserSerializer(read_only=True)
    recipient = PublicUserSerializer(read_only=True)

    class Meta:
        model = FriendRequest
        fields = ["id", "sender", "recipient", "state", "created_at", "responded_at"]
        read_only_fields = fields


class FriendRequestCreateSerializer(serializers.Serializer):
    recipient_id = serializers.UUIDField()


class FriendshipStatusSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=FriendshipStatus.choices)
