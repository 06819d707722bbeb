"""
Serializers for authentication models.

This module provides DRF serializers for:
- Public user profile (what other users see)
- Own user profile (adds email and relationship lists)
- Registration, login and profile updates (input validation)

Related files:
    - models.py: User model
    - views.py: Views that use these serializers
    - services.py: AccountService holds the business rules

Security:
    - Password fields are write-only
    - Email and relationship lists are only shown to the user themselves
"""

from rest_framework import serializers

from authentication.constants import ACCOUNT_CONFIG
from authentication.models import User, UserStatus


class PublicUserSerializer(serializers.ModelSerializer):
    """
    Public profile of a user.

    Used for directory listings, presence snapshots and as the sender
    profile attached to pushed messages.
    """

    class Meta:
        model = User
        fields = [
            "id",
            "handle",
            "display_name",
            "avatar",
            "bio",
            "status",
            "last_seen",
            "created_at",
        ]
        read_only_fields = fields


class UserSerializer(PublicUserSerializer):
    """
    Full profile of the current user.

    Adds email and the friend, blocked and muted id lists.
    """

    friends = serializers.PrimaryKeyRelatedField(
        many=True, read_only=True, pk_field=serializers.UUIDField()
    )
    blocked_users = serializers.PrimaryKeyRelatedField(
        many=True, read_only=True, pk_field=serializers.UUIDField()
    )
    muted_users = serializers.PrimaryKeyRelatedField(
        many=True, read_only=True, pk_field=serializers.UUIDField()
    )

    class Meta(PublicUserSerializer.Meta):
        fields = PublicUserSerializer.Meta.fields + [
            "email",
            "avatar_style",
            "friends",
            "blocked_users",
            "muted_users",
        ]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """
    Input for account registration.

    Uniqueness of handle and email is checked by AccountService so both
    transports report the same conflict codes.
    """

    handle = serializers.CharField(max_length=30)
    display_name = serializers.CharField(max_length=ACCOUNT_CONFIG.MAX_DISPLAY_NAME_LENGTH)
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=ACCOUNT_CONFIG.MIN_PASSWORD_LENGTH,
        style={"input_type": "password"},
    )
    avatar_style = serializers.CharField(max_length=40, required=False)

    def validate_handle(self, value):
        """Validate handle format (3-30 chars, letters, digits, _ . -)."""
        handle = value.strip()
        if not ACCOUNT_CONFIG.HANDLE_PATTERN.match(handle):
            raise serializers.ValidationError(
                "Handle must be 3-30 characters and contain only "
                "letters, numbers, underscores, dots and hyphens."
            )
        return handle.lower()


class LoginSerializer(serializers.Serializer):
    """Handle or email plus password."""

    login = serializers.CharField(help_text="Handle or email address")
    password = serializers.CharField(write_only=True, style={"input_type": "password"})


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Input for profile updates.

    Every field is optional; omitted fields are left unchanged.
    """

    display_name = serializers.CharField(
        max_length=ACCOUNT_CONFIG.MAX_DISPLAY_NAME_LENGTH,
        required=False,
    )
    email = serializers.EmailField(required=False)
    bio = serializers.CharField(
        max_length=ACCOUNT_CONFIG.MAX_BIO_LENGTH,
        required=False,
        allow_blank=True,
    )
    status = serializers.ChoiceField(choices=UserStatus.choices, required=False)
    avatar = serializers.CharField(max_length=500, required=False, allow_blank=True)


class AuthResponseSerializer(serializers.Serializer):
    """Login/registration response: profile plus JWT pair."""

    user = UserSerializer()
    access = serializers.CharField()
    refresh = serializers.CharField()
