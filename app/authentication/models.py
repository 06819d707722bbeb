"""
Authentication models.

This module defines the user identity model:
- User: handle-based identity with profile fields and relationship lists

Relationship lists:
    friends: symmetrical, so one edge updates both users' lists
    blocked_users / muted_users: unilateral, owned by the acting user

Related files:
    - managers.py: Custom user manager for handle-based creation
    - services.py: AccountService business logic
    - friends.services: Friend-relationship coordinator

Security:
    - User passwords hashed with Django's PBKDF2
    - Handle and email uniqueness is case-insensitive
"""

from django.contrib.auth.models import AbstractBaseUser
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from authentication.constants import ACCOUNT_CONFIG
from authentication.managers import UserManager


class UserStatus(models.TextChoices):
    """
    Profile status chosen by the user.

    Live presence is derived from the session registry; this value is
    what the user advertises on top of it.
    """

    ONLINE = "online", "Online"
    AWAY = "away", "Away"
    BUSY = "busy", "Busy"
    OFFLINE = "offline", "Offline"


class User(UUIDPrimaryKeyMixin, AbstractBaseUser, BaseModel):
    """
    User identity with public profile and relationship lists.

    Fields:
        handle: Unique, case-insensitive login name
        email: Unique, case-insensitive email
        display_name: Name shown to other users
        bio: Short profile text
        status: Advertised status (online, away, busy, offline)
        avatar: Avatar reference (URL)
        avatar_style: Style used to generate the default avatar
        last_seen: Updated on login and on every session bind/unbind
        created_at: Registration time (from BaseModel)

    Relationships:
        friends: Accepted friends (symmetrical)
        blocked_users: Users this user has blocked
        muted_users: Users this user has muted
    """

    handle = models.CharField(
        max_length=30,
        unique=True,
        help_text="Unique handle (stored lower-case)",
    )
    email = models.EmailField(
        max_length=254,
        unique=True,
        help_text="Email address (stored lower-case)",
    )
    display_name = models.CharField(
        max_length=ACCOUNT_CONFIG.MAX_DISPLAY_NAME_LENGTH,
        help_text="Name shown to other users",
    )
    bio = models.CharField(
        max_length=ACCOUNT_CONFIG.MAX_BIO_LENGTH,
        blank=True,
        default=ACCOUNT_CONFIG.DEFAULT_BIO,
    )
    status = models.CharField(
        max_length=10,
        choices=UserStatus.choices,
        default=UserStatus.OFFLINE,
    )
    avatar = models.CharField(
        max_length=500,
        blank=True,
        default="",
        help_text="Avatar reference (URL)",
    )
    avatar_style = models.CharField(
        max_length=40,
        default=ACCOUNT_CONFIG.DEFAULT_AVATAR_STYLE,
    )
    is_active = models.BooleanField(default=True)
    last_seen = models.DateTimeField(default=timezone.now)

    friends = models.ManyToManyField(
        "self",
        symmetrical=True,
        blank=True,
    )
    blocked_users = models.ManyToManyField(
        "self",
        symmetrical=False,
        related_name="blocked_by",
        blank=True,
    )
    muted_users = models.ManyToManyField(
        "self",
        symmetrical=False,
        related_name="muted_by",
        blank=True,
    )

    USERNAME_FIELD = "handle"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["email", "display_name"]

    objects = UserManager()

    class Meta:
        db_table = "authentication_user"
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["handle"]
        constraints = [
            models.UniqueConstraint(
                Lower("handle"),
                name="unique_handle_case_insensitive",
            ),
            models.UniqueConstraint(
                Lower("email"),
                name="unique_email_case_insensitive",
            ),
        ]

    def __str__(self):
        """Return the handle as string representation."""
        return self.handle

    def get_full_name(self):
        return self.display_name or self.handle

    def get_short_name(self):
        return self.handle

    def has_blocked(self, other) -> bool:
        """Whether this user has blocked ``other`` (a User or an id)."""
        other_id = getattr(other, "pk", other)
        return self.blocked_users.filter(pk=other_id).exists()

    def is_friends_with(self, other) -> bool:
        other_id = getattr(other, "pk", other)
        return self.friends.filter(pk=other_id).exists()
