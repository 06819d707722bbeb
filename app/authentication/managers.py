"""
Custom user manager for handle-based authentication.

This module provides the UserManager class that handles user creation
with the handle as the login identifier.

Related files:
    - models.py: User model that uses this manager

Security:
    - Passwords are automatically hashed via set_password()
    - Handles and emails are stored lower-cased so uniqueness is
      case-insensitive
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Custom manager for User model.

    Usage:
        user = User.objects.create_user(
            handle="alice",
            email="alice@example.com",
            password="securepassword",
            display_name="Alice",
        )
    """

    def create_user(self, handle, email, password=None, **extra_fields):
        """
        Create and save a user with the given handle, email and password.

        Args:
            handle: Unique handle (required, stored lower-case)
            email: Email address (required, stored lower-case)
            password: Raw password, hashed before storage
            **extra_fields: Additional fields to set on the user

        Returns:
            User: The created user instance

        Raises:
            ValueError: If handle or email is not provided
        """
        if not handle:
            raise ValueError("The handle must be set")
        if not email:
            raise ValueError("The email must be set")

        extra_fields.setdefault("display_name", handle)

        user = self.model(
            handle=handle.strip().lower(),
            email=self.normalize_email(email).lower(),
            **extra_fields,
        )

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def get_by_natural_key(self, username):
        """Look up by handle regardless of case."""
        return self.get(handle__iexact=username)
