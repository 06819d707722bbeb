"""
Factory Boy factories for authentication models.

Provides realistic test data generation for:
- User: Handle-based user with profile fields

Usage:
    from authentication.tests.factories import UserFactory

    # Create a user with default values
    user = UserFactory()

    # Create a user with a chosen handle
    user = UserFactory(handle="alice", display_name="Alice")
"""

import factory

from authentication.models import User


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Creates active users through UserManager.create_user(), so handles
    and emails are normalised exactly as in registration.

    Examples:
        # Basic user
        user = UserFactory()

        # Inactive user (cannot log in or connect)
        user = UserFactory(is_active=False)
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    handle = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    display_name = factory.Sequence(lambda n: f"User {n}")
    is_active = True

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            handle=kwargs.pop("handle"),
            email=kwargs.pop("email"),
            password=password,
            **kwargs,
        )
