"""
Socket.IO connection authentication.

Resolves the JWT access token offered on connect to an active user.
The namespace refuses the connection when no user comes back.

Related files:
    - consumers.py: RelayNamespace.on_connect calls authenticate_connection
    - config/asgi.py: mounts the Socket.IO server

Token Passing Methods (in order of precedence):
    1. Auth payload: io(url, {auth: {token: "<jwt_token>"}})
    2. Query string: /socket.io/?token=<jwt_token>
    3. Header: Authorization: Bearer <jwt_token>
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


def extract_token(environ: dict, auth: dict | None = None) -> str | None:
    """Pick the access token out of the connect request."""
    if isinstance(auth, dict) and auth.get("token"):
        return str(auth["token"])

    params = parse_qs(environ.get("QUERY_STRING", ""))
    token_list = params.get("token", [])
    if token_list:
        return token_list[0]

    header = environ.get("HTTP_AUTHORIZATION", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()

    return None


def _user_from_token(token: str):
    """
    Validate JWT token and get user.

    Returns:
        User instance if valid and active, None otherwise
    """
    User = get_user_model()

    try:
        access_token = AccessToken(token)
        user = User.objects.get(id=access_token["user_id"])
    except TokenError as e:
        logger.warning(f"Invalid JWT token: {e}")
        return None
    except (User.DoesNotExist, KeyError):
        logger.warning("User not found for token")
        return None

    if not user.is_active:
        logger.warning(f"Inactive user attempted realtime connection: {user.id}")
        return None

    return user


async def authenticate_connection(environ: dict, auth: dict | None = None):
    """Return the connecting user, or None when the token is missing or bad."""
    token = extract_token(environ, auth)
    if not token:
        return None
    return await sync_to_async(_user_from_token)(token)
