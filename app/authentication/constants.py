"""
Constants for user accounts.

Import example:
    from authentication.constants import ACCOUNT_CONFIG
"""

import re
from typing import Final


class ACCOUNT_CONFIG:
    """Configuration for registration and profiles."""

    # Handle rules: 3-30 chars, letters, digits, underscore, dot, hyphen
    HANDLE_PATTERN: Final[re.Pattern] = re.compile(r"^[a-zA-Z0-9_.-]{3,30}$")

    MAX_DISPLAY_NAME_LENGTH: Final[int] = 100
    MAX_BIO_LENGTH: Final[int] = 280
    MIN_PASSWORD_LENGTH: Final[int] = 6

    DEFAULT_BIO: Final[str] = "Hey there! I am using Bump."

    # Generated avatar reference, keyed by handle
    DEFAULT_AVATAR_STYLE: Final[str] = "avataaars"
    AVATAR_URL_TEMPLATE: Final[str] = "https://api.dicebear.com/7.x/{style}/svg?seed={seed}"

    # Directory search
    SEARCH_MAX_RESULTS: Final[int] = 50


def generate_avatar(seed: str, style: str = ACCOUNT_CONFIG.DEFAULT_AVATAR_STYLE) -> str:
    """Build the avatar reference for a seed (usually the handle)."""
    return ACCOUNT_CONFIG.AVATAR_URL_TEMPLATE.format(style=style, seed=seed)
