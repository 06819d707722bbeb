"""
Conversation keying.

A conversation is not stored on its own: it is every message whose key
equals the key of its two participants. The key is the two user ids,
sorted and joined, so it is the same whichever side asks.

Usage:
    from chat.keys import conversation_key, participants

    key = conversation_key(alice.id, bob.id)   # same as (bob.id, alice.id)
    low, high = participants(key)
"""

from __future__ import annotations

from uuid import UUID

from chat.constants import MESSAGE_CONFIG


def conversation_key(user_a: UUID | str, user_b: UUID | str) -> str:
    """Return the canonical key for the unordered pair (user_a, user_b)."""
    first, second = sorted((str(user_a), str(user_b)))
    return f"{first}{MESSAGE_CONFIG.CONVERSATION_KEY_SEPARATOR}{second}"


def participants(key: str) -> tuple[str, str]:
    """
    Split a conversation key back into its two user ids.

    Raises:
        ValueError: The key does not hold exactly two ids
    """
    parts = key.split(MESSAGE_CONFIG.CONVERSATION_KEY_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Malformed conversation key: {key!r}")
    return parts[0], parts[1]


def other_participant(key: str, user_id: UUID | str) -> str:
    """
    Return the id on the other side of the conversation from ``user_id``.

    Raises:
        ValueError: ``user_id`` is not part of the conversation
    """
    first, second = participants(key)
    user_id = str(user_id)
    if user_id == first:
        return second
    if user_id == second:
        return first
    raise ValueError(f"{user_id} is not a participant of {key}")
