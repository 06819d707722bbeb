"""
Session registry: which live connection belongs to which user.

Presence is derived from this registry alone: a user is online exactly
while a session is bound for them. The registry holds no message state.

Session model:
    - At most one authoritative session per user; the last bind wins
    - Unbinding a stale connection (one that was already replaced) is a
      no-op, so a late disconnect never evicts the newer session

Implementations:
    InMemorySessionRegistry: process-local map guarded by a lock

The implementation is selected with settings.CHAT_SESSION_REGISTRY and
obtained through get_session_registry().

Usage:
    from chat.sessions import Session, get_session_registry

    registry = get_session_registry()
    replaced = registry.bind(Session(user_id="u1", connection_id=sid))
    session = registry.lookup("u1")
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Protocol

from django.conf import settings
from django.utils import timezone
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """
    A live connection bound to a user.

    Attributes:
        user_id: Id of the user (string form)
        connection_id: Transport connection id (Socket.IO sid)
        handle: Public handle, shown in presence snapshots
        display_name: Public display name
        avatar: Avatar reference
        bound_at: When the session was bound
    """

    user_id: str
    connection_id: str
    handle: str = ""
    display_name: str = ""
    avatar: str = ""
    bound_at: datetime = field(default_factory=timezone.now)

    def as_presence(self) -> dict:
        """Entry used in the online-users snapshot."""
        data = asdict(self)
        data.pop("connection_id")
        data["bound_at"] = self.bound_at.isoformat()
        return data


class SessionRegistry(Protocol):
    """Interface every session registry implementation provides."""

    def bind(self, session: Session) -> Session | None:
        """Register ``session`` as authoritative; return the one it replaced."""

    def unbind(self, user_id: str, connection_id: str | None = None) -> Session | None:
        """Remove the user's session; return it if it was authoritative."""

    def lookup(self, user_id: str) -> Session | None:
        """Return the live session for ``user_id`` or None."""

    def snapshot(self) -> list[Session]:
        """Return every bound session."""

    def clear(self) -> None:
        """Drop every session."""


class InMemorySessionRegistry:
    """
    Process-local session registry.

    Safe to call from the event loop and from worker threads (sync HTTP
    views push through the relay too).
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def bind(self, session: Session) -> Session | None:
        with self._lock:
            previous = self._sessions.get(session.user_id)
            self._sessions[session.user_id] = session

        if previous is not None and previous.connection_id != session.connection_id:
            logger.info(
                f"Session for {session.user_id} replaced: "
                f"{previous.connection_id} -> {session.connection_id}"
            )
            return previous
        logger.info(f"Session bound for {session.user_id} ({session.connection_id})")
        return None

    def unbind(self, user_id: str, connection_id: str | None = None) -> Session | None:
        """
        Remove the session for ``user_id``.

        When ``connection_id`` is given and does not match the bound
        session, nothing is removed and None is returned.
        """
        user_id = str(user_id)
        with self._lock:
            current = self._sessions.get(user_id)
            if current is None:
                return None
            if connection_id is not None and current.connection_id != connection_id:
                return None
            del self._sessions[user_id]

        logger.info(f"Session unbound for {user_id} ({current.connection_id})")
        return current

    def lookup(self, user_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(str(user_id))

    def find_by_connection(self, connection_id: str) -> Session | None:
        with self._lock:
            for session in self._sessions.values():
                if session.connection_id == connection_id:
                    return session
        return None

    def snapshot(self) -> list[Session]:
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.bound_at)

    def online_user_ids(self) -> set[str]:
        with self._lock:
            return set(self._sessions)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache(maxsize=None)
def get_session_registry() -> SessionRegistry:
    """Return the process-wide registry configured by CHAT_SESSION_REGISTRY."""
    registry_class = import_string(settings.CHAT_SESSION_REGISTRY)
    return registry_class()
