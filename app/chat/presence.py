"""
Presence broadcaster.

Turns session binds and unbinds into presence events:
    - online_users: the full snapshot, pushed to every live session on
      any join or leave
    - user_status_changed: point event about one user

Presence is read from the session registry only; the status stored on
the user record is kept in step for profile views and last-seen.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from asgiref.sync import sync_to_async

from authentication.models import UserStatus
from authentication.services import AccountService
from chat.events import Outbound
from chat.sessions import Session

if TYPE_CHECKING:
    from uuid import UUID

    from authentication.models import User
    from chat.relay import RelayEngine

logger = logging.getLogger(__name__)


class PresenceBroadcaster:
    """
    Binds and unbinds sessions and fans out the resulting presence events.

    Usage:
        presence = PresenceBroadcaster(engine)
        replaced = await presence.come_online(user, sid)
        await presence.go_offline(user.id, sid)
    """

    def __init__(self, engine: RelayEngine):
        self.engine = engine

    @property
    def registry(self):
        return self.engine.registry

    def online_users(self) -> list[dict]:
        """Current snapshot: one entry per bound session."""
        return [
            {
                "user_id": session.user_id,
                "handle": session.handle,
                "display_name": session.display_name,
                "avatar": session.avatar,
            }
            for session in self.registry.snapshot()
        ]

    async def come_online(
        self,
        user: User,
        connection_id: str,
        display_name: str = "",
        avatar: str = "",
    ) -> Session | None:
        """
        Bind ``connection_id`` as the live session of ``user``.

        Returns:
            The session this bind replaced, if any. The caller closes its
            connection.
        """
        session = Session(
            user_id=str(user.id),
            connection_id=connection_id,
            handle=user.handle,
            display_name=display_name or user.display_name,
            avatar=avatar or user.avatar,
        )
        replaced = self.registry.bind(session)
        await sync_to_async(AccountService.mark_presence)(user.id, online=True)

        await self.engine.broadcast(Outbound.ONLINE_USERS, self.online_users())
        await self.engine.broadcast(
            Outbound.USER_STATUS_CHANGED,
            {"user_id": session.user_id, "status": UserStatus.ONLINE.value},
            exclude=session.user_id,
        )
        return replaced

    async def go_offline(self, user_id: UUID | str, connection_id: str | None = None) -> bool:
        """
        Unbind the session of ``user_id``.

        A connection that was already replaced by a newer one changes
        nothing.

        Returns:
            True if the authoritative session was removed
        """
        removed = self.registry.unbind(str(user_id), connection_id)
        if removed is None:
            return False

        await sync_to_async(AccountService.mark_presence)(user_id, online=False)

        await self.engine.broadcast(Outbound.ONLINE_USERS, self.online_users())
        await self.engine.broadcast(
            Outbound.USER_STATUS_CHANGED,
            {"user_id": removed.user_id, "status": UserStatus.OFFLINE.value},
        )
        return True

    async def set_status(self, user_id: UUID | str, status: str) -> User:
        """
        Persist a manual status (away, busy, ...) and tell every live session.

        Raises:
            ValidationError: Unknown status
            NotFoundError: Unknown user
        """
        user = await sync_to_async(AccountService.set_status)(user_id, status)
        await self.engine.broadcast(
            Outbound.USER_STATUS_CHANGED,
            {"user_id": str(user.id), "status": user.status},
        )
        logger.info(f"Status of {user.id} set to {user.status}")
        return user
