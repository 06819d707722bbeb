"""
Socket.IO namespace for the realtime relay.

This module implements the connection-facing side of the relay: it
authenticates connections, validates inbound events against the schemas
in chat.events, checks that identity fields match the connection's user,
and hands the event to the relay engine, presence broadcaster or friend
coordinator.

Namespaces:
    RelayNamespace: the default "/" namespace

Authentication:
    A JWT access token is required on connect (see socket_auth.py).
    Connecting does not bind a session; the client announces itself with
    user_online, which makes it the user's authoritative session.

Acknowledgements:
    Every event is answered through the Socket.IO ack callback:
        {"ok": true, ...result}
        {"ok": false, "status": 403, "error": "...", "error_code": "..."}
    Failures are also emitted to the connection as an "error" event.
    A failing event never closes the connection.

Events (from client):
    user_online, user_offline, send_message, typing_start, typing_stop,
    mark_read, get_messages, message_deleted_everyone,
    delete_message_for_me, update_status, mute_user, unmute_user,
    block_user, unblock_user
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import socketio
from asgiref.sync import sync_to_async

from chat.events import Inbound, Outbound, validate_payload
from chat.presence import PresenceBroadcaster
from chat.relay import get_relay_engine, message_payload
from chat.socket_auth import authenticate_connection
from core.exceptions import AuthError, BaseApplicationError, PermissionDeniedError
from friends.services import FriendService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from authentication.models import User
    from chat.relay import RelayEngine

logger = logging.getLogger(__name__)


class RelayNamespace(socketio.AsyncNamespace):
    """
    Realtime event handlers.

    Attributes:
        engine: Relay engine that owns delivery
        presence: Presence broadcaster sharing the engine's registry
        users: Authenticated user per connection id
    """

    def __init__(self, namespace: str = "/", engine: RelayEngine | None = None):
        super().__init__(namespace)
        self.engine = engine or get_relay_engine()
        self.presence = PresenceBroadcaster(self.engine)
        self.users: dict[str, User] = {}

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def on_connect(self, sid, environ, auth=None):
        """
        Authenticate the connection.

        Raises:
            ConnectionRefusedError: No valid token for an active user
        """
        user = await authenticate_connection(environ, auth)
        if user is None:
            logger.warning(f"Rejected unauthenticated connection {sid}")
            raise ConnectionRefusedError("authentication failed")

        self.users[sid] = user
        logger.info(f"User {user.id} connected ({sid})")

    async def on_disconnect(self, sid, reason=None):
        """Drop the session if this connection was the user's live one."""
        user = self.users.pop(sid, None)
        if user is None:
            return
        await self.presence.go_offline(user.id, sid)
        logger.info(f"User {user.id} disconnected ({sid}): {reason}")

    # =========================================================================
    # Event entry points
    # =========================================================================

    async def on_user_online(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.USER_ONLINE, payload, self._user_online)

    async def on_user_offline(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.USER_OFFLINE, payload, self._user_offline)

    async def on_send_message(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.SEND_MESSAGE, payload, self._send_message)

    async def on_typing_start(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.TYPING_START, payload, self._typing_start)

    async def on_typing_stop(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.TYPING_STOP, payload, self._typing_stop)

    async def on_mark_read(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.MARK_READ, payload, self._mark_read)

    async def on_get_messages(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.GET_MESSAGES, payload, self._get_messages)

    async def on_message_deleted_everyone(self, sid, payload=None):
        return await self._dispatch(
            sid, Inbound.DELETE_FOR_EVERYONE, payload, self._delete_for_everyone
        )

    async def on_delete_message_for_me(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.DELETE_FOR_ME, payload, self._delete_for_me)

    async def on_update_status(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.UPDATE_STATUS, payload, self._update_status)

    async def on_mute_user(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.MUTE_USER, payload, self._relationship)

    async def on_unmute_user(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.UNMUTE_USER, payload, self._relationship)

    async def on_block_user(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.BLOCK_USER, payload, self._relationship)

    async def on_unblock_user(self, sid, payload=None):
        return await self._dispatch(sid, Inbound.UNBLOCK_USER, payload, self._relationship)

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def _dispatch(
        self,
        sid: str,
        event: str,
        payload,
        handler: Callable[[str, User, str, dict], Awaitable[dict | None]],
    ) -> dict:
        """Validate, run ``handler`` and turn the outcome into an ack."""
        try:
            user = self.users.get(sid)
            if user is None:
                raise AuthError("Not authenticated", error_code="NOT_AUTHENTICATED")
            data = validate_payload(event, payload)
            result = await handler(sid, user, event, data)
        except BaseApplicationError as e:
            logger.warning(f"Event {event} from {sid} rejected: {e}")
            error = {"ok": False, "event": event, "status": e.status_code, **e.to_dict()}
            await self._emit_error(sid, error)
            return error
        except Exception:
            logger.exception(f"Event {event} from {sid} failed")
            error = {
                "ok": False,
                "event": event,
                "status": 500,
                "error": "Internal server error",
                "error_code": "INTERNAL_ERROR",
            }
            await self._emit_error(sid, error)
            return error

        return {"ok": True, **(result or {})}

    async def _emit_error(self, sid: str, error: dict) -> None:
        transport = self.engine.transport
        if transport is None:
            return
        try:
            await transport.push(sid, Outbound.ERROR, error)
        except Exception:
            logger.warning(f"Could not deliver error frame to {sid}", exc_info=True)

    @staticmethod
    def _require_self(user: User, claimed_id) -> None:
        """The identity named in a payload must be the connection's user."""
        if str(claimed_id) != str(user.id):
            raise PermissionDeniedError(
                "Event identity does not match the connection",
                error_code="IDENTITY_MISMATCH",
            )

    # =========================================================================
    # Handlers
    # =========================================================================

    async def _user_online(self, sid, user, event, data):
        self._require_self(user, data["user_id"])
        replaced = await self.presence.come_online(
            user,
            sid,
            display_name=data.get("display_name", ""),
            avatar=data.get("avatar", ""),
        )
        if replaced is not None:
            # Only one live session per user: close the one that lost
            self.users.pop(replaced.connection_id, None)
            if self.engine.transport is not None:
                await self.engine.transport.disconnect(replaced.connection_id)
        return {"online_users": self.presence.online_users()}

    async def _user_offline(self, sid, user, event, data):
        self._require_self(user, data["user_id"])
        went_offline = await self.presence.go_offline(user.id, sid)
        return {"offline": went_offline}

    async def _send_message(self, sid, user, event, data):
        self._require_self(user, data["sender_id"])
        message = await self.engine.send(
            user.id,
            data["receiver_id"],
            text=data["text"],
        )
        return {"message": message_payload(message) if message else None}

    async def _typing_start(self, sid, user, event, data):
        self._require_self(user, data["sender_id"])
        await self.engine.typing(user.id, data["receiver_id"], active=True)

    async def _typing_stop(self, sid, user, event, data):
        self._require_self(user, data["sender_id"])
        await self.engine.typing(user.id, data["receiver_id"], active=False)

    async def _mark_read(self, sid, user, event, data):
        self._require_self(user, data["user_id"])
        count = await self.engine.mark_read(user.id, data["other_user_id"])
        return {"count": count}

    async def _get_messages(self, sid, user, event, data):
        self._require_self(user, data["user_id"])
        messages = await self.engine.fetch_history(user.id, data["other_user_id"])
        return {"messages": [message_payload(message) for message in messages]}

    async def _delete_for_everyone(self, sid, user, event, data):
        message = await self.engine.delete_for_everyone(data["message_id"], user.id)
        return {"message": message_payload(message)}

    async def _delete_for_me(self, sid, user, event, data):
        hidden = await self.engine.delete_for_me(data["message_id"], user.id)
        return {"message_id": str(data["message_id"]), "hidden": hidden}

    async def _update_status(self, sid, user, event, data):
        self._require_self(user, data["user_id"])
        updated = await self.presence.set_status(user.id, data["status"])
        return {"status": updated.status}

    async def _relationship(self, sid, user, event, data):
        self._require_self(user, data["user_id"])
        action = {
            Inbound.MUTE_USER: FriendService.mute,
            Inbound.UNMUTE_USER: FriendService.unmute,
            Inbound.BLOCK_USER: FriendService.block,
            Inbound.UNBLOCK_USER: FriendService.unblock,
        }[event]
        await sync_to_async(action)(user, data["target_user_id"])
        return {"target_user_id": str(data["target_user_id"])}
