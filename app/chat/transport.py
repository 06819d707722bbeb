"""
Outbound transport for the relay.

The relay engine never talks to Socket.IO directly: it hands a
connection id, an event name and a JSON-ready payload to a Transport.

Implementations:
    SocketIOTransport: emits through a python-socketio AsyncServer
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import socketio


class Transport(Protocol):
    """Push side of a realtime connection."""

    async def push(self, connection_id: str, event: str, data: dict | list) -> None:
        """Deliver one event to one connection."""

    async def disconnect(self, connection_id: str) -> None:
        """Close a connection from the server side."""


class SocketIOTransport:
    """Transport over a python-socketio AsyncServer namespace."""

    def __init__(self, server: socketio.AsyncServer, namespace: str = "/"):
        self.server = server
        self.namespace = namespace

    async def push(self, connection_id: str, event: str, data: dict | list) -> None:
        await self.server.emit(event, data, to=connection_id, namespace=self.namespace)

    async def disconnect(self, connection_id: str) -> None:
        await self.server.disconnect(connection_id, namespace=self.namespace)
