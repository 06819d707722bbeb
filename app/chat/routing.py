"""
Realtime routing for the chat application.

Builds the Socket.IO server that config.asgi mounts at
settings.CHAT_SOCKETIO_PATH, registers the relay namespace on it, and
attaches the server as the relay engine's transport.

Authentication:
    JWT access token in the Socket.IO auth payload ({"token": ...}) or
    as the ?token= query parameter. See socket_auth.py.
"""

import socketio
from django.conf import settings

from chat.consumers import RelayNamespace
from chat.relay import get_relay_engine
from chat.transport import SocketIOTransport

socket_server = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*" if settings.CORS_ALLOW_ALL_ORIGINS else settings.CORS_ALLOWED_ORIGINS,
    max_http_buffer_size=1024 * 1024,
)

relay_engine = get_relay_engine()
relay_engine.transport = SocketIOTransport(socket_server, namespace="/")

socket_server.register_namespace(RelayNamespace("/", engine=relay_engine))
