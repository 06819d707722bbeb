"""
ASGI config for the Django application.

ASGI (Asynchronous Server Gateway Interface) is the successor to WSGI,
designed to handle async Python web applications. This file exposes the
ASGI callable as a module-level variable named `application`.

This configuration supports:
- HTTP requests via Django (REST API, uploads, media files)
- Socket.IO connections for the realtime relay (chat.routing)

Uvicorn uses this entry point:
    uvicorn config.asgi:application --app-dir app

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

# Set the default Django settings module for the ASGI application
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Initialize Django ASGI application early to ensure settings are loaded
# before importing any models or other Django components
django_asgi_app = get_asgi_application()

# Import Socket.IO components after Django is initialized
import socketio  # noqa: E402
from django.conf import settings  # noqa: E402

from chat.routing import socket_server  # noqa: E402

# ASGI application that routes HTTP and realtime traffic:
# 1. /<CHAT_SOCKETIO_PATH>/ - Socket.IO relay (JWT checked on connect)
# 2. everything else       - Django's ASGI application
application = socketio.ASGIApp(
    socket_server,
    other_asgi_app=django_asgi_app,
    socketio_path=settings.CHAT_SOCKETIO_PATH,
)
