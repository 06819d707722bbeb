"""
Chat app for real-time direct messaging.

This app handles:
- Conversation keying and message persistence
- Live sessions and presence
- The relay engine (send, typing, read receipts, deletes)
- Attachment uploads

Related apps:
    - authentication: User model for participants
    - friends: Relationship coordinator (mute/block events arrive here)

Realtime Support:
    Uses python-socketio, mounted beside Django in config/asgi.py.
    See consumers.py for event handlers.
    See routing.py for the Socket.IO server.

Usage:
    from chat.relay import get_relay_engine

    message = await get_relay_engine().send(sender.id, receiver.id, text="Hello!")
"""
