"""
Friends app: the friend-relationship coordinator.

This app handles:
- Friend requests (send, accept, reject) and friend removal
- Mute and block lists (unilateral, owned by the acting user)
- Friendship status lookup between two users

Related apps:
    - authentication: User model holds the friend/blocked/muted lists
    - chat: Relay engine pushes friend_request_* events to live sessions
"""
