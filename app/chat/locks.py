"""
Per-conversation serialization.

Every mutation of one conversation's history (append, read batch,
tombstone) runs under that conversation's lock, so messages are
committed and pushed in send order and two read batches never race.
Different conversations never wait on each other.

Locks are created on first use and dropped once nobody holds or waits
for them, so idle conversations cost nothing.

All holders must share one event loop. The project is served over ASGI
only (config.asgi), where HTTP views reach the relay through
async_to_sync on the server loop.

Usage:
    from chat.locks import conversation_locks

    async with conversation_locks.hold(conversation_key(a, b)):
        message = await append(...)
        await push(...)
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class KeyedLock:
    """A family of asyncio locks addressed by key."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_held(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


conversation_locks = KeyedLock()
