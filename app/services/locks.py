"""
Per-room mutual exclusion for the reservation engine.

Locks are held weakly: once no coroutine waits on or holds a room's lock it
is dropped, so the registry never outgrows the set of rooms in flight.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.core.errors import TransientError

logger = logging.getLogger(__name__)


class RoomLocks:
    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, room_id: int) -> asyncio.Lock:
        lock = self._locks.get(room_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[room_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, room_id: int) -> AsyncIterator[None]:
        """Serialize the enclosed block against every other holder of *room_id*."""
        lock = self.lock_for(room_id)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Timed out waiting for lock on room %d", room_id)
            raise TransientError("Room is busy, please retry") from exc
        try:
            yield
        finally:
            lock.release()
