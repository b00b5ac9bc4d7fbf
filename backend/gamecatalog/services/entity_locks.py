"""In-process mutual exclusion keyed by entity id.

Each synchronized operation reads a Game and a User, mutates both in memory
and writes them back as two independent saves. Holding the locks of both
documents across that read-modify-write closes the lost-update window for
requests handled by this process. Locks are not shared between processes.

Keys are always acquired in sorted order, so two operations touching the
same pair of documents can never wait on each other in opposite order.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

logger = logging.getLogger("gamecatalog.services.entity_locks")


def game_key(game_id: str) -> str:
    return f"game:{game_id}"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


class EntityLocks:
    """Registry of ``asyncio.Lock`` objects created on demand per key.

    A lock is dropped from the registry once nobody holds or waits on it,
    so the registry only grows with the number of in-flight operations.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._refs: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    async def _acquire(self, key: str) -> None:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._refs[key] = self._refs.get(key, 0) + 1
        try:
            await lock.acquire()
        except BaseException:
            self._drop_ref(key)
            raise

    def _release(self, key: str) -> None:
        self._locks[key].release()
        self._drop_ref(key)

    def _drop_ref(self, key: str) -> None:
        self._refs[key] -= 1
        if self._refs[key] == 0:
            del self._refs[key]
            del self._locks[key]

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        """Hold the locks for all given keys for the duration of the block."""
        ordered = sorted(set(keys))
        acquired: list[str] = []
        try:
            for key in ordered:
                await self._acquire(key)
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._release(key)


# Shared by every request handled in this process.
entity_locks = EntityLocks()
