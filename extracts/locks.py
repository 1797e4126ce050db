"""Per-extract mutual exclusion."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class ExtractLocks:
    """
    Hands out one asyncio.Lock per extract id.

    An entry lives only while some task holds or waits for it, so the
    registry does not grow with every id ever seen. Locks belong to the
    event loop that awaited them: one registry serves one worker process.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @contextlib.asynccontextmanager
    async def hold(self, extract_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(extract_id, asyncio.Lock())
        self._users[extract_id] = self._users.get(extract_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[extract_id] -= 1
            if self._users[extract_id] == 0:
                del self._users[extract_id]
                del self._locks[extract_id]

    def is_locked(self, extract_id: str) -> bool:
        lock = self._locks.get(extract_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
