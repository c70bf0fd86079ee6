"""
Per-key critical sections for ledger writes.

Booking writes for one room and payment cascades for one booking must not
interleave, while writes on unrelated rooms and bookings run in parallel. A
single ``KeyedLock`` is created per application and injected into the services
that mutate availability or payment state.
"""

import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Dict, Hashable, Tuple


def room_key(room_id: int) -> Tuple[str, int]:
    return ("room", room_id)


def booking_key(booking_id: int) -> Tuple[str, int]:
    return ("booking", booking_id)


class KeyedLock:
    """Registry of asyncio locks, one per key, dropped when no longer used."""

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    @asynccontextmanager
    async def hold_many(self, *keys: Hashable) -> AsyncIterator[None]:
        """Acquire several keys in a stable order so two callers cannot deadlock."""
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys)):
                await stack.enter_async_context(self.hold(key))
            yield
