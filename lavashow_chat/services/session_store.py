"""
Session and response stores.

Process-wide state (session contexts, cached answers) goes through the
TTLStore interface so the in-memory implementation can be swapped for an
external cache in a horizontally scaled deployment.

- TTLStore: get / set(key, value, ttl) / delete / sweep
- InMemoryTTLStore: dict-backed store with an injectable clock
- SessionLocks: one asyncio.Lock per session id
- SweepScheduler: background task that sweeps stores on a fixed interval
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


class TTLStore(ABC):
    """Key-value store whose entries expire ttl seconds after their last set()."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the value, or None when missing or expired."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store a value for ttl seconds (overwrites and refreshes expiry)."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    def sweep(self) -> int:
        """Delete expired entries and return how many were removed."""


class InMemoryTTLStore(TTLStore):
    """
    Dict-backed TTLStore.

    Expired entries are invisible to get() immediately and are physically
    removed by sweep().
    """

    def __init__(self, name: str = "store", clock: Callable[[], float] = time.monotonic):
        self.name = name
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            return None
        return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def sweep(self) -> int:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"Swept {len(expired)} expired entries from {self.name}")
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class SessionLocks:
    """
    Per-session asyncio locks.

    A session's read-modify-write of its context runs under its lock so two
    concurrent requests with the same session id never lose an update.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def prune(self, is_active: Callable[[str], bool]) -> int:
        """Drop unlocked locks of sessions that are no longer active."""
        stale = [
            session_id for session_id, lock in self._locks.items()
            if not lock.locked() and not is_active(session_id)
        ]
        for session_id in stale:
            del self._locks[session_id]
        return len(stale)

    def __len__(self) -> int:
        return len(self._locks)


class SweepScheduler:
    """Runs a sweep callback every `interval` seconds in a background task."""

    def __init__(self, sweep: Callable[[], Any], interval: float):
        self._sweep = sweep
        self._interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info(f"Store sweep scheduled every {self._interval:.0f}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._sweep()
            except Exception:
                logger.exception("Store sweep failed")


def sweep_all(stores: Iterable[TTLStore]) -> int:
    """Sweep every store and return the total number of removed entries."""
    return sum(store.sweep() for store in stores)
