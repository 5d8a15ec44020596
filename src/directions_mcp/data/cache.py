"""Time-boxed holder for the network snapshot."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SnapshotCache(Generic[T]):
    """Keeps the last loaded snapshot until it is `ttl` seconds old.

    `get_or_load` is the entry point: concurrent callers that find the
    snapshot stale wait on one refresh instead of each running the loader.
    A failed load leaves the cache empty, so the next call retries.
    """

    def __init__(self, ttl: float = 300.0):
        """Initialize the cache.

        Args:
            ttl: Seconds a snapshot stays fresh. Zero or less disables caching.
        """
        self._ttl = ttl
        self._value: T | None = None
        self._loaded_at: float | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def age(self) -> float | None:
        """Seconds since the current snapshot was stored, None if there is none."""
        if self._loaded_at is None:
            return None
        return time.monotonic() - self._loaded_at

    def get(self) -> T | None:
        """Return the snapshot if it is still fresh."""
        age = self.age
        if age is None or age >= self._ttl:
            return None
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._loaded_at = time.monotonic()

    def clear(self) -> None:
        self._value = None
        self._loaded_at = None

    async def get_or_load(self, load: Callable[[], Awaitable[T]]) -> T:
        """Return the fresh snapshot, running `load` at most once if stale.

        Args:
            load: Coroutine function producing a new snapshot.

        Returns:
            The cached or newly loaded snapshot.
        """
        cached = self.get()
        if cached is not None:
            return cached

        async with self._refresh_lock:
            # another caller may have refreshed while we waited
            cached = self.get()
            if cached is not None:
                return cached

            value = await load()
            self.set(value)
            logger.debug(f"Snapshot refreshed, fresh for {self._ttl}s")
            return value
