"""Keyed query cache for the incidents client.

Query keys are tuples whose first element is the resource path, e.g.
``("/api/incidents/7",)`` or ``("/api/incidents", 3)`` for a park-filtered list.
Views never share state directly: after a mutation the affected keys are
invalidated and the next read refetches.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

QueryKey = tuple[Hashable, ...]


@dataclass
class CacheEntry:
    data: Any
    stored_at: float
    stale: bool = False


class QueryCache:
    """
    Explicit replacement for a client-side data-fetching library.

    - ``fetch`` serves fresh entries and shares one in-flight load per key.
    - ``invalidate`` marks entries stale by key prefix; nothing is refetched
      until someone reads the key again.
    - A load that finishes after its key was invalidated still stores its data,
      but the entry stays stale (last response wins, and the next read refetches).
    """

    def __init__(self, stale_time: float = 0.0, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            stale_time: Seconds an entry stays fresh; ``0`` keeps entries fresh
                until they are invalidated
            clock: Monotonic time source
        """
        self.stale_time = stale_time
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._in_flight: dict[QueryKey, asyncio.Task[Any]] = {}
        self._generations: dict[QueryKey, int] = {}

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key`` or load it.

        Args:
            key: Query key
            loader: Coroutine function producing the value

        Returns:
            The cached or freshly loaded value

        Raises:
            Whatever ``loader`` raises; nothing is stored in that case
        """
        entry = self._entries.get(key)
        if entry is not None and not self._is_expired(entry):
            logger.debug("cache.hit", key=key)
            return entry.data

        task = self._in_flight.get(key)
        if task is None:
            logger.debug("cache.miss", key=key, stale=entry is not None)
            task = asyncio.ensure_future(self._load(key, loader, self._generations.get(key, 0)))
            self._in_flight[key] = task
        else:
            logger.debug("cache.join", key=key)

        # a cancelled caller must not cancel the load other callers wait on
        return await asyncio.shield(task)

    async def _load(self, key: QueryKey, loader: Callable[[], Awaitable[Any]], generation: int) -> Any:
        try:
            data = await loader()
        finally:
            self._in_flight.pop(key, None)

        invalidated = self._generations.get(key, 0) != generation
        self._entries[key] = CacheEntry(data=data, stored_at=self._clock(), stale=invalidated)
        if invalidated:
            logger.debug("cache.stored_stale", key=key)
        return data

    def invalidate(self, key: QueryKey, exact: bool = False) -> int:
        """Mark every entry matching ``key`` as stale.

        Args:
            key: Key or key prefix
            exact: Match only ``key`` itself instead of every key it prefixes

        Returns:
            Number of matching keys (stored or in flight)
        """
        candidates = set(self._entries) | set(self._in_flight)
        matched = [k for k in candidates if self._matches(k, key, exact)]

        for k in matched:
            entry = self._entries.get(k)
            if entry is not None:
                entry.stale = True
            if k in self._in_flight:
                self._generations[k] = self._generations.get(k, 0) + 1

        logger.debug("cache.invalidate", key=key, exact=exact, matched=len(matched))
        return len(matched)

    def set(self, key: QueryKey, data: Any) -> None:
        """Store ``data`` under ``key`` as a fresh entry."""
        self._entries[key] = CacheEntry(data=data, stored_at=self._clock())

    def peek(self, key: QueryKey) -> Any | None:
        """Return the stored value for ``key`` (fresh or stale) without loading."""
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def is_stale(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        return entry is None or self._is_expired(entry)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def clear(self) -> None:
        """Drop every entry; loads still in flight will store their data as stale."""
        self._entries.clear()
        self._generations = {key: self._generations.get(key, 0) + 1 for key in self._in_flight}

    def _is_expired(self, entry: CacheEntry) -> bool:
        if entry.stale:
            return True
        if self.stale_time > 0:
            return self._clock() - entry.stored_at > self.stale_time
        return False

    @staticmethod
    def _matches(candidate: QueryKey, key: QueryKey, exact: bool) -> bool:
        if exact:
            return candidate == key
        return candidate[: len(key)] == key
