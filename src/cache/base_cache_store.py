# src/cache/base_cache_store.py - v1
"""Abstract cache store interface.

Expiry is lazy: an entry past its TTL reads as a miss even if the backend
still holds it. Backends raise CacheUnavailable when they cannot be reached.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sproutintel.cache.models import CacheEntry, CacheNamespace

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    async def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for key, or None on miss or expiry."""
        entry = await self._read(key)
        if entry is None:
            return None
        if entry.is_expired(self.now()):
            return None
        return entry

    async def set(
        self, key: str, value: Any, ttl_s: int, namespace: CacheNamespace
    ) -> CacheEntry:
        """Store value under key for ttl_s seconds and return the written entry."""
        entry = CacheEntry.create(namespace, value, ttl_s, self.now())
        await self._write(key, entry)
        return entry

    @abstractmethod
    async def _read(self, key: str) -> CacheEntry | None:
        """Fetch the raw entry, expired or not."""

    @abstractmethod
    async def _write(self, key: str, entry: CacheEntry) -> None:
        """Persist entry, overwriting any previous one."""

    async def close(self) -> None:
        """Release backend resources."""
