# src/cache/memory_store.py - v1
"""In-process cache store (default CACHE_BACKEND=memory).

Single-key reads and writes only; concurrent misses for the same key may
both call the provider and the last write wins.
"""

from __future__ import annotations

from sproutintel.cache.base_cache_store import BaseCacheStore, Clock
from sproutintel.cache.models import CacheEntry


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store."""

    def __init__(self, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._entries: dict[str, CacheEntry] = {}

    async def _read(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    async def _write(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def __len__(self) -> int:
        return len(self._entries)
