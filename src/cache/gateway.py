# src/cache/gateway.py - v1
"""Cache access used by the orchestrators.

Downgrades CacheUnavailable to a miss (reads) or a skipped write, and treats
stored values that no longer validate against their result model as a miss.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from sproutintel.cache.base_cache_store import BaseCacheStore
from sproutintel.cache.keys import build_cache_key, namespace_for
from sproutintel.cache.models import CacheEntry
from sproutintel.core.errors import CacheUnavailable

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class CacheGateway:
    """Best-effort cache front for a BaseCacheStore.

    Args:
        store: Backend store, or None to run without caching.
        prefix: Key prefix shared by this deployment.
    """

    def __init__(self, store: BaseCacheStore | None, prefix: str = "sproutintel") -> None:
        self._store = store
        self._prefix = prefix
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self._store is not None

    def key(
        self,
        capability: str,
        payload: dict[str, Any],
        caller_tier: str = "any",
        sub_type: str | None = None,
    ) -> str:
        return build_cache_key(capability, payload, caller_tier, sub_type, prefix=self._prefix)

    async def lookup(self, key: str, model: type[M]) -> M | None:
        """Return the cached value for key validated as model.

        Misses, expired entries, backend outages and values that no longer
        fit model all return None.
        """
        if self._store is None:
            return None
        try:
            entry = await self._store.get(key)
        except CacheUnavailable as e:
            logger.warning("Cache read skipped for %s: %s", key, e)
            entry = None

        value = None
        if entry is not None:
            try:
                value = model.model_validate(entry.value)
            except ValidationError as e:
                logger.warning(
                    "Discarding undecodable cache entry %s (%d error(s))", key, e.error_count(),
                )

        if value is None:
            self.misses += 1
            logger.debug("cache miss %s", key)
            return None

        self.hits += 1
        logger.debug("cache hit %s", key)
        return value

    async def store(self, key: str, value: Any, ttl_s: int, capability: str) -> CacheEntry | None:
        """Write value with ttl_s; returns the entry, or None when not stored."""
        if self._store is None:
            return None
        try:
            return await self._store.set(key, value, ttl_s, namespace_for(capability))
        except CacheUnavailable as e:
            logger.warning("Cache write skipped for %s: %s", key, e)
            return None
