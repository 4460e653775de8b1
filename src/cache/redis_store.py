# src/cache/redis_store.py - v1
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires the 'redis' package. Suitable for multi-instance deployments.
Entries are written with SET EX so Redis evicts them physically; expiry is
still checked on read against the stored expires_at.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from sproutintel.cache.base_cache_store import BaseCacheStore, Clock
from sproutintel.cache.models import CacheEntry
from sproutintel.core.errors import CacheUnavailable

logger = logging.getLogger(__name__)


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store."""

    def __init__(
        self,
        redis_url: str,
        clock: Clock | None = None,
        client: Any = None,
    ) -> None:
        super().__init__(clock)
        if client is None:
            try:
                import redis.asyncio as aioredis
            except ImportError as e:
                raise ImportError("redis package required: pip install redis") from e
            client = aioredis.Redis.from_url(redis_url, decode_responses=True)
        self._client = client

    async def _read(self, key: str) -> CacheEntry | None:
        try:
            data = await self._client.get(key)
        except Exception as e:
            raise CacheUnavailable(f"redis get failed: {e}") from e
        if data is None:
            return None
        try:
            return CacheEntry.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    async def _write(self, key: str, entry: CacheEntry) -> None:
        try:
            await self._client.set(key, entry.model_dump_json(), ex=max(entry.ttl_seconds, 1))
        except Exception as e:
            raise CacheUnavailable(f"redis set failed: {e}") from e

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
