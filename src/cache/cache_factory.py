# src/cache/cache_factory.py - v1
"""Factory for cache store instantiation."""

from __future__ import annotations

from sproutintel.cache.base_cache_store import BaseCacheStore, Clock
from sproutintel.config.settings import Settings


def create_cache_store(
    settings: Settings | None = None, clock: Clock | None = None
) -> BaseCacheStore | None:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.
        clock: Optional clock override (tests).

    Returns:
        Configured BaseCacheStore, or None when caching is disabled.
    """
    if settings is not None and not settings.cache_enabled:
        return None

    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from sproutintel.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore(clock=clock)

    if backend == "json":
        from sproutintel.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=settings.cache_root, clock=clock)  # type: ignore[union-attr]

    if backend == "redis":
        from sproutintel.cache.redis_store import RedisCacheStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")
        return RedisCacheStore(redis_url=settings.cache_redis_url, clock=clock)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
