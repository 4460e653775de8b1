# src/orchestrators/base.py - v1
"""Shared wiring for orchestrators: providers, cache, settings, ledger, clock."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from sproutintel.cache.base_cache_store import Clock, utc_now
from sproutintel.cache.gateway import CacheGateway
from sproutintel.config.settings import Settings
from sproutintel.core.errors import ProviderError
from sproutintel.providers.guard import RetryConfig, guarded_call
from sproutintel.providers.provider_set import ProviderSet
from sproutintel.tracking.call_logger import CallLogger

T = TypeVar("T")


class BaseOrchestrator:
    """Dependencies every orchestrator receives explicitly.

    Args:
        providers: Provider adapters bundle.
        cache: Cache gateway; None runs without caching.
        settings: Application settings (timeouts, thresholds).
        call_logger: Provider call ledger shared across orchestrators.
        clock: Injectable UTC clock (tests).
    """

    def __init__(
        self,
        providers: ProviderSet,
        cache: CacheGateway | None = None,
        settings: Settings | None = None,
        call_logger: CallLogger | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._providers = providers
        self._cache = cache or CacheGateway(None)
        self._settings = settings or Settings()
        self._calls = call_logger or CallLogger()
        self._clock = clock or utc_now
        self._retry = RetryConfig(max_retries=self._settings.provider_max_retries)

    @property
    def call_logger(self) -> CallLogger:
        return self._calls

    async def _guarded(
        self,
        operation: str,
        provider: Any,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        timeout_s: float,
        **kwargs: Any,
    ) -> T:
        """Run one provider call through guarded_call, ledgering failures."""
        try:
            return await guarded_call(
                fn, *args,
                provider=provider.provider_name,
                timeout_s=timeout_s,
                retry=self._retry,
                **kwargs,
            )
        except ProviderError as e:
            self._calls.record_failure(operation, e.provider, provider.model, e.error_type)
            raise
