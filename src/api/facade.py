# src/api/facade.py - v1
"""Public API facade: single entry point for capability requests.

Usage:
    from sproutintel.api.facade import create_service
    service = create_service()
    result = await service.handle(CapabilityRequest(
        capability_kind="text_description",
        payload={"name": "Tomatoes", "category": "Vegetables"},
    ))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from sproutintel.cache.base_cache_store import BaseCacheStore, Clock
from sproutintel.cache.cache_factory import create_cache_store
from sproutintel.cache.gateway import CacheGateway
from sproutintel.config.settings import Settings
from sproutintel.core.errors import InvalidRequest
from sproutintel.core.models import CapabilityRequest
from sproutintel.logging.context import clear_context, set_request_context
from sproutintel.logging.logger import setup_logging
from sproutintel.orchestrators.analysis import CropAnalysisOrchestrator
from sproutintel.orchestrators.generation import GenerationOrchestrator
from sproutintel.orchestrators.image import ImageOrchestrator
from sproutintel.orchestrators.intelligence import IntelligenceOrchestrator
from sproutintel.providers.provider_set import build_provider_set
from sproutintel.routing.router import route
from sproutintel.storage.report_store_factory import create_report_store
from sproutintel.tracking.call_logger import CallLogger

if TYPE_CHECKING:
    from sproutintel.providers.provider_set import ProviderSet
    from sproutintel.storage.base_report_store import BaseReportStore

logger = logging.getLogger(__name__)


class CapabilityService:
    """Dispatches capability requests to their orchestrators.

    All orchestrators share one provider set, cache gateway and call ledger.
    """

    def __init__(
        self,
        providers: ProviderSet,
        settings: Settings,
        cache_store: BaseCacheStore | None = None,
        report_store: BaseReportStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.settings = settings
        self.cache = CacheGateway(cache_store, prefix=settings.cache_key_prefix)
        self.calls = CallLogger()
        self._cache_store = cache_store
        self._report_store = report_store

        deps: dict[str, Any] = {
            "providers": providers,
            "cache": self.cache,
            "settings": settings,
            "call_logger": self.calls,
            "clock": clock,
        }
        self.generation = GenerationOrchestrator(**deps)
        self.images = ImageOrchestrator(**deps)
        self.analysis = CropAnalysisOrchestrator(**deps)
        self.intelligence = IntelligenceOrchestrator(**deps, report_store=report_store)

    async def handle(self, request: CapabilityRequest) -> BaseModel:
        """Execute one capability request and return its typed result.

        Raises:
            InvalidRequest: Unknown tier or malformed payload.
            GenerationFailed: Text generation failed (no fallback).
            AnalysisUnavailable: Crop image analysis failed.
        """
        set_request_context(request.request_id, request.capability_kind, request.caller_tier)
        try:
            payload = request.payload
            plan = route(
                request.capability_kind, request.caller_tier, payload.get("analysis_type"),
            )
            logger.info("Handling %s via %s", request.capability_kind, ",".join(plan.steps))

            kind = request.capability_kind
            if kind in ("text_description", "marketing_copy"):
                return await self.generation.generate(kind, payload, request.caller_tier)
            if kind == "product_image":
                return await self.images.resolve(payload, request.caller_tier)
            if kind == "image_analysis":
                return await self.analysis.analyze_image(
                    payload.get("image_url", ""),
                    payload.get("analysis_type") or "general",
                    request.caller_tier,
                )
            if kind == "location_intelligence":
                crops = payload.get("crops") or []
                if not isinstance(crops, list):
                    raise InvalidRequest("location_intelligence 'crops' must be a list")
                return await self.intelligence.analyze(payload.get("location", ""), crops)
            raise InvalidRequest(f"Unknown capability kind: {kind!r}")
        finally:
            clear_context()

    async def aclose(self) -> None:
        """Release cache and report store resources."""
        if self._cache_store is not None:
            await self._cache_store.close()
        if self._report_store is not None:
            await self._report_store.close()


def create_service(
    settings: Settings | None = None,
    providers: ProviderSet | None = None,
    clock: Clock | None = None,
) -> CapabilityService:
    """Build a CapabilityService with backends selected by settings.

    Args:
        settings: Global settings. Loaded from .env if None.
        providers: Provider adapters. Built from settings if None.
        clock: Optional clock override (tests).
    """
    settings = settings or Settings()
    setup_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    return CapabilityService(
        providers=providers or build_provider_set(settings),
        settings=settings,
        cache_store=create_cache_store(settings, clock=clock),
        report_store=create_report_store(settings),
        clock=clock,
    )
