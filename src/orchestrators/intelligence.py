# src/orchestrators/intelligence.py - v1
"""Location intelligence: four research facets fanned out concurrently.

Each facet (market, weather, price, trade) has its own cache key and TTL.
A failing facet becomes an UnavailableFacet placeholder; the composite
report is returned once all four settle and is upserted per location+day.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date, datetime, timedelta
from typing import Any

from pydantic import BaseModel

from sproutintel.cache.base_cache_store import Clock
from sproutintel.cache.gateway import CacheGateway
from sproutintel.cache.ttl import ttl_for
from sproutintel.config.settings import Settings
from sproutintel.core.errors import InvalidRequest, ProviderError, ReportStoreError
from sproutintel.core.models import (
    FACETS,
    LocationIntelligenceReport,
    MarketFacet,
    PriceFacet,
    ProviderResult,
    ReportSummary,
    TradeFacet,
    UnavailableFacet,
    WeatherFacet,
)
from sproutintel.extraction import intelligence_signals as signals
from sproutintel.logging.context import set_facet_context
from sproutintel.orchestrators import prompts
from sproutintel.orchestrators.base import BaseOrchestrator
from sproutintel.providers.provider_set import ProviderSet
from sproutintel.storage.base_report_store import BaseReportStore, normalize_location
from sproutintel.storage.memory_report_store import MemoryReportStore
from sproutintel.tracking.call_logger import CallLogger
from sproutintel.tracking.cost_calculator import research_call_cost

logger = logging.getLogger(__name__)

FACET_CONFIDENCE: dict[str, float] = {
    "market": 0.92,
    "weather": 0.88,
    "price": 0.85,
    "trade": 0.80,
}
FACET_MODELS: dict[str, type[BaseModel]] = {
    "market": MarketFacet,
    "weather": WeatherFacet,
    "price": PriceFacet,
    "trade": TradeFacet,
}
FACET_ERRORS: dict[str, str] = {
    "market": "Market intelligence unavailable",
    "weather": "Weather intelligence unavailable",
    "price": "Price intelligence unavailable",
    "trade": "Trade opportunity analysis unavailable",
}

Facet = MarketFacet | WeatherFacet | PriceFacet | TradeFacet | UnavailableFacet


def normalize_crops(crops: list[str] | None) -> list[str]:
    """Stripped, deduplicated, sorted crop names."""
    return sorted({c.strip() for c in crops or [] if c and c.strip()})


def facet_signals(facet: str, text: str) -> dict[str, Any]:
    """Facet-specific counters and alerts extracted from the research answer."""
    if facet == "market":
        return {"insights_count": signals.count_insights(text)}
    if facet == "weather":
        return {
            "reports_count": signals.count_weather_reports(text),
            "alerts": signals.extract_weather_alerts(text),
        }
    if facet == "price":
        alerts = signals.extract_price_alerts(text)
        return {"alerts_count": len(alerts), "price_alerts": alerts}
    return {
        "opportunities_count": signals.count_opportunities(text),
        "opportunities": signals.extract_trade_opportunities(text),
    }


def summarize(crops: list[str], facets: dict[str, Facet]) -> ReportSummary:
    """Per-facet counts; unavailable facets count zero."""

    def count(name: str, attr: str) -> int:
        facet = facets[name]
        return 0 if isinstance(facet, UnavailableFacet) else getattr(facet, attr)

    return ReportSummary(
        crops_analyzed=len(crops),
        insights_count=count("market", "insights_count"),
        reports_count=count("weather", "reports_count"),
        alerts_count=count("price", "alerts_count"),
        opportunities_count=count("trade", "opportunities_count"),
        unavailable_facets=[
            name for name in FACETS if isinstance(facets[name], UnavailableFacet)
        ],
    )


class IntelligenceOrchestrator(BaseOrchestrator):
    """Builds composite location intelligence reports."""

    def __init__(
        self,
        providers: ProviderSet,
        cache: CacheGateway | None = None,
        settings: Settings | None = None,
        call_logger: CallLogger | None = None,
        clock: Clock | None = None,
        report_store: BaseReportStore | None = None,
    ) -> None:
        super().__init__(providers, cache, settings, call_logger, clock)
        self._reports = report_store or MemoryReportStore()

    async def analyze(
        self, location: str, crops: list[str] | None = None
    ) -> LocationIntelligenceReport:
        """Run all four facets for location and crops and persist the report.

        Raises:
            InvalidRequest: Empty location.
        """
        location = (location or "").strip()
        if not location:
            raise InvalidRequest("location_intelligence payload missing required field: location")
        crop_list = normalize_crops(crops)

        t0 = time.monotonic()
        now = self._clock()
        logger.info("Starting location intelligence for %s (%d crops)", location, len(crop_list))

        settled = await asyncio.gather(
            *(self._facet(name, location, crop_list, now) for name in FACETS),
            return_exceptions=True,
        )
        facets: dict[str, Facet] = {}
        for name, outcome in zip(FACETS, settled):
            if isinstance(outcome, BaseException):
                logger.error("Facet %s crashed: %r", name, outcome)
                outcome = self._unavailable(name, location)
            facets[name] = outcome

        report = LocationIntelligenceReport(
            location=location,
            report_date=now.date(),
            crops=crop_list,
            market=facets["market"],  # type: ignore[arg-type]
            weather=facets["weather"],  # type: ignore[arg-type]
            price=facets["price"],  # type: ignore[arg-type]
            trade=facets["trade"],  # type: ignore[arg-type]
            summary=summarize(crop_list, facets),
            generated_at=now,
            expires_at=now + timedelta(hours=self._settings.report_validity_hours),
            processing_time_ms=int((time.monotonic() - t0) * 1000),
            total_cost_usd=round(
                sum(f.cost_usd for f in facets.values() if not isinstance(f, UnavailableFacet)), 6,
            ),
        )

        try:
            await self._reports.upsert(report)
        except ReportStoreError as e:
            logger.warning("Report for %s not persisted: %s", location, e)

        logger.info(
            "Location intelligence for %s: %d/4 facets in %dms",
            location, 4 - len(report.summary.unavailable_facets), report.processing_time_ms,
        )
        return report

    async def get_report(
        self, location: str, day: date | None = None
    ) -> LocationIntelligenceReport | None:
        """Persisted report for location on day (default: today, UTC)."""
        return await self._reports.get(location, day or self._clock().date())

    async def _facet(self, name: str, location: str, crops: list[str], now: datetime) -> Facet:
        set_facet_context(name)
        key = self._cache.key(
            "location_intelligence",
            {"location": normalize_location(location), "crops": crops},
            sub_type=name,
        )
        cached = await self._cache.lookup(key, FACET_MODELS[name])
        if cached is not None:
            # entries are shared across spellings of the same location
            return cached.model_copy(update={"location": location})  # type: ignore[return-value]

        research = self._providers.research
        model = self._settings.perplexity_price_model if name == "price" else None
        try:
            result: ProviderResult = await self._guarded(
                f"facet:{name}", research, research.research,
                prompts.FACET_PROMPTS[name](location, crops),
                system=prompts.ANALYST_SYSTEM,
                model=model,
                timeout_s=self._settings.research_timeout_s,
            )
        except ProviderError as e:
            logger.warning("Facet %s unavailable for %s: %s", name, location, e)
            return self._unavailable(name, location)

        cost = research_call_cost(result.model)
        self._calls.record(f"facet:{name}", result, cost)

        text = result.raw_text or ""
        ttl = ttl_for(name)
        facet = FACET_MODELS[name](
            location=location,
            crops=crops,
            analysis=text,
            sources=result.citations,
            confidence_score=FACET_CONFIDENCE[name],
            model=result.model,
            cost_usd=cost,
            generated_at=now,
            expires_at=now + timedelta(seconds=ttl),
            **facet_signals(name, text),
        )
        await self._cache.store(key, facet.model_dump(mode="json"), ttl, "location_intelligence")
        return facet  # type: ignore[return-value]

    @staticmethod
    def _unavailable(name: str, location: str) -> UnavailableFacet:
        return UnavailableFacet(facet=name, location=location, error=FACET_ERRORS[name])  # type: ignore[arg-type]
