# src/orchestrators/analysis.py - v1
"""Crop image analysis: vision provider plus structured extraction.

The market_research sub-type also identifies the crop and researches its
market with the research provider; a research failure degrades to
fallback advice, a vision failure raises AnalysisUnavailable.
"""

from __future__ import annotations

import asyncio
import logging
from typing import get_args

from sproutintel.cache.ttl import ttl_for
from sproutintel.core.errors import AnalysisUnavailable, InvalidRequest, ProviderError
from sproutintel.core.models import (
    AnalysisType,
    CropAnalysisResult,
    MarketResearch,
    ProviderResult,
)
from sproutintel.extraction.structured_extractor import extract_structured
from sproutintel.orchestrators import prompts
from sproutintel.orchestrators.base import BaseOrchestrator
from sproutintel.tracking.cost_calculator import compute_usage_cost, research_call_cost

logger = logging.getLogger(__name__)

ANALYSIS_TYPES: tuple[str, ...] = get_args(AnalysisType)
_MAX_CROP_NAME = 80


def parse_crop_name(text: str | None) -> str:
    """First non-empty line of an identification answer, markup stripped."""
    for line in (text or "").splitlines():
        name = line.strip().strip("*_#.:-").strip()
        if name:
            return name[:_MAX_CROP_NAME]
    return "unknown crop"


class CropAnalysisOrchestrator(BaseOrchestrator):
    """Analyzes crop images with the vision provider."""

    async def analyze_image(
        self, image_url: str, analysis_type: str = "general", caller_tier: str = "free"
    ) -> CropAnalysisResult:
        """Analyze the image at image_url for analysis_type.

        Raises:
            InvalidRequest: Missing image_url or unknown analysis type.
            AnalysisUnavailable: The vision provider failed.
        """
        if not image_url:
            raise InvalidRequest("image_analysis payload missing required field: image_url")
        if analysis_type not in ANALYSIS_TYPES:
            raise InvalidRequest(
                f"Unknown analysis_type {analysis_type!r}. Available: {', '.join(ANALYSIS_TYPES)}"
            )

        key = self._cache.key(
            "image_analysis", {"image_url": image_url}, caller_tier, sub_type=analysis_type,
        )
        cached = await self._cache.lookup(key, CropAnalysisResult)
        if cached is not None:
            return cached

        prompt = prompts.analysis_prompt(analysis_type)
        research: MarketResearch | None = None

        if analysis_type == "market_research":
            identification = await self._vision(image_url, prompts.CROP_IDENTIFICATION_PROMPT)
            vision_cost = self._vision_cost(identification)
            crop = parse_crop_name(identification.raw_text)
            # both calls settle before a vision failure is raised
            outcomes = await asyncio.gather(
                self._vision(image_url, prompt), self._crop_market(crop), return_exceptions=True,
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome
            vision, research = outcomes
            vision_cost += self._vision_cost(vision)
            model_used = f"{vision.model} + {research.model or 'research unavailable'}"
            ttl = ttl_for("market_research")
        else:
            vision = await self._vision(image_url, prompt)
            vision_cost = self._vision_cost(vision)
            model_used = vision.model
            ttl = ttl_for("image_analysis")

        raw = vision.raw_text or ""
        structured = extract_structured(raw, analysis_type)
        result = CropAnalysisResult(
            analysis_type=analysis_type,  # type: ignore[arg-type]
            image_url=image_url,
            raw_analysis=raw,
            structured=structured,
            recommendations=structured.recommendations,
            market_research=research,
            model_used=model_used,
            cost_usd=round(vision_cost + (research.cost_usd if research else 0.0), 6),
            analyzed_at=self._clock(),
        )
        await self._cache.store(key, result.model_dump(mode="json"), ttl, "image_analysis")

        logger.info(
            "Analyzed crop image (%s): confidence %.2f, %d issue(s)",
            analysis_type, structured.confidence_score, len(structured.issues_detected),
        )
        return result

    async def _vision(self, image_url: str, prompt: str) -> ProviderResult:
        vision = self._providers.vision
        try:
            return await self._guarded(
                "image_analysis", vision, vision.analyze_image, image_url, prompt,
                timeout_s=self._settings.vision_timeout_s,
            )
        except ProviderError as e:
            raise AnalysisUnavailable("image_analysis", e) from e

    def _vision_cost(self, result: ProviderResult) -> float:
        cost = compute_usage_cost(result.usage, result.model)
        self._calls.record("image_analysis", result, cost)
        return cost

    async def _crop_market(self, crop: str) -> MarketResearch:
        """Market lookup for an identified crop; never raises."""
        key = self._cache.key("crop_market_lookup", {"crop": crop.casefold()})
        cached = await self._cache.lookup(key, MarketResearch)
        if cached is not None:
            return cached

        research = self._providers.research
        try:
            result = await self._guarded(
                "crop_market_lookup", research, research.research,
                prompts.crop_market_prompt(crop),
                system=prompts.CROP_MARKET_SYSTEM,
                timeout_s=self._settings.research_timeout_s,
            )
        except ProviderError as e:
            logger.warning("Market research unavailable for %s: %s", crop, e)
            return MarketResearch(
                crop_identified=crop,
                available=False,
                fallback_advice=prompts.MARKET_RESEARCH_FALLBACK_ADVICE,
                retrieved_at=self._clock(),
            )

        cost = research_call_cost(result.model)
        self._calls.record("crop_market_lookup", result, cost)
        market = MarketResearch(
            crop_identified=crop,
            analysis=result.raw_text or "",
            sources=result.citations,
            model=result.model,
            cost_usd=cost,
            retrieved_at=self._clock(),
        )
        await self._cache.store(
            key, market.model_dump(mode="json"), ttl_for("crop_market_lookup"), "crop_market_lookup",
        )
        return market
