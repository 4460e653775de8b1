# tests/unit/orchestrators/test_analysis.py - v1
"""Tests for orchestrators/analysis.py."""

from __future__ import annotations

import pytest

from sproutintel.core.errors import AnalysisUnavailable, InvalidRequest, ProviderError
from sproutintel.orchestrators.analysis import CropAnalysisOrchestrator, parse_crop_name

from conftest import (
    FakeResearchProvider,
    FakeVisionProvider,
    build_orchestrator,
    overwrite_cached_values,
)

LEAF = "https://img.example.org/leaf.jpg"
FRUIT = "https://img.example.org/fruit.jpg"


class _FailsAfterIdentification(FakeVisionProvider):
    """Identifies the crop, then fails every other vision prompt."""

    async def analyze_image(self, image_url, prompt):
        if prompt.startswith("Identify the main"):
            return await super().analyze_image(image_url, prompt)
        self.calls.append((image_url, prompt))
        raise ProviderError("gemini", "HTTP 500", "server_error")


def _orchestrator(fakes, cache, settings, call_logger, clock) -> CropAnalysisOrchestrator:
    return build_orchestrator(CropAnalysisOrchestrator, fakes, cache, settings, call_logger, clock)


class TestParseCropName:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Tomato", "Tomato"),
            ("\n  **Cassava**\nA root crop.", "Cassava"),
            ("", "unknown crop"),
            (None, "unknown crop"),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_crop_name(text) == expected

    def test_truncated(self):
        assert len(parse_crop_name("x" * 200)) == 80


class TestAnalyzeImage:
    @pytest.mark.asyncio
    async def test_general(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        result = await orch.analyze_image(LEAF)

        assert result.analysis_type == "general"
        assert result.structured.health_status == "good overall"
        assert result.structured.growth_stage == "flowering"
        assert result.recommendations == ["Apply mulch around the base"]
        assert result.market_research is None
        assert result.model_used == "gemini-2.0-flash"
        assert result.cost_usd == pytest.approx(0.0000375, abs=1e-6)
        assert result.analyzed_at == clock.now

    @pytest.mark.asyncio
    async def test_sub_type_prompt_and_confidence(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        result = await orch.analyze_image(LEAF, "health")

        _, prompt = fakes["vision"].calls[0]
        assert "Overall plant health status" in prompt
        # health fields: health_status, issues_detected, growth_stage, recommendations
        assert result.structured.confidence_score == 0.75

    @pytest.mark.asyncio
    async def test_cached_per_sub_type(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        await orch.analyze_image(LEAF, "health")
        await orch.analyze_image(LEAF, "health")
        await orch.analyze_image(LEAF, "quality")

        assert len(fakes["vision"].calls) == 2

    @pytest.mark.asyncio
    async def test_cache_expires_after_two_hours(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        await orch.analyze_image(LEAF)
        clock.advance(hours=2, seconds=1)
        await orch.analyze_image(LEAF)

        assert len(fakes["vision"].calls) == 2

    @pytest.mark.asyncio
    async def test_vision_failure(self, fakes, cache, settings, call_logger, clock):
        fakes["vision"] = FakeVisionProvider(error=ProviderError("gemini", "HTTP 500", "server_error"))
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        with pytest.raises(AnalysisUnavailable):
            await orch.analyze_image(LEAF)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "url,analysis_type,match",
        [("", "general", "image_url"), (LEAF, "soil", "analysis_type")],
    )
    async def test_invalid(self, fakes, cache, settings, call_logger, clock, url, analysis_type, match):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)
        with pytest.raises(InvalidRequest, match=match):
            await orch.analyze_image(url, analysis_type)
        assert fakes["vision"].calls == []


class TestMarketResearch:
    @pytest.mark.asyncio
    async def test_identifies_then_researches(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        result = await orch.analyze_image(FRUIT, "market_research")

        assert len(fakes["vision"].calls) == 2
        assert fakes["vision"].calls[0][1].startswith("Identify the main")
        assert [c["facet"] for c in fakes["research"].calls] == ["crop_market"]

        market = result.market_research
        assert market.available
        assert market.crop_identified == "Tomato"
        assert market.sources == ["https://example.org/source"]
        assert result.model_used == "gemini-2.0-flash + sonar"
        assert result.cost_usd == pytest.approx(0.005075, abs=5e-6)

    @pytest.mark.asyncio
    async def test_research_failure_degrades(self, fakes, cache, settings, call_logger, clock):
        fakes["research"] = FakeResearchProvider(fail_on={"crop_market"})
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        result = await orch.analyze_image(FRUIT, "market_research")

        market = result.market_research
        assert not market.available
        assert market.crop_identified == "Tomato"
        assert "extension services" in market.fallback_advice
        assert result.model_used == "gemini-2.0-flash + research unavailable"
        assert result.raw_analysis

    @pytest.mark.asyncio
    async def test_crop_lookup_shared_across_images(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        await orch.analyze_image(FRUIT, "market_research")
        await orch.analyze_image(LEAF, "market_research")

        assert len(fakes["research"].calls) == 1

    @pytest.mark.asyncio
    async def test_composite_ttl_is_four_hours(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        await orch.analyze_image(FRUIT, "market_research")
        clock.advance(hours=3)
        await orch.analyze_image(FRUIT, "market_research")
        assert len(fakes["vision"].calls) == 2

        clock.advance(hours=1, seconds=1)
        await orch.analyze_image(FRUIT, "market_research")
        assert len(fakes["vision"].calls) == 4

    @pytest.mark.asyncio
    async def test_identification_ledgered_when_analysis_fails(
        self, fakes, cache, settings, call_logger, clock
    ):
        fakes["vision"] = _FailsAfterIdentification()
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        with pytest.raises(AnalysisUnavailable):
            await orch.analyze_image(FRUIT, "market_research")

        by_status = {(r.operation, r.status) for r in call_logger.records}
        assert ("image_analysis", "success") in by_status
        assert ("image_analysis", "failed") in by_status
        # the concurrent crop lookup finished and was ledgered before the error surfaced
        assert ("crop_market_lookup", "success") in by_status
        assert call_logger.total_cost_usd > 0.0


class TestStaleCacheEntries:
    @pytest.mark.asyncio
    async def test_stale_analysis_is_recomputed(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)
        await orch.analyze_image(LEAF)
        assert overwrite_cached_values(cache, {"raw_analysis": "old layout"}) == 1

        result = await orch.analyze_image(LEAF)

        assert result.structured.growth_stage == "flowering"
        assert len(fakes["vision"].calls) == 2

    @pytest.mark.asyncio
    async def test_stale_crop_lookup_is_recomputed(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)
        await orch.analyze_image(FRUIT, "market_research")
        overwrite_cached_values(cache, ["not", "a", "mapping"])

        result = await orch.analyze_image(FRUIT, "market_research")

        assert result.market_research.available
        assert len(fakes["research"].calls) == 2
