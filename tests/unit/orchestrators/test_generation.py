# tests/unit/orchestrators/test_generation.py - v1
"""Tests for orchestrators/generation.py."""

from __future__ import annotations

import pytest

from sproutintel.core.errors import GenerationFailed, InvalidRequest, ProviderError
from sproutintel.orchestrators.generation import GenerationOrchestrator, validate_payload

from conftest import FakeTextProvider, overwrite_cached_values
from conftest import build_orchestrator as build

TOMATOES = {"name": "Roma Tomatoes", "category": "vegetables", "origin": "Kano", "is_organic": True}


def _orchestrator(fakes, cache, settings, call_logger, clock) -> GenerationOrchestrator:
    return build(GenerationOrchestrator, fakes, cache, settings, call_logger, clock)


class TestValidatePayload:
    def test_description_requires_name_and_category(self):
        with pytest.raises(InvalidRequest, match="category"):
            validate_payload("text_description", {"name": "Okra"})

    def test_description_has_no_copy_type(self):
        assert validate_payload("text_description", TOMATOES) is None

    def test_marketing_defaults_to_social_media(self):
        assert validate_payload("marketing_copy", {"name": "Okra"}) == "social_media"

    def test_unknown_copy_type(self):
        with pytest.raises(InvalidRequest, match="copy_type"):
            validate_payload("marketing_copy", {"name": "Okra", "copy_type": "billboard"})

    def test_not_a_text_capability(self):
        with pytest.raises(InvalidRequest):
            validate_payload("product_image", {"name": "Okra"})


class TestGenerate:
    @pytest.mark.asyncio
    async def test_description(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        result = await orch.generate("text_description", TOMATOES)

        assert result.content == "Fresh, sun-ripened tomatoes from Kano."
        assert result.copy_type is None
        assert result.generated_at == clock.now
        assert result.cost_usd == pytest.approx(0.0001875, abs=1e-6)
        prompt = fakes["text"].calls[0]["prompt"]
        assert "Roma Tomatoes" in prompt
        assert "Organic: Yes" in prompt
        assert call_logger.total_calls == 1

    @pytest.mark.asyncio
    async def test_identical_requests_hit_cache(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        first = await orch.generate("text_description", TOMATOES)
        reordered = dict(reversed(list(TOMATOES.items())))
        second = await orch.generate("text_description", reordered)

        assert len(fakes["text"].calls) == 1
        assert second == first
        assert cache.hits == 1

    @pytest.mark.asyncio
    async def test_cache_expires_after_ttl(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        await orch.generate("text_description", TOMATOES)
        clock.advance(hours=24, seconds=1)
        await orch.generate("text_description", TOMATOES)

        assert len(fakes["text"].calls) == 2

    @pytest.mark.asyncio
    async def test_tier_isolates_cache(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        await orch.generate("text_description", TOMATOES, caller_tier="free")
        await orch.generate("text_description", TOMATOES, caller_tier="premium")

        assert len(fakes["text"].calls) == 2

    @pytest.mark.asyncio
    async def test_marketing_copy_types_cached_separately(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        social = await orch.generate("marketing_copy", {"name": "Okra"})
        email = await orch.generate("marketing_copy", {"name": "Okra", "copy_type": "email_campaign"})

        assert social.copy_type == "social_media"
        assert email.copy_type == "email_campaign"
        assert len(fakes["text"].calls) == 2
        assert fakes["text"].calls[0]["system"] is not None

    @pytest.mark.asyncio
    async def test_invalid_request_makes_no_call(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)
        with pytest.raises(InvalidRequest):
            await orch.generate("text_description", {"category": "vegetables"})
        assert fakes["text"].calls == []

    @pytest.mark.asyncio
    async def test_provider_failure(self, fakes, cache, settings, call_logger, clock):
        fakes["text"] = FakeTextProvider(error=ProviderError("gemini", "HTTP 503", "server_error"))
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)

        with pytest.raises(GenerationFailed) as exc:
            await orch.generate("text_description", TOMATOES)

        assert isinstance(exc.value.cause, ProviderError)
        assert call_logger.records[0].status == "failed"
        # failures are never cached
        fakes["text"].error = None
        await orch.generate("text_description", TOMATOES)
        assert len(fakes["text"].calls) == 2

    @pytest.mark.asyncio
    async def test_empty_completion(self, fakes, cache, settings, call_logger, clock):
        fakes["text"] = FakeTextProvider(text="   ")
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)
        with pytest.raises(GenerationFailed, match="empty completion"):
            await orch.generate("text_description", TOMATOES)

    @pytest.mark.asyncio
    async def test_works_without_cache(self, fakes, settings, call_logger, clock):
        orch = build(GenerationOrchestrator, fakes, None, settings, call_logger, clock)
        await orch.generate("text_description", TOMATOES)
        await orch.generate("text_description", TOMATOES)
        assert len(fakes["text"].calls) == 2

    @pytest.mark.asyncio
    async def test_stale_cache_entry_regenerates(self, fakes, cache, settings, call_logger, clock):
        orch = _orchestrator(fakes, cache, settings, call_logger, clock)
        await orch.generate("text_description", TOMATOES)
        overwrite_cached_values(cache, {"content": "old"})

        result = await orch.generate("text_description", TOMATOES)

        assert result.content == "Fresh, sun-ripened tomatoes from Kano."
        assert len(fakes["text"].calls) == 2
        assert (cache.hits, cache.misses) == (0, 2)
