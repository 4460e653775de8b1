# src/orchestrators/generation.py - v1
"""Product description and marketing copy generation.

Cache first; on a miss the text provider is called once under the text
timeout. There is no provider fallback: failures surface as GenerationFailed.
"""

from __future__ import annotations

import logging
from typing import Any, get_args

from sproutintel.cache.ttl import ttl_for
from sproutintel.core.errors import GenerationFailed, InvalidRequest, ProviderError
from sproutintel.core.models import CopyType, GenerationResult
from sproutintel.orchestrators import prompts
from sproutintel.orchestrators.base import BaseOrchestrator
from sproutintel.tracking.cost_calculator import compute_usage_cost

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "text_description": ("name", "category"),
    "marketing_copy": ("name",),
}
COPY_TYPES: tuple[str, ...] = get_args(CopyType)
DEFAULT_COPY_TYPE = "social_media"


def validate_payload(capability_kind: str, payload: dict[str, Any]) -> str | None:
    """Check required fields; return the resolved copy type for marketing copy.

    Raises:
        InvalidRequest: Unknown capability or missing/invalid field.
    """
    if capability_kind not in REQUIRED_FIELDS:
        raise InvalidRequest(f"Not a text generation capability: {capability_kind!r}")

    missing = [f for f in REQUIRED_FIELDS[capability_kind] if not payload.get(f)]
    if missing:
        raise InvalidRequest(
            f"{capability_kind} payload missing required field(s): {', '.join(missing)}"
        )

    if capability_kind != "marketing_copy":
        return None
    copy_type = payload.get("copy_type") or DEFAULT_COPY_TYPE
    if copy_type not in COPY_TYPES:
        raise InvalidRequest(
            f"Unknown copy_type {copy_type!r}. Available: {', '.join(COPY_TYPES)}"
        )
    return copy_type


class GenerationOrchestrator(BaseOrchestrator):
    """Generates descriptions and marketing copy with the text provider."""

    async def generate(
        self, capability_kind: str, payload: dict[str, Any], caller_tier: str = "free"
    ) -> GenerationResult:
        """Return generated text for payload, from cache when possible.

        Raises:
            InvalidRequest: Payload lacks a required field.
            GenerationFailed: Text provider failed or timed out.
        """
        copy_type = validate_payload(capability_kind, payload)

        key = self._cache.key(capability_kind, payload, caller_tier, sub_type=copy_type)
        cached = await self._cache.lookup(key, GenerationResult)
        if cached is not None:
            logger.debug("Serving %s from cache", capability_kind)
            return cached

        if capability_kind == "text_description":
            prompt, system = prompts.description_prompt(payload), None
        else:
            prompt = prompts.marketing_prompt(payload, copy_type or DEFAULT_COPY_TYPE)
            system = prompts.COPYWRITER_SYSTEM

        text = self._providers.text
        try:
            result = await self._guarded(
                capability_kind, text, text.generate, prompt,
                system=system,
                timeout_s=self._settings.text_timeout_s,
            )
        except ProviderError as e:
            raise GenerationFailed(capability_kind, e) from e

        content = (result.raw_text or "").strip()
        if not content:
            raise GenerationFailed(
                capability_kind,
                ProviderError(result.provider, "empty completion", "empty_response"),
            )

        cost = compute_usage_cost(result.usage, result.model)
        self._calls.record(capability_kind, result, cost)

        generated = GenerationResult(
            capability_kind=capability_kind,  # type: ignore[arg-type]
            content=content,
            copy_type=copy_type,  # type: ignore[arg-type]
            model=result.model,
            usage=result.usage,
            cost_usd=cost,
            generated_at=self._clock(),
        )
        await self._cache.store(
            key, generated.model_dump(mode="json"), ttl_for(capability_kind), capability_kind,
        )

        logger.info(
            "Generated %s (%d units, $%.6f, %dms)",
            capability_kind, result.usage.total_units, cost, result.latency_ms,
        )
        return generated
