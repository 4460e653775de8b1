# src/tracking/cost_calculator.py - v1
"""Cost estimation per provider family.

All functions are pure, never raise and never return a negative amount.
When only a token total is known, it is split 50/50 between input and
output.
"""

from __future__ import annotations

import math
from collections import defaultdict

from sproutintel.core.models import ProviderUsage
from sproutintel.tracking.models import (
    FlatRatePricing,
    ModelPricing,
    ProviderCallRecord,
    ProviderStats,
)

# Token-metered pricing per 1M tokens
DEFAULT_TOKEN_PRICING: dict[str, ModelPricing] = {
    "gemini-2.0-flash": ModelPricing(
        model="gemini-2.0-flash", input_price_per_1m=0.075, output_price_per_1m=0.30,
    ),
    "gpt-4o-mini": ModelPricing(
        model="gpt-4o-mini", input_price_per_1m=0.15, output_price_per_1m=0.60,
    ),
}
_FALLBACK_TOKEN_MODEL = "gemini-2.0-flash"

# Request-metered research pricing
DEFAULT_RESEARCH_PRICING: dict[str, FlatRatePricing] = {
    "sonar": FlatRatePricing(model="sonar", price_per_call=0.005),
}
_FALLBACK_RESEARCH_RATE = 0.005

AI_IMAGE_COST_USD = 0.10
STOCK_PHOTO_COST_USD = 0.0
_CHARS_PER_TOKEN = 4


def estimate_tokens(text: str | None) -> int:
    """Approximate token count as ceil(chars / 4)."""
    if not text:
        return 0
    return math.ceil(len(text) / _CHARS_PER_TOKEN)


def estimate_token_cost(
    total_tokens: int | None,
    model: str = _FALLBACK_TOKEN_MODEL,
    pricing: dict[str, ModelPricing] | None = None,
) -> float:
    """Cost of total_tokens split evenly between input and output."""
    if not total_tokens or total_tokens <= 0:
        return 0.0
    p = _token_pricing(model, pricing)
    half = total_tokens * 0.5
    cost = half * p.input_price_per_1m / 1_000_000 + half * p.output_price_per_1m / 1_000_000
    return round(max(cost, 0.0), 6)


def compute_usage_cost(
    usage: ProviderUsage | None,
    model: str = _FALLBACK_TOKEN_MODEL,
    pricing: dict[str, ModelPricing] | None = None,
) -> float:
    """Cost of a usage record.

    Estimated usage goes through the 50/50 split; usage reported by the
    provider is priced with its true input/output split.
    """
    if usage is None or usage.total_units <= 0:
        return 0.0
    if usage.estimated:
        return estimate_token_cost(usage.total_units, model, pricing)
    p = _token_pricing(model, pricing)
    cost = (max(usage.prompt_units, 0) * p.input_price_per_1m / 1_000_000
            + max(usage.completion_units, 0) * p.output_price_per_1m / 1_000_000)
    return round(max(cost, 0.0), 6)


def research_call_cost(
    model: str = "sonar", pricing: dict[str, FlatRatePricing] | None = None
) -> float:
    """Flat per-call rate of the research provider."""
    table = pricing or DEFAULT_RESEARCH_PRICING
    p = table.get(model)
    return p.price_per_call if p is not None else _FALLBACK_RESEARCH_RATE


def stock_photo_cost() -> float:
    return STOCK_PHOTO_COST_USD


def ai_image_cost(images: int = 1) -> float:
    return round(AI_IMAGE_COST_USD * max(images, 0), 6)


def compute_provider_stats(records: list[ProviderCallRecord]) -> dict[str, ProviderStats]:
    """Aggregate call records per provider."""
    by_provider: dict[str, list[ProviderCallRecord]] = defaultdict(list)
    for r in records:
        by_provider[r.provider].append(r)

    result: dict[str, ProviderStats] = {}
    for provider, provider_records in by_provider.items():
        latencies = [r.latency_ms for r in provider_records]
        result[provider] = ProviderStats(
            provider=provider,
            total_calls=len(provider_records),
            failed_calls=sum(1 for r in provider_records if r.status == "failed"),
            total_units=sum(r.total_units for r in provider_records),
            avg_latency_ms=sum(latencies) / len(latencies) if latencies else 0.0,
            estimated_cost_usd=round(sum(r.estimated_cost_usd for r in provider_records), 6),
        )
    return result


def compute_total_cost(records: list[ProviderCallRecord]) -> float:
    """Total estimated cost across all records."""
    return round(sum(r.estimated_cost_usd for r in records), 6)


def _token_pricing(model: str, pricing: dict[str, ModelPricing] | None) -> ModelPricing:
    table = pricing or DEFAULT_TOKEN_PRICING
    return table.get(model) or DEFAULT_TOKEN_PRICING[_FALLBACK_TOKEN_MODEL]
