# src/routing/router.py - v1
"""Tier-based capability routing.

Maps (capability kind, caller tier) to an ordered provider plan. Pure and
state-free; orchestrators still apply provider-level fallback at run time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from sproutintel.core.errors import InvalidRequest
from sproutintel.core.models import CALLER_TIERS, FACETS

ProviderRole = Literal["text", "vision", "research", "stock_photo", "ai_image", "image_host"]

PREMIUM_TIERS: frozenset[str] = frozenset({"premium", "enterprise"})


@dataclass(frozen=True)
class ProviderPlan:
    """Ordered provider roles to try for one capability request."""

    capability_kind: str
    caller_tier: str
    steps: tuple[ProviderRole, ...]
    facets: tuple[str, ...] = ()

    @property
    def primary(self) -> ProviderRole:
        return self.steps[0]

    @property
    def allows_generation(self) -> bool:
        """Whether the plan may invoke the AI image provider."""
        return "ai_image" in self.steps

    def includes(self, role: str) -> bool:
        return role in self.steps


def route(
    capability_kind: str, caller_tier: str, analysis_type: str | None = None
) -> ProviderPlan:
    """Resolve the provider plan for a capability and tier.

    Args:
        capability_kind: One of the capability kinds.
        caller_tier: free, basic, premium or enterprise.
        analysis_type: Sub-type for image_analysis requests.

    Returns:
        ProviderPlan with at least one step.

    Raises:
        InvalidRequest: Unknown capability kind or caller tier.
    """
    if caller_tier not in CALLER_TIERS:
        raise InvalidRequest(f"Unknown caller tier: {caller_tier!r}")

    if capability_kind in ("text_description", "marketing_copy"):
        return ProviderPlan(capability_kind, caller_tier, ("text",))

    if capability_kind == "product_image":
        if caller_tier in PREMIUM_TIERS:
            # Stock stays in the plan as the automatic fallback.
            steps: tuple[ProviderRole, ...] = ("ai_image", "image_host", "stock_photo")
        else:
            steps = ("stock_photo",)
        return ProviderPlan(capability_kind, caller_tier, steps)

    if capability_kind == "image_analysis":
        if analysis_type == "market_research":
            return ProviderPlan(capability_kind, caller_tier, ("vision", "research"))
        return ProviderPlan(capability_kind, caller_tier, ("vision",))

    if capability_kind == "location_intelligence":
        return ProviderPlan(capability_kind, caller_tier, ("research",), facets=FACETS)

    raise InvalidRequest(f"Unknown capability kind: {capability_kind!r}")
