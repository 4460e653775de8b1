# src/orchestrators/image.py - v1
"""Product image resolution as an explicit finite-state machine.

States SEARCH, VERIFY, GENERATE and UPLOAD each run one step and report an
outcome; TRANSITIONS maps (state, outcome) to the next state. Pairs absent
from the table fall back: to SEARCH while stock is untried, then to
GENERATE when the plan allows it and it is untried, else UPLOAD_REQUIRED.
Every run ends in exactly one terminal state.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sproutintel.cache.ttl import ttl_for
from sproutintel.core.errors import InvalidRequest, ProviderError
from sproutintel.core.models import (
    ImageResolution,
    ProviderResult,
    RawImage,
    ResolvedImage,
    StockCandidate,
    UploadInstructions,
)
from sproutintel.orchestrators import prompts
from sproutintel.orchestrators.base import BaseOrchestrator
from sproutintel.routing.router import ProviderPlan, route
from sproutintel.tracking.cost_calculator import ai_image_cost, stock_photo_cost

logger = logging.getLogger(__name__)


class ImageState(str, Enum):
    SEARCH = "search"
    VERIFY = "verify"
    GENERATE = "generate"
    UPLOAD = "upload"
    STOCK_VERIFIED = "stock_verified"
    AI_GENERATED = "ai_generated"
    UPLOAD_REQUIRED = "upload_required"


class Outcome(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


TERMINAL_STATES: frozenset[ImageState] = frozenset(
    {ImageState.STOCK_VERIFIED, ImageState.AI_GENERATED, ImageState.UPLOAD_REQUIRED}
)

TRANSITIONS: dict[tuple[ImageState, Outcome], ImageState] = {
    (ImageState.SEARCH, Outcome.OK): ImageState.VERIFY,
    (ImageState.VERIFY, Outcome.OK): ImageState.STOCK_VERIFIED,
    (ImageState.GENERATE, Outcome.OK): ImageState.UPLOAD,
    (ImageState.UPLOAD, Outcome.OK): ImageState.AI_GENERATED,
}

_WORD = re.compile(r"[a-z0-9]+")
_WHITESPACE = re.compile(r"\s+")
_MIN_STEM = 4


@dataclass
class ImageRun:
    """Mutable state of one resolution run."""

    payload: dict[str, Any]
    plan: ProviderPlan
    tried: set[ImageState] = field(default_factory=set)
    history: list[tuple[ImageState, Outcome]] = field(default_factory=list)
    candidates: list[StockCandidate] = field(default_factory=list)
    accepted: list[ResolvedImage] = field(default_factory=list)
    generated: RawImage | None = None
    hosted: ResolvedImage | None = None
    cost_usd: float = 0.0

    @property
    def product_name(self) -> str:
        return self.payload["product_name"]


def query_terms(product_name: str, category: str | None = None) -> list[str]:
    """Lowercase words of the product name and category, deduplicated."""
    words = _WORD.findall(f"{product_name} {category or ''}".lower())
    return list(dict.fromkeys(words))


def text_similarity(terms: list[str], description: str) -> float:
    """Fraction of query terms found in description (shared-stem match)."""
    if not terms:
        return 0.0
    words = set(_WORD.findall(description.lower()))

    def found(term: str) -> bool:
        if term in words:
            return True
        return any(
            min(len(term), len(w)) >= _MIN_STEM and (w.startswith(term) or term.startswith(w))
            for w in words
        )

    return sum(1 for t in terms if found(t)) / len(terms)


def relevance_score(terms: list[str], candidate: StockCandidate) -> float:
    """0.5 x text similarity + 0.5 x provider quality, in [0, 1]."""
    score = 0.5 * text_similarity(terms, candidate.description) + 0.5 * candidate.quality_score
    return round(min(max(score, 0.0), 1.0), 3)


def public_id_for(product_name: str, timestamp_ms: int) -> str:
    slug = _WHITESPACE.sub("_", product_name.strip())
    return f"{slug}_{timestamp_ms}"


class ImageOrchestrator(BaseOrchestrator):
    """Resolves a product image: stock, AI generation, or upload request."""

    async def resolve(self, payload: dict[str, Any], caller_tier: str = "free") -> ImageResolution:
        """Run the fallback chain for payload and return its terminal state.

        Raises:
            InvalidRequest: Payload lacks product_name.
        """
        if not payload.get("product_name"):
            raise InvalidRequest("product_image payload missing required field: product_name")

        plan = route("product_image", caller_tier)
        key = self._cache.key("product_image", payload, caller_tier)
        cached = await self._cache.lookup(key, ImageResolution)
        if cached is not None:
            return cached

        run = ImageRun(payload=payload, plan=plan)
        final = await self.run(run)
        resolution = self._terminal_result(final, run)

        if final != ImageState.UPLOAD_REQUIRED:
            await self._cache.store(
                key, resolution.model_dump(mode="json"), ttl_for("product_image"), "product_image",
            )

        logger.info(
            "Resolved image for '%s' as %s via %s",
            run.product_name, final.value,
            " > ".join(f"{s.value}:{o.value}" for s, o in run.history),
        )
        return resolution

    async def run(self, run: ImageRun) -> ImageState:
        """Drive run from its entry state to a terminal state."""
        state = ImageState.GENERATE if run.plan.allows_generation else ImageState.SEARCH
        handlers = {
            ImageState.SEARCH: self._search,
            ImageState.VERIFY: self._verify,
            ImageState.GENERATE: self._generate,
            ImageState.UPLOAD: self._upload,
        }

        while state not in TERMINAL_STATES:
            run.tried.add(state)
            outcome = await handlers[state](run)
            run.history.append((state, outcome))
            state = TRANSITIONS.get((state, outcome)) or self._fallback(run)
        return state

    @staticmethod
    def _fallback(run: ImageRun) -> ImageState:
        if run.plan.includes("stock_photo") and ImageState.SEARCH not in run.tried:
            return ImageState.SEARCH
        if run.plan.allows_generation and ImageState.GENERATE not in run.tried:
            return ImageState.GENERATE
        return ImageState.UPLOAD_REQUIRED

    # --- steps ---

    async def _search(self, run: ImageRun) -> Outcome:
        stock = self._providers.stock
        query = prompts.stock_query(run.product_name, run.payload.get("category"))
        try:
            run.candidates = await self._guarded(
                "product_image:search", stock, stock.search, query,
                per_page=self._settings.stock_results_per_page,
                timeout_s=self._settings.stock_timeout_s,
            )
        except ProviderError:
            return Outcome.FAILED

        self._calls.record(
            "product_image:search",
            ProviderResult(provider=stock.provider_name, model=stock.model),
            stock_photo_cost(),
        )
        return Outcome.OK if run.candidates else Outcome.EMPTY

    async def _verify(self, run: ImageRun) -> Outcome:
        terms = query_terms(run.product_name, run.payload.get("category"))
        threshold = self._settings.image_relevance_threshold

        scored = [(relevance_score(terms, c), c) for c in run.candidates]
        kept = sorted((sc for sc in scored if sc[0] >= threshold), key=lambda sc: -sc[0])
        logger.debug(
            "Verified %d/%d stock candidates (threshold %.2f)",
            len(kept), len(scored), threshold,
        )

        run.accepted = [
            ResolvedImage(
                url=c.url,
                thumbnail_url=c.thumbnail_url,
                descriptor=c.description,
                relevance_score=score,
                photographer=c.photographer,
                attribution_url=c.attribution_url,
            )
            for score, c in kept
        ]
        return Outcome.OK if run.accepted else Outcome.EMPTY

    async def _generate(self, run: ImageRun) -> Outcome:
        generator = self._providers.image_generation
        try:
            result = await self._guarded(
                "product_image:generate", generator, generator.generate_image,
                prompts.image_generation_prompt(run.payload),
                timeout_s=self._settings.image_generation_timeout_s,
            )
        except ProviderError:
            return Outcome.FAILED

        cost = ai_image_cost()
        self._calls.record("product_image:generate", result, cost)
        run.cost_usd += cost
        if result.raw_image is None:
            return Outcome.FAILED
        run.generated = result.raw_image
        return Outcome.OK

    async def _upload(self, run: ImageRun) -> Outcome:
        host = self._providers.image_host
        if run.generated is None:
            return Outcome.FAILED
        public_id = public_id_for(run.product_name, int(self._clock().timestamp() * 1000))
        try:
            run.hosted = await self._guarded(
                "product_image:upload", host, host.upload, run.generated, public_id,
                timeout_s=self._settings.upload_timeout_s,
            )
        except ProviderError:
            return Outcome.FAILED

        self._calls.record(
            "product_image:upload", ProviderResult(provider=host.provider_name, model=host.model),
        )
        return Outcome.OK

    def _terminal_result(self, state: ImageState, run: ImageRun) -> ImageResolution:
        now = self._clock()
        if state == ImageState.STOCK_VERIFIED:
            return ImageResolution(
                source="stock_verified", images=run.accepted, cost_usd=run.cost_usd, resolved_at=now,
            )
        if state == ImageState.AI_GENERATED and run.hosted is not None:
            return ImageResolution(
                source="ai_generated", images=[run.hosted], cost_usd=run.cost_usd, resolved_at=now,
            )
        return ImageResolution(
            source="upload_required",
            images=[],
            upload_instructions=UploadInstructions(),
            cost_usd=run.cost_usd,
            resolved_at=now,
        )
