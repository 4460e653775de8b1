# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

# === VOCABULARIES ===

CapabilityKind = Literal[
    "text_description",
    "marketing_copy",
    "product_image",
    "image_analysis",
    "location_intelligence",
]
CallerTier = Literal["free", "basic", "premium", "enterprise"]
AnalysisType = Literal[
    "general", "health", "quality", "pest", "disease", "maturity", "market_research"
]
CopyType = Literal["social_media", "email_campaign", "product_listing", "other"]
FacetName = Literal["market", "weather", "price", "trade"]
ImageSource = Literal["stock_verified", "ai_generated", "upload_required"]

CAPABILITY_KINDS: tuple[str, ...] = (
    "text_description",
    "marketing_copy",
    "product_image",
    "image_analysis",
    "location_intelligence",
)
CALLER_TIERS: tuple[str, ...] = ("free", "basic", "premium", "enterprise")
FACETS: tuple[str, ...] = ("market", "weather", "price", "trade")


# === REQUESTS ===


class CapabilityRequest(BaseModel):
    """One unit of work handed over by the API tier. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    capability_kind: CapabilityKind
    payload: dict[str, Any] = Field(default_factory=dict)
    caller_tier: CallerTier = "free"
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])


# === PROVIDER OUTPUT ===


class ProviderUsage(BaseModel):
    """Token (or request) units consumed by one provider call."""

    prompt_units: int = 0
    completion_units: int = 0
    estimated: bool = False

    @property
    def total_units(self) -> int:
        return self.prompt_units + self.completion_units


class RawImage(BaseModel):
    """Binary image plus its MIME type."""

    data: bytes
    mime_type: str = "image/png"


class ProviderResult(BaseModel):
    """Normalized output of exactly one provider call. Never mutated."""

    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    raw_text: str | None = None
    raw_image: RawImage | None = None
    citations: list[str] = Field(default_factory=list)
    usage: ProviderUsage = Field(default_factory=ProviderUsage)
    latency_ms: int = 0


class StockCandidate(BaseModel):
    """Ranked image candidate returned by the stock-photo provider."""

    id: str
    url: str
    thumbnail_url: str | None = None
    description: str = ""
    photographer: str | None = None
    attribution_url: str | None = None
    width: int = 0
    height: int = 0
    quality_score: float = Field(default=0.0, ge=0.0, le=1.0)


# === TEXT GENERATION ===


class GenerationResult(BaseModel):
    """Generated description or marketing copy."""

    capability_kind: CapabilityKind
    content: str
    copy_type: CopyType | None = None
    model: str
    usage: ProviderUsage
    cost_usd: float = Field(ge=0.0)
    generated_at: datetime


# === IMAGE RESOLUTION ===


class ResolvedImage(BaseModel):
    """Final image of a resolution, stock or generated."""

    url: str
    thumbnail_url: str | None = None
    descriptor: str = ""
    relevance_score: float = 1.0
    photographer: str | None = None
    attribution_url: str | None = None


class UploadInstructions(BaseModel):
    """Guidance shown to the farmer when no image could be resolved."""

    message: str = "Please upload your own product images"
    requirements: list[str] = Field(
        default_factory=lambda: [
            "High resolution (min 800x600px)",
            "Good lighting and clear product visibility",
            "Multiple angles recommended",
            "JPG or PNG format",
        ]
    )
    suggested_count: int = 3


class ImageResolution(BaseModel):
    """Terminal state of the image fallback chain for one request."""

    source: ImageSource
    images: list[ResolvedImage] = Field(default_factory=list)
    upload_instructions: UploadInstructions | None = None
    cost_usd: float = Field(default=0.0, ge=0.0)
    resolved_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def primary_image(self) -> ResolvedImage | None:
        return self.images[0] if self.images else None

    @model_validator(mode="after")
    def check_images_present(self) -> ImageResolution:
        if not self.images and self.source != "upload_required":
            raise ValueError(f"{self.source} resolution must carry at least one image")
        return self


# === CROP IMAGE ANALYSIS ===


class StructuredAnalysis(BaseModel):
    """Typed fields extracted from a free-text vision answer."""

    health_status: str = "assessment needed"
    quality_assessment: str | None = None
    quality_score: float | None = None
    market_grade: Literal["A", "B", "C"] | None = None
    issues_detected: list[str] = Field(default_factory=list)
    growth_stage: str = "undetermined"
    recommendations: list[str] = Field(default_factory=list, max_length=5)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)


class MarketResearch(BaseModel):
    """Research-provider market lookup for an identified crop."""

    crop_identified: str
    available: bool = True
    analysis: str = ""
    sources: list[str] = Field(default_factory=list)
    fallback_advice: str | None = None
    model: str | None = None
    cost_usd: float = Field(default=0.0, ge=0.0)
    retrieved_at: datetime


class CropAnalysisResult(BaseModel):
    """Vision analysis of a crop image with extracted structure."""

    analysis_type: AnalysisType
    image_url: str
    raw_analysis: str
    structured: StructuredAnalysis
    recommendations: list[str] = Field(default_factory=list)
    market_research: MarketResearch | None = None
    model_used: str
    cost_usd: float = Field(default=0.0, ge=0.0)
    analyzed_at: datetime


# === LOCATION INTELLIGENCE ===


class WeatherAlert(BaseModel):
    type: str
    severity: Literal["low", "medium", "high"]
    detected: bool = True


class PriceAlert(BaseModel):
    type: str
    trend: Literal["bullish", "bearish", "unstable"]
    detected: bool = True


class TradeOpportunity(BaseModel):
    description: str
    type: str = "trade_opportunity"


class _FacetReport(BaseModel):
    """Fields common to every successful facet."""

    status: Literal["ok"] = "ok"
    location: str
    crops: list[str] = Field(default_factory=list)
    analysis: str
    sources: list[str] = Field(default_factory=list)
    confidence_score: float = Field(ge=0.0, le=1.0)
    model: str
    cost_usd: float = Field(default=0.0, ge=0.0)
    generated_at: datetime
    expires_at: datetime


class MarketFacet(_FacetReport):
    facet: Literal["market"] = "market"
    insights_count: int = 0


class WeatherFacet(_FacetReport):
    facet: Literal["weather"] = "weather"
    reports_count: int = 0
    alerts: list[WeatherAlert] = Field(default_factory=list)


class PriceFacet(_FacetReport):
    facet: Literal["price"] = "price"
    alerts_count: int = 0
    price_alerts: list[PriceAlert] = Field(default_factory=list)


class TradeFacet(_FacetReport):
    facet: Literal["trade"] = "trade"
    opportunities_count: int = 0
    opportunities: list[TradeOpportunity] = Field(default_factory=list)


class UnavailableFacet(BaseModel):
    """Placeholder for a facet whose sub-analysis failed."""

    status: Literal["unavailable"] = "unavailable"
    facet: FacetName
    location: str
    error: str
    count: int = 0


class ReportSummary(BaseModel):
    """Per-facet counts of a composite report."""

    crops_analyzed: int = 0
    insights_count: int = 0
    reports_count: int = 0
    alerts_count: int = 0
    opportunities_count: int = 0
    unavailable_facets: list[FacetName] = Field(default_factory=list)


class LocationIntelligenceReport(BaseModel):
    """Composite of the four facets under one location + day identity."""

    location: str
    report_date: date
    crops: list[str] = Field(default_factory=list)
    market: MarketFacet | UnavailableFacet = Field(discriminator="status")
    weather: WeatherFacet | UnavailableFacet = Field(discriminator="status")
    price: PriceFacet | UnavailableFacet = Field(discriminator="status")
    trade: TradeFacet | UnavailableFacet = Field(discriminator="status")
    summary: ReportSummary
    generated_at: datetime
    expires_at: datetime
    processing_time_ms: int = 0
    total_cost_usd: float = Field(default=0.0, ge=0.0)

    @property
    def is_complete(self) -> bool:
        return not self.summary.unavailable_facets
