# src/tracking/models.py - v1
"""Tracking domain models: pricing tables and provider call records."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ModelPricing(BaseModel):
    """Token-metered pricing, USD per 1M tokens."""

    model: str
    input_price_per_1m: float
    output_price_per_1m: float


class FlatRatePricing(BaseModel):
    """Per-call pricing for request-metered providers."""

    model: str
    price_per_call: float


class ProviderCallRecord(BaseModel):
    """Individual provider call log entry."""

    call_id: str
    timestamp: datetime
    provider: str
    model: str
    operation: str
    prompt_units: int = 0
    completion_units: int = 0
    latency_ms: int = 0
    status: Literal["success", "failed"]
    error_type: str | None = None
    estimated_cost_usd: float = Field(default=0.0, ge=0.0)

    @property
    def total_units(self) -> int:
        return self.prompt_units + self.completion_units


class ProviderStats(BaseModel):
    """Per-provider aggregate over a ledger."""

    provider: str
    total_calls: int
    failed_calls: int
    total_units: int
    avg_latency_ms: float
    estimated_cost_usd: float
