# src/cache/models.py - v1
"""Cache domain models: CacheNamespace, CacheEntry."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Literal

from pydantic import BaseModel, model_validator

CacheNamespace = Literal["text_generation", "image", "image_analysis", "market_analysis"]


class CacheEntry(BaseModel):
    """Single cached result with its expiry.

    Written once on first resolution, read-only until expiry.
    """

    namespace: CacheNamespace
    value: Any
    generated_at: datetime
    expires_at: datetime

    @model_validator(mode="after")
    def check_expiry_order(self) -> CacheEntry:
        if self.expires_at < self.generated_at:
            raise ValueError("expires_at must not precede generated_at")
        return self

    @classmethod
    def create(
        cls, namespace: CacheNamespace, value: Any, ttl_s: int, now: datetime
    ) -> CacheEntry:
        return cls(
            namespace=namespace,
            value=value,
            generated_at=now,
            expires_at=now + timedelta(seconds=max(ttl_s, 0)),
        )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    @property
    def ttl_seconds(self) -> int:
        return int((self.expires_at - self.generated_at).total_seconds())
