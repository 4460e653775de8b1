# src/tracking/call_logger.py - v1
"""Provider call ledger: records every provider call for cost tracking."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from sproutintel.core.models import ProviderResult
from sproutintel.tracking.models import ProviderCallRecord

logger = logging.getLogger(__name__)


class CallLogger:
    """Accumulates provider call records for the lifetime of a service."""

    def __init__(self) -> None:
        self._records: list[ProviderCallRecord] = []

    def record(
        self,
        operation: str,
        result: ProviderResult,
        cost_usd: float = 0.0,
    ) -> ProviderCallRecord:
        """Record a successful provider call.

        Args:
            operation: Logical operation (e.g. "text_description", "facet:weather").
            result: Provider result with usage and latency.
            cost_usd: Estimated cost of the call.
        """
        record = ProviderCallRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            provider=result.provider,
            model=result.model,
            operation=operation,
            prompt_units=result.usage.prompt_units,
            completion_units=result.usage.completion_units,
            latency_ms=result.latency_ms,
            status="success",
            estimated_cost_usd=max(cost_usd, 0.0),
        )
        self._records.append(record)
        return record

    def record_failure(
        self, operation: str, provider: str, model: str, error_type: str
    ) -> ProviderCallRecord:
        """Record a failed provider call (no cost)."""
        record = ProviderCallRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            provider=provider,
            model=model,
            operation=operation,
            status="failed",
            error_type=error_type,
        )
        self._records.append(record)
        return record

    @property
    def records(self) -> list[ProviderCallRecord]:
        """All recorded calls."""
        return list(self._records)

    @property
    def total_calls(self) -> int:
        return len(self._records)

    @property
    def total_cost_usd(self) -> float:
        return round(sum(r.estimated_cost_usd for r in self._records), 6)

    def calls_for(self, provider: str) -> list[ProviderCallRecord]:
        return [r for r in self._records if r.provider == provider]

    def save(self, path: Path) -> None:
        """Save all records to a JSON Lines file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            for record in self._records:
                f.write(json.dumps(record.model_dump(), default=str) + "\n")
        logger.info("Saved %d provider call records to %s", len(self._records), path)
