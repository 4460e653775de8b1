# src/storage/memory_report_store.py - v1
"""In-process report store (REPORT_STORE=memory)."""

from __future__ import annotations

from datetime import date

from sproutintel.core.models import LocationIntelligenceReport
from sproutintel.storage.base_report_store import (
    BaseReportStore,
    normalize_location,
    report_identity,
)


class MemoryReportStore(BaseReportStore):
    """Dict-backed report store; contents are lost on exit."""

    def __init__(self) -> None:
        self._reports: dict[tuple[str, str], LocationIntelligenceReport] = {}

    async def upsert(self, report: LocationIntelligenceReport) -> None:
        self._reports[report_identity(report.location, report.report_date)] = report

    async def get(self, location: str, day: date) -> LocationIntelligenceReport | None:
        return self._reports.get(report_identity(location, day))

    async def list_days(self, location: str) -> list[date]:
        loc = normalize_location(location)
        return sorted(
            (date.fromisoformat(day) for stored, day in self._reports if stored == loc),
            reverse=True,
        )

    def __len__(self) -> int:
        return len(self._reports)
