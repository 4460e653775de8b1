# src/storage/base_report_store.py - v1
"""Abstract store for location intelligence reports.

Identity is (normalized location, calendar day): a second report for the
same location on the same day replaces the first, whatever its casing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from sproutintel.core.models import LocationIntelligenceReport


def normalize_location(location: str) -> str:
    """Case- and padding-insensitive form of a location name."""
    return location.strip().casefold()


def report_identity(location: str, day: date) -> tuple[str, str]:
    """Normalized (location, ISO day) pair used as the store key."""
    return normalize_location(location), day.isoformat()


class BaseReportStore(ABC):
    """Unified interface for report storage backends."""

    @abstractmethod
    async def upsert(self, report: LocationIntelligenceReport) -> None:
        """Insert report, or replace the one with the same location and day.

        Raises:
            ReportStoreError: The backend could not persist the report.
        """

    @abstractmethod
    async def get(self, location: str, day: date) -> LocationIntelligenceReport | None:
        """Return the report for location on day, or None."""

    @abstractmethod
    async def list_days(self, location: str) -> list[date]:
        """Days with a stored report for location, most recent first."""

    async def close(self) -> None:
        """Release backend resources."""
