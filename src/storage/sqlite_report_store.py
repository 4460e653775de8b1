# src/storage/sqlite_report_store.py - v1
"""SQLite-backed report store (REPORT_STORE=sqlite).

Uses stdlib sqlite3. The (location, report_date) primary key gives the
upsert its replace-per-day semantics.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from sproutintel.core.errors import ReportStoreError
from sproutintel.core.models import LocationIntelligenceReport
from sproutintel.storage.base_report_store import (
    BaseReportStore,
    normalize_location,
    report_identity,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS intelligence_reports (
    location TEXT NOT NULL,
    report_date TEXT NOT NULL,
    data TEXT NOT NULL,
    generated_at TEXT NOT NULL,
    expires_at TEXT NOT NULL,
    PRIMARY KEY (location, report_date)
);
"""

_UPSERT = """
INSERT INTO intelligence_reports (location, report_date, data, generated_at, expires_at)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT (location, report_date) DO UPDATE SET
    data = excluded.data,
    generated_at = excluded.generated_at,
    expires_at = excluded.expires_at
"""


class SqliteReportStore(BaseReportStore):
    """Persists one report per location and day in a SQLite file."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self._db_path))
            self._conn.executescript(_SCHEMA)
        except (OSError, sqlite3.Error) as e:
            raise ReportStoreError(f"Cannot open report store {self._db_path}: {e}") from e

    async def upsert(self, report: LocationIntelligenceReport) -> None:
        location, day = report_identity(report.location, report.report_date)
        try:
            self._conn.execute(
                _UPSERT,
                (
                    location,
                    day,
                    report.model_dump_json(),
                    report.generated_at.isoformat(),
                    report.expires_at.isoformat(),
                ),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise ReportStoreError(f"Failed to store report for {location}: {e}") from e

    async def get(self, location: str, day: date) -> LocationIntelligenceReport | None:
        loc, iso_day = report_identity(location, day)
        try:
            row = self._conn.execute(
                "SELECT data FROM intelligence_reports WHERE location = ? AND report_date = ?",
                (loc, iso_day),
            ).fetchone()
        except sqlite3.Error as e:
            raise ReportStoreError(f"Failed to read report for {loc}: {e}") from e
        if row is None:
            return None
        try:
            return LocationIntelligenceReport.model_validate_json(row[0])
        except ValidationError as e:
            logger.warning("Discarding undecodable report %s/%s: %s", loc, iso_day, e)
            return None

    async def list_days(self, location: str) -> list[date]:
        try:
            rows = self._conn.execute(
                "SELECT report_date FROM intelligence_reports WHERE location = ? "
                "ORDER BY report_date DESC",
                (normalize_location(location),),
            ).fetchall()
        except sqlite3.Error as e:
            raise ReportStoreError(f"Failed to list reports for {location}: {e}") from e
        return [date.fromisoformat(r[0]) for r in rows]

    async def close(self) -> None:
        self._conn.close()
