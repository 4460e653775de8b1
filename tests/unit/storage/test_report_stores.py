# tests/unit/storage/test_report_stores.py - v1
"""Tests for the intelligence report stores and their factory."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta, timezone

import pytest

from sproutintel.config.settings import Settings
from sproutintel.core.errors import ReportStoreError
from sproutintel.core.models import (
    LocationIntelligenceReport,
    MarketFacet,
    ReportSummary,
    UnavailableFacet,
)
from sproutintel.storage.base_report_store import report_identity
from sproutintel.storage.memory_report_store import MemoryReportStore
from sproutintel.storage.report_store_factory import create_report_store
from sproutintel.storage.sqlite_report_store import SqliteReportStore

NOON = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _report(location: str = "Lagos", at: datetime = NOON, insights: int = 3) -> LocationIntelligenceReport:
    def unavailable(name: str) -> UnavailableFacet:
        return UnavailableFacet(facet=name, location=location, error=f"{name} unavailable")

    return LocationIntelligenceReport(
        location=location,
        report_date=at.date(),
        crops=["maize"],
        market=MarketFacet(
            location=location,
            crops=["maize"],
            analysis="1. Stable",
            confidence_score=0.92,
            model="sonar",
            cost_usd=0.005,
            generated_at=at,
            expires_at=at + timedelta(hours=4),
            insights_count=insights,
        ),
        weather=unavailable("weather"),
        price=unavailable("price"),
        trade=unavailable("trade"),
        summary=ReportSummary(
            crops_analyzed=1,
            insights_count=insights,
            unavailable_facets=["weather", "price", "trade"],
        ),
        generated_at=at,
        expires_at=at + timedelta(hours=6),
        total_cost_usd=0.005,
    )


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryReportStore()
    else:
        sqlite_store = SqliteReportStore(tmp_path / "db" / "reports.db")
        yield sqlite_store
        sqlite_store._conn.close()


class TestReportIdentity:
    def test_strips_and_casefolds_location(self):
        assert report_identity("  Lagos ", date(2026, 3, 2)) == ("lagos", "2026-03-02")
        assert report_identity("LAGOS", date(2026, 3, 2)) == report_identity("lagos", date(2026, 3, 2))


class TestReportStores:
    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        report = _report()
        await store.upsert(report)

        loaded = await store.get("Lagos", date(2026, 3, 2))

        assert loaded == report
        assert isinstance(loaded.weather, UnavailableFacet)
        assert isinstance(loaded.market, MarketFacet)

    @pytest.mark.asyncio
    async def test_upsert_replaces_same_day(self, store):
        await store.upsert(_report(insights=1))
        await store.upsert(_report(at=NOON + timedelta(hours=3), insights=7))

        loaded = await store.get("Lagos", date(2026, 3, 2))

        assert loaded.market.insights_count == 7
        assert await store.list_days("Lagos") == [date(2026, 3, 2)]

    @pytest.mark.asyncio
    async def test_days_and_locations_are_separate(self, store):
        await store.upsert(_report())
        await store.upsert(_report(at=NOON + timedelta(days=1)))
        await store.upsert(_report(location="Kano"))

        assert await store.list_days("Lagos") == [date(2026, 3, 3), date(2026, 3, 2)]
        assert await store.list_days("Kano") == [date(2026, 3, 2)]
        assert await store.get("Accra", date(2026, 3, 2)) is None

    @pytest.mark.asyncio
    async def test_location_casing_shares_identity(self, store):
        await store.upsert(_report(location="Lagos", insights=1))
        await store.upsert(_report(location=" lagos", at=NOON + timedelta(hours=1), insights=5))

        assert await store.list_days("LAGOS") == [date(2026, 3, 2)]
        assert (await store.get("Lagos", date(2026, 3, 2))).market.insights_count == 5


class TestSqliteReportStore:
    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "reports.db"
        first = SqliteReportStore(path)
        await first.upsert(_report())
        await first.close()

        second = SqliteReportStore(path)
        assert (await second.get("Lagos", date(2026, 3, 2))).location == "Lagos"
        await second.close()

    @pytest.mark.asyncio
    async def test_undecodable_row_is_a_miss(self, tmp_path):
        path = tmp_path / "reports.db"
        store = SqliteReportStore(path)
        store._conn.execute(
            "INSERT INTO intelligence_reports VALUES (?, ?, ?, ?, ?)",
            ("lagos", "2026-03-02", "{not json", "x", "y"),
        )
        assert await store.get("Lagos", date(2026, 3, 2)) is None
        await store.close()

    @pytest.mark.asyncio
    async def test_closed_connection_raises_store_error(self, tmp_path):
        store = SqliteReportStore(tmp_path / "reports.db")
        await store.close()
        with pytest.raises(ReportStoreError):
            await store.upsert(_report())

    def test_unopenable_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(ReportStoreError):
            SqliteReportStore(blocker / "reports.db")


class TestReportStoreFactory:
    def test_memory(self, settings):
        assert isinstance(create_report_store(settings), MemoryReportStore)

    @pytest.mark.asyncio
    async def test_sqlite(self, tmp_path):
        settings = Settings(_env_file=None, report_store="sqlite", report_db_path=tmp_path / "r.db")
        store = create_report_store(settings)
        assert isinstance(store, SqliteReportStore)
        await store.close()
        with sqlite3.connect(tmp_path / "r.db") as conn:
            tables = conn.execute("SELECT name FROM sqlite_master").fetchall()
        assert ("intelligence_reports",) in tables
