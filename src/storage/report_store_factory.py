# src/storage/report_store_factory.py - v1
"""Factory: instantiate the report store from configuration."""

from __future__ import annotations

from sproutintel.config.settings import Settings
from sproutintel.storage.base_report_store import BaseReportStore
from sproutintel.storage.memory_report_store import MemoryReportStore


def create_report_store(settings: Settings) -> BaseReportStore:
    """Create the report store selected by REPORT_STORE.

    Raises:
        ValueError: If the store type is not supported.
    """
    if settings.report_store == "memory":
        return MemoryReportStore()

    if settings.report_store == "sqlite":
        from sproutintel.storage.sqlite_report_store import SqliteReportStore
        return SqliteReportStore(settings.report_db_path)

    raise ValueError(f"Unsupported report store: {settings.report_store!r}")
