# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides a frozen clock, isolated settings and fake providers for every
capability role. No network access: all provider I/O is faked.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from sproutintel.cache.gateway import CacheGateway
from sproutintel.cache.memory_store import MemoryCacheStore
from sproutintel.config.settings import Settings
from sproutintel.core.errors import ProviderError, UploadFailed
from sproutintel.core.models import (
    ProviderResult,
    ProviderUsage,
    RawImage,
    ResolvedImage,
    StockCandidate,
)
from sproutintel.providers.base import (
    ImageGenerationProvider,
    ImageHost,
    ResearchProvider,
    StockPhotoProvider,
    TextProvider,
    VisionProvider,
)
from sproutintel.providers.provider_set import ProviderSet
from sproutintel.tracking.call_logger import CallLogger

# === CLOCK ===


class FrozenClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


# === FAKE PROVIDERS ===


class FakeTextProvider(TextProvider):
    def __init__(self, text: str = "Fresh, sun-ripened tomatoes from Kano.", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    @property
    def provider_name(self) -> str:
        return "fake-text"

    @property
    def model(self) -> str:
        return "gemini-2.0-flash"

    async def generate(self, prompt, system=None, max_tokens=1024, temperature=0.7):
        self.calls.append({"prompt": prompt, "system": system})
        if self.error is not None:
            raise self.error
        return ProviderResult(
            provider=self.provider_name,
            model=self.model,
            raw_text=self.text,
            usage=ProviderUsage(prompt_units=400, completion_units=600, estimated=True),
            latency_ms=12,
        )


class FakeVisionProvider(VisionProvider):
    def __init__(
        self,
        text: str = "Health: good overall. Growth stage is flowering. Apply mulch around the base.",
        crop_name: str = "Tomato",
        error: Exception | None = None,
    ):
        self.text = text
        self.crop_name = crop_name
        self.error = error
        self.calls: list[tuple[str, str]] = []

    @property
    def provider_name(self) -> str:
        return "fake-vision"

    @property
    def model(self) -> str:
        return "gemini-2.0-flash"

    async def analyze_image(self, image_url, prompt):
        self.calls.append((image_url, prompt))
        if self.error is not None:
            raise self.error
        text = self.crop_name if prompt.startswith("Identify the main") else self.text
        return ProviderResult(
            provider=self.provider_name,
            model=self.model,
            raw_text=text,
            usage=ProviderUsage(prompt_units=100, completion_units=100),
        )


FACET_TEXTS: dict[str, str] = {
    "market": "1. Prices are stable.\n2. Demand is rising.\n3. Storage is key.",
    "weather": "Forecast: drought expected. Outlook is dry. Storm warning issued.",
    "price": "Price increase expected due to shortage.",
    "trade": "1. Export to Ghana\n2. Process into paste",
}


def facet_of(prompt: str) -> str:
    """Which intelligence facet a research prompt belongs to."""
    if "weather intelligence" in prompt:
        return "weather"
    if "price intelligence" in prompt:
        return "price"
    if "trade and export opportunities" in prompt:
        return "trade"
    if "market intelligence" in prompt:
        return "market"
    return "crop_market"


class FakeResearchProvider(ResearchProvider):
    def __init__(self, fail_on: set[str] | None = None, hang_on: set[str] | None = None):
        self.fail_on = fail_on or set()
        self.hang_on = hang_on or set()
        self.calls: list[dict] = []

    @property
    def provider_name(self) -> str:
        return "fake-research"

    @property
    def model(self) -> str:
        return "sonar"

    async def research(self, prompt, system=None, model=None):
        facet = facet_of(prompt)
        self.calls.append({"facet": facet, "model": model})
        if facet in self.hang_on:
            await asyncio.sleep(10)
        if facet in self.fail_on:
            raise ProviderError(self.provider_name, f"{facet} failed", "server_error")
        return ProviderResult(
            provider=self.provider_name,
            model=model or "sonar",
            raw_text=FACET_TEXTS.get(facet, "Tomato prices are rising in Lagos."),
            citations=["https://example.org/source"],
            usage=ProviderUsage(prompt_units=50, completion_units=200),
        )


def make_candidate(
    photo_id: str = "p1", description: str = "Fresh red tomatoes vegetables", quality: float = 0.8
) -> StockCandidate:
    return StockCandidate(
        id=photo_id,
        url=f"https://images.example.org/{photo_id}.jpg",
        thumbnail_url=f"https://images.example.org/{photo_id}_thumb.jpg",
        description=description,
        photographer="Ama Mensah",
        attribution_url=f"https://unsplash.example.org/{photo_id}",
        width=4000,
        height=3000,
        quality_score=quality,
    )


class FakeStockProvider(StockPhotoProvider):
    def __init__(self, candidates: list[StockCandidate] | None = None, error: Exception | None = None):
        self.candidates = candidates if candidates is not None else [make_candidate()]
        self.error = error
        self.calls: list[str] = []

    @property
    def provider_name(self) -> str:
        return "fake-stock"

    async def search(self, query, per_page=5):
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return list(self.candidates[:per_page])


class FakeImageGenerator(ImageGenerationProvider):
    def __init__(self, error: Exception | None = None, empty: bool = False):
        self.error = error
        self.empty = empty
        self.calls: list[str] = []

    @property
    def provider_name(self) -> str:
        return "fake-imagegen"

    @property
    def model(self) -> str:
        return "gemini-2.0-flash-exp"

    async def generate_image(self, prompt):
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        image = None if self.empty else RawImage(data=b"\x89PNG fake", mime_type="image/png")
        return ProviderResult(provider=self.provider_name, model=self.model, raw_image=image)


class FakeImageHost(ImageHost):
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[str] = []

    @property
    def provider_name(self) -> str:
        return "fake-host"

    async def upload(self, image, public_id):
        self.calls.append(public_id)
        if self.error is not None:
            raise self.error
        url = f"https://res.example.org/upload/{public_id}.png"
        return ResolvedImage(url=url, thumbnail_url=url, descriptor=public_id)


# === FIXTURES ===


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        cache_root=tmp_path / "cache",
        report_db_path=tmp_path / "reports.db",
    )


@pytest.fixture
def cache(clock: FrozenClock) -> CacheGateway:
    return CacheGateway(MemoryCacheStore(clock=clock))


@pytest.fixture
def call_logger() -> CallLogger:
    return CallLogger()


@pytest.fixture
def fakes() -> dict:
    """Fresh fake provider per role; tests replace entries before building."""
    return {
        "text": FakeTextProvider(),
        "vision": FakeVisionProvider(),
        "research": FakeResearchProvider(),
        "stock": FakeStockProvider(),
        "image_generation": FakeImageGenerator(),
        "image_host": FakeImageHost(),
    }


@pytest.fixture
def providers(fakes: dict) -> ProviderSet:
    return ProviderSet(**fakes)


@pytest.fixture
def upload_error() -> UploadFailed:
    return UploadFailed("fake-host", "quota exceeded", "server_error")


def build_orchestrator(cls, fakes: dict, cache, settings, call_logger, clock, **kwargs):
    """Construct an orchestrator of cls over the current fake providers."""
    return cls(
        ProviderSet(**fakes),
        cache=cache,
        settings=settings,
        call_logger=call_logger,
        clock=clock,
        **kwargs,
    )


def overwrite_cached_values(cache: CacheGateway, value: object) -> int:
    """Replace the value of every entry in a memory-backed gateway, keeping expiry."""
    entries = cache._store._entries
    for key, entry in entries.items():
        entries[key] = entry.model_copy(update={"value": value})
    return len(entries)
