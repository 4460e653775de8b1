# src/providers/adapters/unsplash_adapter.py - v1
"""Unsplash stock photo search adapter."""

from __future__ import annotations

from typing import Any

import httpx

from sproutintel.core.errors import ProviderError
from sproutintel.core.models import StockCandidate
from sproutintel.providers.base import StockPhotoProvider
from sproutintel.providers.guard import raise_for_status

_PROVIDER = "unsplash"

# Full marks at 12MP and at 100 likes.
_FULL_RESOLUTION_PX = 12_000_000
_FULL_LIKES = 100


def quality_score(width: int, height: int, likes: int) -> float:
    """Provider quality metadata folded into [0, 1]: resolution and popularity."""
    resolution = min(1.0, max(width, 0) * max(height, 0) / _FULL_RESOLUTION_PX)
    popularity = min(1.0, max(likes, 0) / _FULL_LIKES)
    return round(0.5 * resolution + 0.5 * popularity, 3)


class UnsplashAdapter(StockPhotoProvider):
    """Search landscape photos on Unsplash."""

    def __init__(
        self,
        access_key: str = "",
        base_url: str = "https://api.unsplash.com",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._access_key = access_key
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return _PROVIDER

    async def search(self, query: str, per_page: int = 5) -> list[StockCandidate]:
        params = {"query": query, "per_page": per_page, "orientation": "landscape"}
        headers = {"Authorization": f"Client-ID {self._access_key}"}

        async with httpx.AsyncClient(base_url=self._base_url, transport=self._transport) as client:
            response = await client.get("/search/photos", params=params, headers=headers)

        raise_for_status(_PROVIDER, response)
        try:
            results = response.json().get("results") or []
            return [_to_candidate(photo) for photo in results]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ProviderError(_PROVIDER, f"malformed response: {e}", "parse_error") from e


def _to_candidate(photo: dict[str, Any]) -> StockCandidate:
    urls = photo["urls"]
    width = int(photo.get("width") or 0)
    height = int(photo.get("height") or 0)
    return StockCandidate(
        id=str(photo["id"]),
        url=urls["regular"],
        thumbnail_url=urls.get("thumb"),
        description=photo.get("description") or photo.get("alt_description") or "",
        photographer=(photo.get("user") or {}).get("name"),
        attribution_url=(photo.get("links") or {}).get("html"),
        width=width,
        height=height,
        quality_score=quality_score(width, height, int(photo.get("likes") or 0)),
    )
