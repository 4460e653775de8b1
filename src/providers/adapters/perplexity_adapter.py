# src/providers/adapters/perplexity_adapter.py - v1
"""Perplexity Sonar research adapter over the chat completions HTTP API."""

from __future__ import annotations

import time
from typing import Any

import httpx

from sproutintel.core.errors import ProviderError
from sproutintel.core.models import ProviderResult, ProviderUsage
from sproutintel.providers.base import ResearchProvider
from sproutintel.providers.guard import raise_for_status

_PROVIDER = "perplexity"


class PerplexityAdapter(ResearchProvider):
    """Web-grounded research via Perplexity Sonar models."""

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.perplexity.ai",
        model: str = "sonar",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return _PROVIDER

    @property
    def model(self) -> str:
        return self._model

    async def research(
        self, prompt: str, system: str | None = None, model: str | None = None
    ) -> ProviderResult:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload = {"model": model or self._model, "messages": messages}
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        t0 = time.monotonic()
        async with httpx.AsyncClient(base_url=self._base_url, transport=self._transport) as client:
            response = await client.post("/chat/completions", json=payload, headers=headers)
        latency = int((time.monotonic() - t0) * 1000)

        raise_for_status(_PROVIDER, response)
        return _parse(response, payload["model"], latency)


def _parse(response: httpx.Response, requested_model: str, latency: int) -> ProviderResult:
    try:
        data: dict[str, Any] = response.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ProviderError(_PROVIDER, f"malformed response: {e}", "parse_error") from e

    usage = data.get("usage") or {}
    return ProviderResult(
        provider=_PROVIDER,
        model=data.get("model") or requested_model,
        raw_text=content or "",
        citations=[str(c) for c in data.get("citations") or []],
        usage=ProviderUsage(
            prompt_units=int(usage.get("prompt_tokens") or 0),
            completion_units=int(usage.get("completion_tokens") or 0),
        ),
        latency_ms=latency,
    )
