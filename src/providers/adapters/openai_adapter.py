# src/providers/adapters/openai_adapter.py - v1
"""OpenAI adapter: alternate text and vision provider.

Uses the official openai SDK. Vision passes the image URL straight through.
"""

from __future__ import annotations

import time
from typing import Any

from sproutintel.core.models import ProviderResult, ProviderUsage
from sproutintel.providers.base import TextProvider, VisionProvider
from sproutintel.tracking.cost_calculator import estimate_tokens

_PROVIDER = "openai"


class OpenAIAdapter(TextProvider, VisionProvider):
    """OpenAI chat completions adapter."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-4o-mini",
        client: Any = None,
        **kwargs: Any,
    ):
        self._api_key = api_key
        self._model = model
        self._client = client

    @property
    def provider_name(self) -> str:
        return _PROVIDER

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> Any:
        if self._client is None:
            import openai

            self._client = openai.AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> ProviderResult:
        messages: list[dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        return await self._complete(
            messages, (system or "") + prompt, max_tokens=max_tokens, temperature=temperature,
        )

    async def analyze_image(self, image_url: str, prompt: str) -> ProviderResult:
        messages = [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ],
        }]
        return await self._complete(messages, prompt, max_tokens=1024)

    async def _complete(
        self, messages: list[dict[str, Any]], prompt_text: str, **kwargs: Any
    ) -> ProviderResult:
        client = self._get_client()

        t0 = time.monotonic()
        resp = await client.chat.completions.create(
            model=self._model, messages=messages, **kwargs,
        )
        latency = int((time.monotonic() - t0) * 1000)

        text = resp.choices[0].message.content or ""
        usage = resp.usage
        if usage is not None:
            provider_usage = ProviderUsage(
                prompt_units=usage.prompt_tokens or 0,
                completion_units=usage.completion_tokens or 0,
            )
        else:
            provider_usage = ProviderUsage(
                prompt_units=estimate_tokens(prompt_text),
                completion_units=estimate_tokens(text),
                estimated=True,
            )

        return ProviderResult(
            provider=_PROVIDER,
            model=self._model,
            raw_text=text,
            usage=provider_usage,
            latency_ms=latency,
        )
