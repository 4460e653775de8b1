# src/providers/adapters/gemini_adapter.py - v1
"""Google Gemini adapter: text, vision and image generation.

Uses the google-generativeai SDK. Vision inputs are fetched with httpx and
sent inline; generated images come back as inline_data parts.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from sproutintel.core.errors import ProviderError
from sproutintel.core.models import ProviderResult, ProviderUsage, RawImage
from sproutintel.providers.base import ImageGenerationProvider, TextProvider, VisionProvider
from sproutintel.providers.guard import raise_for_status
from sproutintel.tracking.cost_calculator import estimate_tokens

_PROVIDER = "gemini"

# Enum value names of GenerationConfig.response_modalities
_IMAGE_MODALITIES = ["TEXT", "IMAGE"]


class GeminiAdapter(TextProvider, VisionProvider, ImageGenerationProvider):
    """Google Gemini adapter."""

    def __init__(
        self,
        api_key: str = "",
        text_model: str = "gemini-2.0-flash",
        image_model: str = "gemini-2.0-flash-exp",
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ):
        self._api_key = api_key
        self._text_model = text_model
        self._image_model = image_model
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return _PROVIDER

    @property
    def model(self) -> str:
        return self._text_model

    def _model(self, name: str, system: str | None = None) -> Any:
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        return genai.GenerativeModel(name, system_instruction=system)

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> ProviderResult:
        model = self._model(self._text_model, system)

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            prompt,
            generation_config={"max_output_tokens": max_tokens, "temperature": temperature},
        )
        latency = int((time.monotonic() - t0) * 1000)

        text = _response_text(resp)
        return ProviderResult(
            provider=_PROVIDER,
            model=self._text_model,
            raw_text=text,
            usage=_usage(resp, (system or "") + prompt, text),
            latency_ms=latency,
        )

    async def analyze_image(self, image_url: str, prompt: str) -> ProviderResult:
        image = await self._fetch_image(image_url)
        model = self._model(self._text_model)

        parts: list[dict[str, Any]] = [
            {"text": prompt},
            {"inline_data": {"mime_type": image.mime_type, "data": image.data}},
        ]

        t0 = time.monotonic()
        resp = await model.generate_content_async(parts)
        latency = int((time.monotonic() - t0) * 1000)

        text = _response_text(resp)
        return ProviderResult(
            provider=_PROVIDER,
            model=self._text_model,
            raw_text=text,
            usage=_usage(resp, prompt, text),
            latency_ms=latency,
        )

    async def generate_image(self, prompt: str) -> ProviderResult:
        model = self._model(self._image_model)

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            [{"role": "user", "parts": [{"text": prompt}]}],
            generation_config={"response_modalities": _IMAGE_MODALITIES},
        )
        latency = int((time.monotonic() - t0) * 1000)

        image = _first_inline_image(resp)
        if image is None:
            raise ProviderError(_PROVIDER, "response carried no image part", "empty_response")

        return ProviderResult(
            provider=_PROVIDER,
            model=self._image_model,
            raw_image=image,
            latency_ms=latency,
        )

    async def _fetch_image(self, image_url: str) -> RawImage:
        async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
            response = await client.get(image_url)
        raise_for_status(_PROVIDER, response)
        mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        return RawImage(data=response.content, mime_type=mime_type)


def _response_text(resp: Any) -> str:
    # resp.text raises ValueError when the candidate was blocked or empty.
    try:
        return resp.text or ""
    except ValueError as e:
        raise ProviderError(_PROVIDER, f"no text in response: {e}", "empty_response") from e


def _usage(resp: Any, prompt: str, text: str) -> ProviderUsage:
    usage = getattr(resp, "usage_metadata", None)
    prompt_tokens = getattr(usage, "prompt_token_count", 0) if usage else 0
    completion_tokens = getattr(usage, "candidates_token_count", 0) if usage else 0
    if prompt_tokens or completion_tokens:
        return ProviderUsage(prompt_units=prompt_tokens, completion_units=completion_tokens)
    return ProviderUsage(
        prompt_units=estimate_tokens(prompt),
        completion_units=estimate_tokens(text),
        estimated=True,
    )


def _first_inline_image(resp: Any) -> RawImage | None:
    for candidate in getattr(resp, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                return RawImage(data=inline.data, mime_type=inline.mime_type or "image/png")
    return None
