# src/providers/provider_set.py - v1
"""Factory: build the bundle of provider adapters from settings.

The ProviderSet is built once per service and passed explicitly into every
orchestrator; tests build one from fakes.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass

from sproutintel.config.settings import Settings
from sproutintel.providers.base import (
    ImageGenerationProvider,
    ImageHost,
    ResearchProvider,
    StockPhotoProvider,
    TextProvider,
    VisionProvider,
)

logger = logging.getLogger(__name__)

# Registry of text/vision provider name -> adapter class path (lazy import).
_LANGUAGE_PROVIDERS: dict[str, str] = {
    "gemini": "sproutintel.providers.adapters.gemini_adapter.GeminiAdapter",
    "openai": "sproutintel.providers.adapters.openai_adapter.OpenAIAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


@dataclass(frozen=True)
class ProviderSet:
    """One adapter per capability role."""

    text: TextProvider
    vision: VisionProvider
    research: ResearchProvider
    stock: StockPhotoProvider
    image_generation: ImageGenerationProvider
    image_host: ImageHost


def build_provider_set(settings: Settings) -> ProviderSet:
    """Instantiate every adapter from settings.

    Raises:
        UnsupportedProviderError: If the text or vision provider is not registered.
    """
    from sproutintel.providers.adapters.cloudinary_adapter import CloudinaryAdapter
    from sproutintel.providers.adapters.gemini_adapter import GeminiAdapter
    from sproutintel.providers.adapters.perplexity_adapter import PerplexityAdapter
    from sproutintel.providers.adapters.unsplash_adapter import UnsplashAdapter

    gemini = GeminiAdapter(
        api_key=settings.gemini_api_key,
        text_model=settings.gemini_text_model,
        image_model=settings.gemini_image_model,
    )
    language: dict[str, object] = {"gemini": gemini}

    def language_provider(name: str) -> object:
        if name not in language:
            language[name] = _create_language_provider(name, settings)
        return language[name]

    provider_set = ProviderSet(
        text=language_provider(settings.text_provider),  # type: ignore[arg-type]
        vision=language_provider(settings.vision_provider),  # type: ignore[arg-type]
        research=PerplexityAdapter(
            api_key=settings.perplexity_api_key,
            base_url=settings.perplexity_base_url,
            model=settings.perplexity_model,
        ),
        stock=UnsplashAdapter(
            access_key=settings.unsplash_access_key,
            base_url=settings.unsplash_base_url,
        ),
        image_generation=gemini,
        image_host=CloudinaryAdapter(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
        ),
    )
    logger.debug(
        "Built provider set: text=%s, vision=%s",
        settings.text_provider, settings.vision_provider,
    )
    return provider_set


def _create_language_provider(name: str, settings: Settings) -> object:
    if name not in _LANGUAGE_PROVIDERS:
        raise UnsupportedProviderError(
            f"Unsupported text provider: {name!r}. "
            f"Available: {', '.join(sorted(_LANGUAGE_PROVIDERS))}"
        )
    module_path, class_name = _LANGUAGE_PROVIDERS[name].rsplit(".", 1)
    adapter_cls = getattr(importlib.import_module(module_path), class_name)

    if name == "openai":
        return adapter_cls(api_key=settings.openai_api_key, model=settings.openai_text_model)
    return adapter_cls(
        api_key=settings.gemini_api_key,
        text_model=settings.gemini_text_model,
        image_model=settings.gemini_image_model,
    )
