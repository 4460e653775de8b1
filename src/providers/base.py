# src/providers/base.py - v1
"""Abstract capability provider interfaces.

Each external service is reached through exactly one of these roles.
Adapters normalize every answer into ProviderResult (or a typed list for
stock search) and raise ProviderError on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sproutintel.core.models import ProviderResult, RawImage, ResolvedImage, StockCandidate


class _Provider(ABC):
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (gemini, openai, perplexity, unsplash, cloudinary)."""

    @property
    def model(self) -> str:
        """Model used by default; empty for non-model services."""
        return ""


class TextProvider(_Provider):
    """Free-form text generation."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> ProviderResult:
        """Text completion for a single prompt."""


class VisionProvider(_Provider):
    """Image understanding."""

    @abstractmethod
    async def analyze_image(self, image_url: str, prompt: str) -> ProviderResult:
        """Answer prompt about the image at image_url."""


class ResearchProvider(_Provider):
    """Web-grounded research with citations."""

    @abstractmethod
    async def research(
        self, prompt: str, system: str | None = None, model: str | None = None
    ) -> ProviderResult:
        """Research answer; citations carried on the result."""


class StockPhotoProvider(_Provider):
    """Stock photo search."""

    @abstractmethod
    async def search(self, query: str, per_page: int = 5) -> list[StockCandidate]:
        """Ranked candidates for query; empty list when nothing matches."""


class ImageGenerationProvider(_Provider):
    """Text-to-image generation."""

    @abstractmethod
    async def generate_image(self, prompt: str) -> ProviderResult:
        """Generated image carried on ProviderResult.raw_image."""


class ImageHost(_Provider):
    """Durable hosting for generated images."""

    @abstractmethod
    async def upload(self, image: RawImage, public_id: str) -> ResolvedImage:
        """Store image and return its public URLs.

        Raises:
            UploadFailed: The host rejected or could not store the image.
        """
