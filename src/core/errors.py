# src/core/errors.py - v1
"""Error taxonomy shared by providers, cache and orchestrators.

Extraction has no error type: unmatched fields resolve to defaults.
"""

from __future__ import annotations


class SproutIntelError(Exception):
    """Base class for all sproutintel errors."""


class InvalidRequest(SproutIntelError):
    """Payload is missing a required field or names an unknown capability."""


class CacheUnavailable(SproutIntelError):
    """Cache backend cannot be reached. Callers downgrade to no-cache."""


class ProviderError(SproutIntelError):
    """An external capability provider failed."""

    def __init__(self, provider: str, message: str, error_type: str = "unknown") -> None:
        self.provider = provider
        self.error_type = error_type
        super().__init__(f"{provider}: {message}")


class ProviderTimeout(ProviderError):
    """Provider call exceeded its fixed timeout."""

    def __init__(self, provider: str, timeout_s: float) -> None:
        self.timeout_s = timeout_s
        super().__init__(provider, f"timed out after {timeout_s:.1f}s", "timeout")


class UploadFailed(ProviderError):
    """Image hosting rejected or could not store a generated image."""


class GenerationFailed(SproutIntelError):
    """Text generation could not be completed (no fallback exists)."""

    def __init__(self, capability: str, cause: Exception) -> None:
        self.capability = capability
        self.cause = cause
        super().__init__(f"{capability} generation failed: {cause}")


class AnalysisUnavailable(SproutIntelError):
    """An analysis could not be produced by its provider."""

    def __init__(self, analysis: str, cause: Exception) -> None:
        self.analysis = analysis
        self.cause = cause
        super().__init__(f"{analysis} unavailable: {cause}")


class ReportStoreError(SproutIntelError):
    """The intelligence report store could not read or write a report."""
