# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for provider credentials, timeouts, cache and
report-store backends, image verification and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === PROVIDERS ===
    text_provider: Literal["gemini", "openai"] = "gemini"
    vision_provider: Literal["gemini", "openai"] = "gemini"

    gemini_api_key: str = ""
    gemini_text_model: str = "gemini-2.0-flash"
    gemini_image_model: str = "gemini-2.0-flash-exp"

    openai_api_key: str = ""
    openai_text_model: str = "gpt-4o-mini"

    perplexity_api_key: str = ""
    perplexity_base_url: str = "https://api.perplexity.ai"
    perplexity_model: str = "sonar"
    perplexity_price_model: str = "sonar-reasoning-pro"

    unsplash_access_key: str = ""
    unsplash_base_url: str = "https://api.unsplash.com"

    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "ai_generated_products"

    # === Timeouts (seconds) ===
    text_timeout_s: float = 30.0
    vision_timeout_s: float = 30.0
    research_timeout_s: float = 45.0
    stock_timeout_s: float = 15.0
    image_generation_timeout_s: float = 60.0
    upload_timeout_s: float = 30.0
    provider_max_retries: int = 0

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["memory", "json", "redis"] = "memory"
    cache_root: Path = Path("~/.sproutintel/cache")
    cache_redis_url: str = ""
    cache_key_prefix: str = "sproutintel"

    # === Image resolution ===
    image_relevance_threshold: float = 0.6
    stock_results_per_page: int = 5

    # === Location intelligence ===
    report_store: Literal["memory", "sqlite"] = "memory"
    report_db_path: Path = Path("~/.sproutintel/reports.db")
    report_validity_hours: int = 6

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("image_relevance_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:  # noqa: N805
        if not 0.0 <= v <= 1.0:
            raise ValueError("image_relevance_threshold must be within [0, 1]")
        return v

    @field_validator("provider_max_retries", "stock_results_per_page")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_enabled and self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        timeouts = {
            "TEXT_TIMEOUT_S": self.text_timeout_s,
            "VISION_TIMEOUT_S": self.vision_timeout_s,
            "RESEARCH_TIMEOUT_S": self.research_timeout_s,
            "STOCK_TIMEOUT_S": self.stock_timeout_s,
            "IMAGE_GENERATION_TIMEOUT_S": self.image_generation_timeout_s,
            "UPLOAD_TIMEOUT_S": self.upload_timeout_s,
        }
        for name, value in timeouts.items():
            if value <= 0:
                errors.append(f"{name} must be > 0")

        if self.report_validity_hours <= 0:
            errors.append("REPORT_VALIDITY_HOURS must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-deployment config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
