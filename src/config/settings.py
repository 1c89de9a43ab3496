# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for gateway credentials, cache bounds, image
preprocessing limits and logging.
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

    # === MODEL GATEWAY ===
    llm_provider: str = "google"
    llm_model: str = "gemini-2.0-flash"
    llm_temperature: float = 0.2
    llm_top_k: int = 5
    llm_top_p: float = 0.85
    llm_max_output_tokens: int = 1024
    llm_max_retries: int = 2

    # Provider API keys
    google_api_key: str = ""
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # === Caches ===
    response_cache_max_entries: int = 50
    response_cache_ttl_hours: float = 24.0
    image_cache_max_entries: int = 10

    # === Preprocessing ===
    preprocess_min_dimension: int = 512
    preprocess_max_dimension: int = 1024
    preprocess_jpeg_quality: int = 90

    # === Input validation ===
    max_image_size_mb: int = 10
    min_image_dimension: int = 100
    max_image_dimension: int = 4096
    min_aspect_ratio: float = 0.25
    max_aspect_ratio: float = 4.0

    # === Results (CLI persistence) ===
    results_dir: Path = Path("~/.lansonesscan/results")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "response_cache_max_entries", "image_cache_max_entries", "preprocess_min_dimension"
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("preprocess_jpeg_quality")
    @classmethod
    def validate_jpeg_quality(cls, v: int) -> int:  # noqa: N805
        if not 1 <= v <= 95:
            raise ValueError("preprocess_jpeg_quality must be within 1..95")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.preprocess_min_dimension > self.preprocess_max_dimension:
            errors.append(
                "PREPROCESS_MIN_DIMENSION must be <= PREPROCESS_MAX_DIMENSION"
            )

        if self.min_image_dimension > self.max_image_dimension:
            errors.append("MIN_IMAGE_DIMENSION must be <= MAX_IMAGE_DIMENSION")

        if self.min_aspect_ratio <= 0 or self.min_aspect_ratio > self.max_aspect_ratio:
            errors.append("MIN_ASPECT_RATIO must be > 0 and <= MAX_ASPECT_RATIO")

        if self.response_cache_ttl_hours <= 0:
            errors.append("RESPONSE_CACHE_TTL_HOURS must be > 0")

        if self.llm_max_retries < 0:
            errors.append("LLM_MAX_RETRIES must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def response_cache_ttl_seconds(self) -> float:
        return self.response_cache_ttl_hours * 3600.0

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    @property
    def api_key_for_provider(self) -> str:
        """API key matching llm_provider (empty string when unknown)."""
        return {
            "google": self.google_api_key,
            "anthropic": self.anthropic_api_key,
            "openai": self.openai_api_key,
        }.get(self.llm_provider, "")


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-invocation config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
