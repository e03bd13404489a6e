"""
Configuration for the Resonance Engine.

All tunables are read from the environment (or a local ``.env`` file) and
validated on load. Component-level configs are derived from these settings
by :func:`resonance_core.analysis.orchestrator.create_orchestrator`.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResonanceSettings(BaseSettings):
    """Engine settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Circuit breaker
    failure_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive primary failures before opening the circuit",
    )
    reset_timeout_ms: int = Field(
        default=1000,
        ge=1,
        description="Milliseconds after the last failure before a probe is allowed",
    )

    # Rate limiting
    rate_limit_max: int = Field(
        default=100,
        ge=1,
        description="Primary provider calls allowed per window",
    )
    rate_limit_window_ms: int = Field(
        default=60000,
        ge=1,
        description="Rate limit window in milliseconds",
    )

    # Scoring
    min_arousal_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Arousal below this marks a primary score as unreliable",
    )

    # Providers
    provider_timeout_ms: int = Field(
        default=5000,
        ge=1,
        description="Default timeout for a single provider call",
    )
    hume_api_key: Optional[str] = Field(default=None, description="Hume API key")
    hume_api_endpoint: str = Field(
        default="https://api.hume.ai/v1",
        description="Hume API base URL",
    )
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    fallback_model: str = Field(
        default="gpt-4o",
        description="OpenAI model used by the fallback provider",
    )

    # Logging
    log_level: str = Field(default="info", description="Log level")
    log_format: str = Field(default="pretty", description="Log format (json or pretty)")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"debug", "info", "warning", "error", "critical"}
        if v.lower() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v.lower() not in {"json", "pretty"}:
            raise ValueError(f"Invalid log format: {v}. Must be 'json' or 'pretty'")
        return v.lower()

    @property
    def reset_timeout_seconds(self) -> float:
        return self.reset_timeout_ms / 1000

    @property
    def rate_limit_window_seconds(self) -> float:
        return self.rate_limit_window_ms / 1000

    @property
    def provider_timeout_seconds(self) -> float:
        return self.provider_timeout_ms / 1000


@lru_cache
def get_settings() -> ResonanceSettings:
    """Get cached settings instance."""
    return ResonanceSettings()
