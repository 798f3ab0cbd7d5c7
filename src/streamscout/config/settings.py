"""
Runtime configuration for streamscout, read from ``STREAMSCOUT_*`` environment
variables and an optional ``.env`` file.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124 Safari/537.36"
)


class Settings(BaseSettings):
    """streamscout settings; each field maps to ``STREAMSCOUT_<FIELD>``."""

    # Logging
    log_level: str = Field(default="INFO")

    # Upstream endpoints
    metadata_api_base_url: str = Field(default="http://localhost:3001/api/youtube")
    youtube_base_url: str = Field(default="https://www.youtube.com")

    # Outbound request headers
    user_agent: str = Field(default=_DEFAULT_USER_AGENT)
    accept_language: str = Field(default="es-ES,es;q=0.9,en;q=0.8")

    # Cache and pacing
    cache_ttl_seconds: float = Field(default=30.0)
    cache_max_entries: int = Field(default=1024)
    batch_delay_seconds: float = Field(default=0.5)

    # Performance
    request_timeout_seconds: float = Field(default=15.0)
    max_traversal_depth: int = Field(default=64)

    # Proxy API server
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=3001)
    api_cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"]
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept standard level names in any case; store them upper-cased."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v} (expected one of {', '.join(LOG_LEVELS)})"
            )
        return level

    @field_validator("cache_ttl_seconds", "batch_delay_seconds")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Durations may be zero but never negative."""
        if v < 0:
            raise ValueError(f"Duration must be non-negative, got {v}")
        return v

    @field_validator("cache_max_entries", "max_traversal_depth")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Bounds must be at least 1."""
        if v < 1:
            raise ValueError(f"Value must be at least 1, got {v}")
        return v

    @field_validator("metadata_api_base_url", "youtube_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Base URLs are joined with leading-slash paths."""
        return v.rstrip("/")

    model_config = {
        "env_prefix": "STREAMSCOUT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Process-wide settings, read once at import
settings = get_settings()
