"""Application configuration using Pydantic Settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.constants import (
    DEFAULT_ALLOWED_COUNTS,
    DEFAULT_EMOTION_TAGS,
    DEFAULT_MAX_DURATION_MINUTES,
    DEFAULT_MIN_DURATION_MINUTES,
    MEDIA_SETTLE_DELAY_SECONDS,
    SELECTION_DEBOUNCE_SECONDS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "practice-engine"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    # Platform API used for the catalog and session persistence
    platform_api_url: str = "http://localhost:5000/api"
    request_timeout_seconds: Optional[float] = 10.0
    catalog_auth_token: Optional[str] = None

    # Backends: "http" talks to the platform API, "local" keeps everything in memory
    catalog_backend: str = "local"
    persistence_backend: str = "local"

    # Session pacing
    tick_interval_seconds: float = 1.0
    media_settle_delay_seconds: float = MEDIA_SETTLE_DELAY_SECONDS
    selection_debounce_seconds: float = SELECTION_DEBOUNCE_SECONDS

    # Practice vocabulary, owned by the platform's content configuration
    emotion_tags: list[str] = list(DEFAULT_EMOTION_TAGS)
    min_duration_minutes: int = DEFAULT_MIN_DURATION_MINUTES
    max_duration_minutes: int = DEFAULT_MAX_DURATION_MINUTES
    allowed_counts: list[int] = list(DEFAULT_ALLOWED_COUNTS)


# Create a singleton instance
settings = Settings()
