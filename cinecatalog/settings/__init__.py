"""Centralized configuration for the catalog ingestion engine.

All configuration values are sourced from environment variables (.env file).
Provider credentials are optional: a provider without a key is simply
skipped by the enrichment stage.

Usage:
    from cinecatalog.settings import settings

    settings.tmdb.api_key
    settings.database.sync_url
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinecatalog.settings.base import (
    ETLSettings,
    IngestionSettings,
    LoggingSettings,
    PathsSettings,
)
from cinecatalog.settings.database import DatabaseSettings
from cinecatalog.settings.sources import OMDbSettings, TMDBSettings, YouTubeSettings

__all__ = [
    "Settings",
    "settings",
    "PathsSettings",
    "LoggingSettings",
    "ETLSettings",
    "IngestionSettings",
    "DatabaseSettings",
    "TMDBSettings",
    "YouTubeSettings",
    "OMDbSettings",
    "get_masked_settings",
    "print_sources_status",
]


# =============================================================================
# GLOBAL SETTINGS
# =============================================================================


class Settings(BaseSettings):
    """Global application settings.

    Aggregates all configuration sections into a single object.
    Access via the singleton: `from cinecatalog.settings import settings`
    """

    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    paths: PathsSettings = Field(default_factory=PathsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    etl: ETLSettings = Field(default_factory=ETLSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    tmdb: TMDBSettings = Field(default_factory=TMDBSettings)
    youtube: YouTubeSettings = Field(default_factory=YouTubeSettings)
    omdb: OMDbSettings = Field(default_factory=OMDbSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"development", "production", "test"}
        v_lower = v.lower()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid ENVIRONMENT. Valid: {valid_envs}")
        return v_lower

    def model_post_init(self, _: Any) -> None:
        """Initialize directories after settings are loaded."""
        self.paths.ensure_directories()


# =============================================================================
# SINGLETON INSTANCE
# =============================================================================

settings = Settings()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_masked_settings() -> dict[str, Any]:
    """Return settings dict with sensitive values masked.

    Returns:
        Configuration dictionary safe for logging.
    """
    config = settings.model_dump()
    mask = "***MASKED***"

    secrets = [
        ("tmdb", "api_key"),
        ("tmdb", "bearer_token"),
        ("youtube", "api_key"),
        ("omdb", "api_key"),
        ("database", "url"),
    ]

    for section, key in secrets:
        if section in config and key in config[section] and config[section][key]:
            config[section][key] = mask

    return config


def print_sources_status() -> None:
    """Print configuration status for every provider."""
    sources = [
        ("TMDB", settings.tmdb.is_configured),
        ("YouTube", settings.youtube.is_configured),
        ("OMDb", settings.omdb.is_configured),
    ]

    print("\nProvider status:")
    print("-" * 40)
    for name, configured in sources:
        status = "ok" if configured else "missing key"
        print(f"  {name:<10} {status}")
    print(f"  {'Database':<10} {settings.database.sync_url.split('://')[0]}")
    print("-" * 40)
