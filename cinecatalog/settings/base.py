"""Base configuration settings.

Contains foundational settings for paths, logging, ETL and ingestion runs.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# PROJECT ROOT DETECTION
# =============================================================================

_PROJECT_ROOT = Path(__file__).parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


def get_project_root() -> Path:
    """Get project root directory."""
    return _PROJECT_ROOT


def get_env_file() -> Path:
    """Get .env file path."""
    return _ENV_FILE


# =============================================================================
# PATH SETTINGS
# =============================================================================


class PathsSettings(BaseSettings):
    """Data and logs paths configuration.

    Attributes:
        data_root: Optional override of the data directory.
    """

    data_root: str | None = Field(default=None, alias="CATALOG_DATA_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def project_root(self) -> Path:
        """Project root directory."""
        return _PROJECT_ROOT

    @property
    def data_dir(self) -> Path:
        """Root data directory (database file, run snapshots)."""
        if self.data_root:
            return Path(self.data_root)
        return _PROJECT_ROOT / "data"

    @property
    def runs_dir(self) -> Path:
        """Ingestion run snapshots."""
        return self.data_dir / "runs"

    @property
    def logs_dir(self) -> Path:
        """Application logs."""
        return _PROJECT_ROOT / "logs"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        for directory in (self.data_dir, self.runs_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)


# =============================================================================
# LOGGING SETTINGS
# =============================================================================


class LoggingSettings(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Log files directory.
    """

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid LOG_LEVEL. Valid: {valid_levels}")
        return v_upper


# =============================================================================
# ETL SETTINGS
# =============================================================================


class ETLSettings(BaseSettings):
    """ETL worker configuration.

    Attributes:
        max_workers: Maximum parallel fetch workers.
        http_timeout: Provider HTTP timeout (seconds).
        user_agent: HTTP User-Agent sent to providers.
    """

    max_workers: int = Field(default=4, alias="ETL_MAX_WORKERS")
    http_timeout: float = Field(default=30.0, alias="ETL_HTTP_TIMEOUT")
    user_agent: str = Field(
        default="CineCatalog-Ingest/0.1",
        alias="USER_AGENT",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        """Require at least one worker."""
        if v < 1:
            raise ValueError("ETL_MAX_WORKERS must be >= 1")
        return v


# =============================================================================
# INGESTION SETTINGS
# =============================================================================

_ENRICH_MODES = {"all", "tmdb", "none"}
_DEFAULT_LANGS = "hi,kn,te,ta,ml,mr,bn"


class IngestionSettings(BaseSettings):
    """Defaults for one ingestion pass.

    Attributes:
        limit: Maximum number of discovered titles processed.
        days_past: Window size for recently released titles.
        days_future: Window size for upcoming titles.
        langs_raw: Comma-separated original-language codes to discover.
        enrich: Enrichment mode (all, tmdb, none).
        target_country: Production country accepted by the classifier.
        resolve_identities: Run identity reconciliation after ingestion.
        auto_merge_threshold: Confidence at or above which duplicates merge.
        review_threshold: Confidence at or above which merges are queued.
    """

    limit: int = Field(default=80, alias="AGENT_LIMIT")
    days_past: int = Field(default=45, alias="AGENT_DAYS_PAST")
    days_future: int = Field(default=180, alias="AGENT_DAYS_FUTURE")
    langs_raw: str = Field(default=_DEFAULT_LANGS, alias="AGENT_LANGS")
    enrich: str = Field(default="all", alias="AGENT_ENRICH")
    target_country: str = Field(default="IN", alias="AGENT_TARGET_COUNTRY")
    resolve_identities: bool = Field(default=True, alias="AGENT_RESOLVE")
    auto_merge_threshold: float = Field(default=0.92, alias="MERGE_AUTO_THRESHOLD")
    review_threshold: float = Field(default=0.6, alias="MERGE_REVIEW_THRESHOLD")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("enrich")
    @classmethod
    def validate_enrich(cls, v: str) -> str:
        """Validate enrichment mode."""
        v_lower = v.strip().lower()
        if v_lower not in _ENRICH_MODES:
            raise ValueError(f"Invalid AGENT_ENRICH. Valid: {_ENRICH_MODES}")
        return v_lower

    @field_validator("limit", "days_past", "days_future")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Reject negative window sizes and limits."""
        if v < 0:
            raise ValueError("Ingestion limits must be >= 0")
        return v

    @property
    def langs(self) -> list[str]:
        """Parse language codes from comma-separated string."""
        return [code.strip().lower() for code in self.langs_raw.split(",") if code.strip()]
