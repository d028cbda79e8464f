"""Database configuration settings.

SQLite by default, any SQLAlchemy URL through DATABASE_URL.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Catalog database configuration.

    Attributes:
        path: SQLite database file.
        url: Full connection URL (overrides path).
        echo: Log emitted SQL.
    """

    path: str = Field(default="data/catalog.sqlite", alias="DB_PATH")
    url: str | None = Field(default=None, alias="DATABASE_URL")
    echo: bool = Field(default=False, alias="DB_ECHO")

    # Pool settings (ignored by SQLite)
    pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    pool_overflow: int = Field(default=10, alias="DB_POOL_OVERFLOW")
    pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured backend is SQLite."""
        return self.sync_url.startswith("sqlite")

    @property
    def sync_url(self) -> str:
        """Generate synchronous connection URL."""
        if self.url:
            return self.url
        return f"sqlite:///{self.path}"
