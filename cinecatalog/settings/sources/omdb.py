"""OMDb API configuration settings.

Ratings aggregator provider.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OMDbSettings(BaseSettings):
    """OMDb API configuration.

    Attributes:
        api_key: OMDb API key.
        base_url: OMDb endpoint.
        request_delay: Minimum delay between API calls (seconds).
    """

    api_key: str = Field(default="", alias="OMDB_API_KEY")
    base_url: str = Field(default="https://www.omdbapi.com/", alias="OMDB_BASE_URL")
    request_delay: float = Field(default=0.2, alias="OMDB_REQUEST_DELAY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_configured(self) -> bool:
        """Check if OMDb API key is configured."""
        return bool(self.api_key)
