"""TMDB API configuration settings.

Movie database provider: discovery windows and full records.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TMDBSettings(BaseSettings):
    """TMDB API configuration.

    Either the v3 api key or the v4 read token authenticates requests.

    Attributes:
        api_key: TMDB v3 API key.
        bearer_token: TMDB v4 read access token.
        base_url: TMDB API base URL.
        image_base_url: TMDB image CDN base URL (size appended).
        region: Region used for discovery and release dates.
        cast_limit: Number of billed cast members kept.
    """

    api_key: str = Field(default="", alias="TMDB_API_KEY")
    bearer_token: str = Field(default="", alias="TMDB_BEARER_TOKEN")
    base_url: str = Field(
        default="https://api.themoviedb.org/3",
        alias="TMDB_BASE_URL",
    )
    image_base_url: str = Field(
        default="https://image.tmdb.org/t/p",
        alias="TMDB_IMAGE_BASE_URL",
    )

    language: str = Field(default="en-US", alias="TMDB_LANGUAGE")
    region: str = Field(default="IN", alias="TMDB_REGION")
    poster_size: str = Field(default="w500", alias="TMDB_POSTER_SIZE")
    backdrop_size: str = Field(default="w780", alias="TMDB_BACKDROP_SIZE")
    cast_limit: int = Field(default=12, alias="TMDB_CAST_LIMIT")

    # Rate limiting
    requests_per_period: int = Field(default=40, alias="TMDB_REQUESTS_PER_PERIOD")
    period_seconds: int = Field(default=10, alias="TMDB_PERIOD_SECONDS")
    min_request_delay: float = Field(default=0.25, alias="TMDB_MIN_REQUEST_DELAY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_configured(self) -> bool:
        """Check if a TMDB credential is configured."""
        return bool(self.api_key or self.bearer_token)

    @property
    def requests_per_second(self) -> float:
        """Calculate requests per second from period settings."""
        if self.period_seconds <= 0:
            return 1.0
        return self.requests_per_period / self.period_seconds
