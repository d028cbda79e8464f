"""YouTube Data API v3 configuration settings.

Video platform provider: soundtrack and trailer search.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class YouTubeSettings(BaseSettings):
    """YouTube Data API v3 configuration.

    Attributes:
        api_key: YouTube API key.
        max_results: Results requested per search call.
        song_query_limit: Number of song query variants issued per title.
        request_delay: Minimum delay between API calls (seconds).
    """

    api_key: str = Field(default="", alias="YOUTUBE_API_KEY")
    base_url: str = Field(
        default="https://www.googleapis.com/youtube/v3",
        alias="YOUTUBE_BASE_URL",
    )

    max_results: int = Field(default=8, alias="YOUTUBE_MAX_RESULTS")
    song_query_limit: int = Field(default=4, alias="YOUTUBE_SONG_QUERY_LIMIT")
    region_code: str = Field(default="IN", alias="YOUTUBE_REGION_CODE")
    music_category_id: str = Field(default="10", alias="YOUTUBE_MUSIC_CATEGORY")

    # Rate limiting
    request_delay: float = Field(default=0.5, alias="YOUTUBE_REQUEST_DELAY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_configured(self) -> bool:
        """Check if YouTube API key is configured."""
        return bool(self.api_key)
