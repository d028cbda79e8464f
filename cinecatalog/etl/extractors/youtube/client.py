"""YouTube Data API v3 search client."""

from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cinecatalog.etl.exceptions import ProviderError
from cinecatalog.etl.extractors.base import BaseAPIClient
from cinecatalog.etl.types import MediaCandidate, YouTubeSearchItem
from cinecatalog.settings import YouTubeSettings, settings

# =============================================================================
# EXCEPTIONS
# =============================================================================


class YouTubeClientError(ProviderError):
    """Base exception for YouTube client errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message, provider="youtube")


class YouTubeQuotaError(YouTubeClientError):
    """Raised when API quota is exceeded."""

    pass


class YouTubeNotFoundError(YouTubeClientError):
    """Raised when resource is not found."""

    pass


# =============================================================================
# QUOTA COSTS
# =============================================================================

QUOTA_SEARCH = 100

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


# =============================================================================
# CLIENT
# =============================================================================


class YouTubeClient(BaseAPIClient):
    """HTTP client for YouTube video search.

    Attributes:
        quota_used: Total quota units consumed.
    """

    name = "youtube"

    def __init__(
        self,
        config: YouTubeSettings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize YouTube client.

        Args:
            config: YouTube settings section. Defaults to global settings.
            http_client: Preconfigured httpx client.
        """
        self._config = config or settings.youtube
        super().__init__(self._config.request_delay, http_client)
        self.quota_used = 0

    @property
    def config(self) -> YouTubeSettings:
        """YouTube settings in use."""
        return self._config

    # -------------------------------------------------------------------------
    # HTTP Request
    # -------------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.TimeoutException),
        reraise=True,
    )
    def _request(
        self,
        endpoint: str,
        params: dict[str, Any],
        quota_cost: int = 1,
    ) -> dict[str, Any]:
        """Make authenticated GET request.

        Args:
            endpoint: API endpoint (e.g., "search").
            params: Query parameters.
            quota_cost: Quota units for this request.

        Returns:
            JSON response as dictionary.

        Raises:
            YouTubeQuotaError: When quota is exceeded.
            YouTubeNotFoundError: When resource not found.
            YouTubeClientError: On other API errors.
        """
        self._throttle()

        url = f"{self._config.base_url}/{endpoint}"
        request_params = {**params, "key": self._config.api_key}

        try:
            response = self.http.get(url, params=request_params)
        except httpx.TimeoutException:
            self._logger.warning(f"Request timeout: {endpoint}")
            raise
        except httpx.HTTPError as e:
            raise YouTubeClientError(f"Transport error on {endpoint}: {e}") from e

        self._handle_response_errors(response)
        self.quota_used += quota_cost
        return response.json()

    def _get(
        self,
        endpoint: str,
        params: dict[str, Any],
        quota_cost: int = 1,
    ) -> dict[str, Any]:
        """GET with retries; a timeout outliving them becomes a YouTubeClientError."""
        try:
            return self._request(endpoint, params, quota_cost)
        except httpx.TimeoutException as e:
            raise YouTubeClientError(f"Timeout on {endpoint}") from e

    def _handle_response_errors(self, response: httpx.Response) -> None:
        """Map HTTP error statuses to typed exceptions.

        Raises:
            YouTubeQuotaError: On 403 quota exceeded.
            YouTubeNotFoundError: On 404 not found.
            YouTubeClientError: On other errors.
        """
        if response.status_code == 200:
            return

        if response.status_code == 403:
            reason = self._extract_error_reason(response)
            if "quota" in reason.lower():
                raise YouTubeQuotaError(f"API quota exceeded: {reason}")
            raise YouTubeClientError(f"Forbidden: {reason}")

        if response.status_code == 404:
            raise YouTubeNotFoundError("Resource not found")

        raise YouTubeClientError(f"YouTube API error {response.status_code}")

    @staticmethod
    def _extract_error_reason(response: httpx.Response) -> str:
        """Extract the first error reason from an API error body."""
        try:
            errors = response.json().get("error", {}).get("errors", [])
        except ValueError:
            return "Unknown error"
        if errors:
            return errors[0].get("reason", "Unknown error")
        return "Unknown error"

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search_media(
        self,
        query: str,
        max_results: int | None = None,
        relevance_language: str | None = None,
        music_only: bool = True,
    ) -> list[MediaCandidate]:
        """Search videos.

        Args:
            query: Free-text query.
            max_results: Results requested (defaults to settings).
            relevance_language: Language code favoured by ranking.
            music_only: Restrict to the music category.

        Returns:
            Video candidates in ranking order.
        """
        params: dict[str, Any] = {
            "part": "snippet",
            "type": "video",
            "q": query,
            "maxResults": max_results or self._config.max_results,
            "regionCode": self._config.region_code,
        }
        if music_only:
            params["videoCategoryId"] = self._config.music_category_id
        if relevance_language:
            params["relevanceLanguage"] = relevance_language

        data = self._get("search", params, quota_cost=QUOTA_SEARCH)
        candidates = [self._to_candidate(item) for item in data.get("items", [])]
        return [c for c in candidates if c is not None]

    @staticmethod
    def _to_candidate(item: YouTubeSearchItem) -> MediaCandidate | None:
        """Convert a search result into a candidate (None without video id)."""
        video_id = (item.get("id") or {}).get("videoId")
        snippet = item.get("snippet") or {}
        if not video_id or not snippet.get("title"):
            return None
        thumbnails = snippet.get("thumbnails") or {}
        thumb = thumbnails.get("high") or thumbnails.get("medium") or thumbnails.get("default")
        return MediaCandidate(
            title=snippet["title"],
            description=snippet.get("description") or "",
            url=WATCH_URL.format(video_id=video_id),
            channel=snippet.get("channelTitle"),
            published_at=snippet.get("publishedAt"),
            thumbnail=thumb["url"] if thumb else None,
        )
