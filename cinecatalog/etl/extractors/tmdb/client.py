"""TMDB API client with rate limiting.

Handles HTTP communication with The Movie Database API: discovery of
release windows and full movie records with credits and videos.
"""

import time
from collections.abc import Iterable
from datetime import date
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
from cinecatalog.etl.extractors.tmdb.normalizer import normalize_movie
from cinecatalog.etl.types import FullRecord, TMDBDiscoverPage, TMDBMovieDetails
from cinecatalog.settings import TMDBSettings, settings

# =============================================================================
# EXCEPTIONS
# =============================================================================


class TMDBClientError(ProviderError):
    """Base exception for TMDB client errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message, provider="tmdb")


class TMDBRateLimitError(TMDBClientError):
    """Raised when rate limit is exceeded."""

    pass


class TMDBNotFoundError(TMDBClientError):
    """Raised when resource is not found."""

    pass


# =============================================================================
# CLIENT
# =============================================================================


class TMDBClient(BaseAPIClient):
    """HTTP client for the TMDB API.

    Sliding-window rate limiting keeps within TMDB's limits
    (40 requests per 10 seconds by default) across worker threads.
    """

    name = "tmdb"

    def __init__(
        self,
        config: TMDBSettings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize TMDB client.

        Args:
            config: TMDB settings section. Defaults to global settings.
            http_client: Preconfigured httpx client.
        """
        self._config = config or settings.tmdb
        super().__init__(self._config.min_request_delay, http_client)
        self._request_times: list[float] = []

    @property
    def config(self) -> TMDBSettings:
        """TMDB settings in use."""
        return self._config

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------

    def _throttle(self) -> None:
        """Wait if necessary to respect the sliding request window."""
        with self._rate_lock:
            now = time.monotonic()
            cutoff = now - self._config.period_seconds
            self._request_times = [t for t in self._request_times if t > cutoff]

            if len(self._request_times) >= self._config.requests_per_period:
                wait_time = self._request_times[0] + self._config.period_seconds - now
                if wait_time > 0:
                    self._logger.debug(f"Rate limit: waiting {wait_time:.2f}s")
                    time.sleep(wait_time)

            if self._request_times:
                elapsed = time.monotonic() - self._request_times[-1]
                if elapsed < self._min_delay:
                    time.sleep(self._min_delay - elapsed)

            self._request_times.append(time.monotonic())
            self.api_calls += 1

    # -------------------------------------------------------------------------
    # HTTP Methods
    # -------------------------------------------------------------------------

    @retry(
        retry=retry_if_exception_type((httpx.TimeoutException, TMDBRateLimitError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute GET request with rate limiting and retries.

        Args:
            endpoint: API endpoint path.
            params: Optional query parameters.

        Returns:
            JSON response as dictionary.

        Raises:
            TMDBClientError: On API or transport errors.
            TMDBNotFoundError: When resource not found.
            TMDBRateLimitError: When rate limit exceeded.
        """
        self._throttle()

        request_params: dict[str, Any] = {"language": self._config.language}
        headers: dict[str, str] = {}
        if self._config.bearer_token:
            headers["Authorization"] = f"Bearer {self._config.bearer_token}"
        else:
            request_params["api_key"] = self._config.api_key
        if params:
            request_params.update(params)

        url = f"{self._config.base_url}{endpoint}"

        try:
            response = self.http.get(url, params=request_params, headers=headers)
        except httpx.TimeoutException:
            self._logger.warning(f"Request timeout: {endpoint}")
            raise
        except httpx.HTTPError as e:
            raise TMDBClientError(f"Transport error on {endpoint}: {e}") from e

        return self._handle_response(response, endpoint)

    def _get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """GET with retries; a timeout outliving them becomes a TMDBClientError."""
        try:
            return self._request(endpoint, params)
        except httpx.TimeoutException as e:
            raise TMDBClientError(f"Timeout on {endpoint}") from e

    def _handle_response(
        self,
        response: httpx.Response,
        endpoint: str,
    ) -> dict[str, Any]:
        """Handle HTTP response and extract JSON.

        Raises:
            TMDBClientError: On API errors.
            TMDBNotFoundError: When resource not found (404).
            TMDBRateLimitError: When rate limit exceeded (429).
        """
        if response.status_code == 200:
            return response.json()

        if response.status_code == 404:
            raise TMDBNotFoundError(f"Not found: {endpoint}")

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After", "10")
            self._logger.warning(f"Rate limited. Retry after {retry_after}s")
            raise TMDBRateLimitError(f"Rate limited: {endpoint}")

        error_msg = f"TMDB API error {response.status_code}: {endpoint}"
        self._logger.error(error_msg)
        raise TMDBClientError(error_msg)

    # -------------------------------------------------------------------------
    # API Endpoints
    # -------------------------------------------------------------------------

    def discover_page(
        self,
        start: date,
        end: date,
        original_language: str | None = None,
        page: int = 1,
    ) -> TMDBDiscoverPage:
        """Fetch one page of movies released in a date window.

        Args:
            start: First release date (inclusive).
            end: Last release date (inclusive).
            original_language: Original-language code filter.
            page: Page number.

        Returns:
            Discover response page.
        """
        params: dict[str, Any] = {
            "page": page,
            "sort_by": "popularity.desc",
            "region": self._config.region,
            "include_adult": "false",
            "vote_count.gte": 0,
            "primary_release_date.gte": start.isoformat(),
            "primary_release_date.lte": end.isoformat(),
        }
        if original_language:
            params["with_original_language"] = original_language

        return self._get("/discover/movie", params)

    def discover(
        self,
        start: date,
        end: date,
        languages: Iterable[str] = (),
    ) -> list[int]:
        """Discover movie ids released in a window, one query per language.

        A failing language query is logged and contributes nothing.

        Args:
            start: First release date (inclusive).
            end: Last release date (inclusive).
            languages: Original-language codes; empty means no filter.

        Returns:
            De-duplicated ids in first-seen order.
        """
        seen: dict[int, None] = {}
        for language in list(languages) or [None]:
            try:
                page = self.discover_page(start, end, language)
            except ProviderError as e:
                self._logger.warning(f"Discover failed ({language or 'any'}): {e}")
                continue
            for item in page.get("results", []):
                movie_id = item.get("id")
                if isinstance(movie_id, int):
                    seen.setdefault(movie_id, None)
        return list(seen)

    def get_movie_details(self, movie_id: int) -> TMDBMovieDetails:
        """Get movie details with credits and videos appended.

        Args:
            movie_id: TMDB movie ID.

        Returns:
            Raw movie details payload.
        """
        params = {"append_to_response": "credits,videos"}
        return self._get(f"/movie/{movie_id}", params)

    def fetch_full(self, movie_id: int) -> FullRecord:
        """Fetch and normalize a complete movie record.

        Args:
            movie_id: TMDB movie ID.

        Returns:
            Normalized record.

        Raises:
            TMDBClientError: On API errors.
            ProviderError: If the payload fails validation.
        """
        return normalize_movie(self.get_movie_details(movie_id), self._config)
