"""OMDb ratings client."""

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
from cinecatalog.etl.extractors.omdb.normalizer import build_ratings
from cinecatalog.etl.types import OMDbMovieResponse, RatingRecord
from cinecatalog.settings import OMDbSettings, settings


class OMDbClientError(ProviderError):
    """Base exception for OMDb client errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message, provider="omdb")


class OMDbQuotaError(OMDbClientError):
    """Raised when the daily request limit is reached."""

    pass


class OMDbClient(BaseAPIClient):
    """HTTP client for title lookups on OMDb."""

    name = "omdb"

    def __init__(
        self,
        config: OMDbSettings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize OMDb client.

        Args:
            config: OMDb settings section. Defaults to global settings.
            http_client: Preconfigured httpx client.
        """
        self._config = config or settings.omdb
        super().__init__(self._config.request_delay, http_client)

    @retry(
        retry=retry_if_exception_type(httpx.TimeoutException),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _request(self, params: dict[str, Any]) -> dict[str, Any]:
        """Execute a lookup.

        Raises:
            OMDbQuotaError: When the request limit is reached (401).
            OMDbClientError: On other errors.
        """
        self._throttle()
        try:
            response = self.http.get(
                self._config.base_url,
                params={**params, "apikey": self._config.api_key},
            )
        except httpx.TimeoutException:
            self._logger.warning("Request timeout")
            raise
        except httpx.HTTPError as e:
            raise OMDbClientError(f"Transport error: {e}") from e

        if response.status_code == 401:
            raise OMDbQuotaError("Request limit reached or invalid key")
        if response.status_code != 200:
            raise OMDbClientError(f"OMDb API error {response.status_code}")
        return response.json()

    def _get(self, params: dict[str, Any]) -> dict[str, Any]:
        """Lookup with retries; a timeout outliving them becomes an OMDbClientError."""
        try:
            return self._request(params)
        except httpx.TimeoutException as e:
            raise OMDbClientError("Timeout") from e

    def get_title(self, title: str, year: int | None = None) -> OMDbMovieResponse | None:
        """Look up a title.

        Args:
            title: Movie title.
            year: Release year (narrows homonyms).

        Returns:
            Payload, or None when OMDb does not know the title.
        """
        params: dict[str, Any] = {"t": title, "type": "movie"}
        if year:
            params["y"] = year
        payload = self._get(params)
        if payload.get("Response") == "False":
            error = payload.get("Error", "")
            if "not found" in error.lower():
                return None
            raise OMDbClientError(f"OMDb error for '{title}': {error}")
        return payload

    def ratings_by_title(self, title: str, year: int | None = None) -> list[RatingRecord]:
        """Return the ratings OMDb aggregates for a title.

        Args:
            title: Movie title.
            year: Release year.

        Returns:
            Ratings (IMDb first), empty when the title is unknown.
        """
        payload = self.get_title(title, year)
        if payload is None:
            return []
        return build_ratings(payload)
