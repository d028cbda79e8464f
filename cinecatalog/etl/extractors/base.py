"""Base HTTP client shared by provider clients.

Owns the httpx client lifecycle and a thread-safe minimum delay
between requests so worker threads share one provider budget.
"""

import threading
import time
from types import TracebackType
from typing import Self

import httpx

from cinecatalog.etl.utils.logger import setup_logger
from cinecatalog.settings import settings


class BaseAPIClient:
    """Context-managed HTTP client with request throttling.

    Subclasses implement their own ``_get`` with retry policy and
    response handling, and call ``_throttle`` before each request.

    Attributes:
        name: Provider identifier used in logs and errors.
    """

    name: str = "base"

    def __init__(
        self,
        min_request_delay: float = 0.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize client state.

        Args:
            min_request_delay: Minimum delay between requests (seconds).
            http_client: Preconfigured httpx client (owned by the caller).
        """
        self._logger = setup_logger(f"etl.{self.name}.client")
        self._min_delay = min_request_delay
        self._last_request_time: float = 0.0
        self._rate_lock = threading.Lock()
        self._client: httpx.Client | None = http_client
        self._owns_client = http_client is None
        self.api_calls = 0

    # -------------------------------------------------------------------------
    # Context Manager
    # -------------------------------------------------------------------------

    def __enter__(self) -> Self:
        """Enter context and create the HTTP client if needed."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=settings.etl.http_timeout,
                headers={"User-Agent": settings.etl.user_agent},
            )
            self._owns_client = True
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        """Exit context and close an owned HTTP client."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    @property
    def http(self) -> httpx.Client:
        """Active HTTP client.

        Raises:
            RuntimeError: If used outside the context manager.
        """
        if self._client is None:
            raise RuntimeError(f"{self.name} client not initialized. Use context manager.")
        return self._client

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------

    def _throttle(self) -> None:
        """Enforce the minimum delay between requests."""
        with self._rate_lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self._min_delay:
                time.sleep(self._min_delay - elapsed)
            self._last_request_time = time.monotonic()
            self.api_calls += 1
