"""
HTTP layer used by every scraper.

Provides:
- FetchError / FetchTimeout: transport failures for a single URL
- FeedFetcher: async GET with a bounded timeout and a fixed User-Agent

There are no retries here: a failed source is reported by the
scraper and the run moves on to the next source. Non-2xx responses are not
errors at this layer; callers treat them as "no data from this source".
"""

import json
import logging
import time
from typing import Any

import httpx

from release_timeline.config.settings import get_settings
from release_timeline.observability.metrics import get_metrics

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a URL could not be fetched at all."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class FetchTimeout(FetchError):
    """Raised when a fetch exceeds its timeout."""

    pass


class FeedFetcher:
    """
    Async HTTP GET client for feeds and search endpoints.

    Example:
        async with FeedFetcher() as fetcher:
            xml = await fetcher.get_text("https://example.com/feed.xml")
            if xml is None:
                ...  # non-2xx, skip this source
    """

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
    ):
        """
        Initialize fetcher.

        Args:
            timeout: Per-request timeout in seconds (default from settings)
            user_agent: User-Agent header value (default from settings)
        """
        settings = get_settings()
        self.timeout = timeout or settings.fetch_timeout_seconds
        self.user_agent = user_agent or settings.user_agent
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "FeedFetcher":
        """Enter async context manager, create client."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager, close client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Perform a single GET request.

        Args:
            url: Request URL
            params: Query parameters

        Returns:
            httpx.Response for any status code

        Raises:
            FetchTimeout: When the request times out
            FetchError: On connection or protocol failures
        """
        if not self._client:
            raise RuntimeError("FeedFetcher must be used as async context manager")

        start = time.monotonic()
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            get_metrics().record_fetch("error", time.monotonic() - start)
            raise FetchTimeout(
                f"Timed out after {self.timeout:.0f}s fetching {url}", url=url
            ) from e
        except httpx.HTTPError as e:
            get_metrics().record_fetch("error", time.monotonic() - start)
            raise FetchError(
                f"Request to {url} failed: {type(e).__name__}: {e}", url=url
            ) from e

        outcome = "ok" if response.is_success else "not_ok"
        get_metrics().record_fetch(outcome, time.monotonic() - start)
        return response

    async def get_text(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> str | None:
        """
        Fetch a URL and return its body.

        Returns:
            Response text, or None when the status is not 2xx
        """
        response = await self.get(url, params=params)
        if not response.is_success:
            logger.warning(f"Non-OK status {response.status_code} from {url}")
            return None
        return response.text

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any | None:
        """
        Fetch a URL and decode its JSON body.

        Returns:
            Decoded JSON, or None when the status is not 2xx

        Raises:
            FetchError: When the body is not valid JSON
        """
        response = await self.get(url, params=params)
        if not response.is_success:
            logger.warning(f"Non-OK status {response.status_code} from {url}")
            return None

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}", url=url) from e
