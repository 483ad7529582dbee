"""Tests for the FeedFetcher HTTP layer."""

import httpx
import pytest
import respx

from release_timeline.config.settings import get_settings
from release_timeline.ingestion.http_client import FeedFetcher, FetchError, FetchTimeout


class TestFeedFetcher:
    """Tests for FeedFetcher.get / get_text / get_json."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_user_agent(self):
        """Should send the configured User-Agent header."""
        route = respx.get("https://example.com/feed.xml").mock(
            return_value=httpx.Response(200, text="<rss/>")
        )

        async with FeedFetcher() as fetcher:
            await fetcher.get("https://example.com/feed.xml")

        request = route.calls.last.request
        assert request.headers["User-Agent"] == get_settings().user_agent

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_2xx_is_not_an_error(self):
        """Should return the response for non-2xx instead of raising."""
        respx.get("https://example.com/missing").mock(return_value=httpx.Response(404))

        async with FeedFetcher() as fetcher:
            response = await fetcher.get("https://example.com/missing")
            text = await fetcher.get_text("https://example.com/missing")

        assert response.status_code == 404
        assert text is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_text_returns_body(self):
        respx.get("https://example.com/feed.xml").mock(
            return_value=httpx.Response(200, text="<rss>ok</rss>")
        )

        async with FeedFetcher() as fetcher:
            text = await fetcher.get_text("https://example.com/feed.xml")

        assert text == "<rss>ok</rss>"

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_json_passes_params(self):
        """Should encode query parameters and decode JSON."""
        route = respx.get("https://old.reddit.com/r/OpenAI/search.json").mock(
            return_value=httpx.Response(200, json={"data": {"children": []}})
        )

        async with FeedFetcher() as fetcher:
            payload = await fetcher.get_json(
                "https://old.reddit.com/r/OpenAI/search.json",
                params={"q": '"GPT-4" OpenAI', "limit": 10},
            )

        assert payload == {"data": {"children": []}}
        assert route.calls.last.request.url.params["limit"] == "10"

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_json_invalid_body_raises(self):
        respx.get("https://example.com/search.json").mock(
            return_value=httpx.Response(200, text="<html>rate limited</html>")
        )

        async with FeedFetcher() as fetcher:
            with pytest.raises(FetchError):
                await fetcher.get_json("https://example.com/search.json")

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_raises_fetch_timeout(self):
        """Should map httpx timeouts to FetchTimeout."""
        respx.get("https://slow.example.com/feed").mock(
            side_effect=httpx.ReadTimeout("timed out")
        )

        async with FeedFetcher(timeout=1.0) as fetcher:
            with pytest.raises(FetchTimeout) as exc_info:
                await fetcher.get("https://slow.example.com/feed")

        assert exc_info.value.url == "https://slow.example.com/feed"
        assert isinstance(exc_info.value, FetchError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_error_raises_fetch_error(self):
        respx.get("https://down.example.com/feed").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        async with FeedFetcher() as fetcher:
            with pytest.raises(FetchError) as exc_info:
                await fetcher.get("https://down.example.com/feed")

        assert not isinstance(exc_info.value, FetchTimeout)

    @pytest.mark.asyncio
    async def test_requires_context_manager(self):
        fetcher = FeedFetcher()
        with pytest.raises(RuntimeError):
            await fetcher.get("https://example.com")
