"""Tests for RedditReviewScraper."""

from datetime import date

import pytest

from release_timeline.ingestion.http_client import FetchError
from release_timeline.ingestion.schemas import ReviewSource, Sentiment
from release_timeline.pipeline.base import ScrapeOptions
from release_timeline.pipeline.reddit import RedditReviewScraper, search_params

SUBREDDIT = "https://old.reddit.com/r/LocalLLaMA/"
SEARCH_URL = "https://old.reddit.com/r/LocalLLaMA/search.json"


def _child(**data) -> dict:
    return {"kind": "t3", "data": data}


SEARCH_PAYLOAD = {
    "data": {
        "children": [
            _child(
                title="Claude 3 first impressions",
                selftext=(
                    "Been using Claude 3 all day and it is amazing for long "
                    "documents, much better than what I had before."
                ),
                author="alice",
                permalink="/r/LocalLLaMA/comments/abc/claude_3/",
                created_utc=1709600000,
            ),
            _child(
                title="Claude 3?",
                selftext="too short",
                author="bob",
                permalink="/r/LocalLLaMA/comments/def/short/",
            ),
            _child(
                title="Weekly hardware thread",
                selftext="Post your rigs here, GPUs, RAM, power supplies and everything in between.",
                author="mod",
                permalink="/r/LocalLLaMA/comments/ghi/hardware/",
            ),
        ]
    }
}


@pytest.fixture
def reddit_store(store, gpt4_release, claude_release):
    store.add_source("reddit", "r/LocalLLaMA", SUBREDDIT)
    store.releases.extend([gpt4_release, claude_release])
    return store


class TestSearchParams:
    def test_quotes_release_name(self, claude_release) -> None:
        assert search_params(claude_release, 10) == {
            "q": '"Claude 3" Anthropic',
            "restrict_sr": "on",
            "sort": "relevance",
            "limit": 10,
        }


class TestRedditReviewScraper:
    @pytest.mark.asyncio
    async def test_matching_posts_become_reviews(
        self, reddit_store, fetcher, test_settings
    ) -> None:
        fetcher.responses[SEARCH_URL] = SEARCH_PAYLOAD

        result = await RedditReviewScraper(reddit_store, fetcher, settings=test_settings).run()

        assert result.ok
        assert result.added == 1
        review = reddit_store.reviews[
            ("rel_claude3", "https://reddit.com/r/LocalLLaMA/comments/abc/claude_3/")
        ]
        assert review.source == ReviewSource.REDDIT
        assert review.author == "u/alice"
        assert review.sentiment == Sentiment.POSITIVE
        assert review.created_at.date() == date(2024, 3, 5)

    @pytest.mark.asyncio
    async def test_company_labelled_subreddit_matches_any_lab(
        self, store, fetcher, test_settings, claude_release
    ) -> None:
        store.add_source("reddit", "r/OpenAI", "https://old.reddit.com/r/OpenAI", company="OpenAI")
        store.releases.append(claude_release)
        fetcher.responses["https://old.reddit.com/r/OpenAI/search.json"] = {
            "data": {
                "children": [
                    _child(
                        title="Switched from GPT",
                        selftext="Claude 3 is much better at following long instructions than anything I used before.",
                        author="dave",
                        permalink="/r/OpenAI/comments/jkl/switched/",
                    )
                ]
            }
        }

        result = await RedditReviewScraper(store, fetcher, settings=test_settings).run()

        assert result.added == 1
        assert ("rel_claude3", "https://reddit.com/r/OpenAI/comments/jkl/switched/") in store.reviews

    @pytest.mark.asyncio
    async def test_searches_each_release_in_order(
        self, reddit_store, fetcher, test_settings
    ) -> None:
        await RedditReviewScraper(reddit_store, fetcher, settings=test_settings).run()

        assert [url for url, _ in fetcher.calls] == [SEARCH_URL, SEARCH_URL]
        queries = [params["q"] for _, params in fetcher.calls]
        assert queries == ['"Claude 3" Anthropic', '"GPT-4 Turbo" OpenAI']
        assert fetcher.calls[0][1]["limit"] == test_settings.search_results

    @pytest.mark.asyncio
    async def test_release_window(self, reddit_store, fetcher, test_settings) -> None:
        options = ScrapeOptions(since=date(2024, 1, 1))

        await RedditReviewScraper(
            reddit_store, fetcher, settings=test_settings, options=options
        ).run()

        assert len(fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_fetch_error_is_per_search(self, reddit_store, fetcher, test_settings) -> None:
        fetcher.responses[SEARCH_URL] = FetchError("HTTP 429")

        result = await RedditReviewScraper(reddit_store, fetcher, settings=test_settings).run()

        assert result.errors == [
            "Error scraping r/LocalLLaMA for Claude 3: HTTP 429",
            "Error scraping r/LocalLLaMA for GPT-4 Turbo: HTTP 429",
        ]

    @pytest.mark.asyncio
    async def test_non_ok_status_is_empty(self, reddit_store, fetcher, test_settings) -> None:
        result = await RedditReviewScraper(reddit_store, fetcher, settings=test_settings).run()

        assert result.ok
        assert result.added == 0

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, reddit_store, fetcher, test_settings) -> None:
        fetcher.responses[SEARCH_URL] = SEARCH_PAYLOAD
        scraper = RedditReviewScraper(reddit_store, fetcher, settings=test_settings)

        await scraper.run()
        second = await scraper.run()

        assert second.added == 0
        assert len(reddit_store.reviews) == 1

    @pytest.mark.asyncio
    async def test_no_sources(self, store, fetcher, test_settings) -> None:
        result = await RedditReviewScraper(store, fetcher, settings=test_settings).run()

        assert result.errors == ["No Reddit sources configured"]

    @pytest.mark.asyncio
    async def test_store_outage_aborts_run(self, store, fetcher, test_settings) -> None:
        async def unavailable(*args, **kwargs):
            raise ConnectionError("database is down")

        store.find_enabled_sources = unavailable

        result = await RedditReviewScraper(store, fetcher, settings=test_settings).run()

        assert result.errors == ["reddit scraper failed: database is down"]
