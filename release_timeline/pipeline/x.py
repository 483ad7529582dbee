"""
Reviews from X via Nitter search RSS.

Nitter instances are tried in the configured order for each release; the
first instance that returns tweets wins. An unreachable instance is not an
error, the next one is tried instead.
"""

import structlog

from release_timeline.ingestion.http_client import FetchError
from release_timeline.ingestion.matching import matches
from release_timeline.ingestion.parsers import parse_nitter_search
from release_timeline.ingestion.schemas import FeedPost, ReviewSource
from release_timeline.pipeline.base import BaseScraper
from release_timeline.pipeline.result import ScrapeResult
from release_timeline.storage.schemas import Release

logger = structlog.get_logger(__name__)


class XReviewScraper(BaseScraper):
    """Searches X through Nitter for posts about each release."""

    name = "x"

    def request_interval(self) -> float:
        return self.settings.x_request_interval

    async def _search(self, release: Release) -> list[FeedPost]:
        params = {"f": "tweets", "q": f"{release.name} {release.company}"}

        for instance in self.settings.nitter_instance_list:
            try:
                text = await self.fetcher.get_text(f"{instance}/search/rss", params=params)
            except FetchError as e:
                logger.debug("Nitter instance failed", instance=instance, error=str(e))
                continue

            if not text:
                continue

            tweets = parse_nitter_search(
                text,
                min_content_chars=self.settings.tweet_min_content_chars,
                max_chars=self.settings.feed_content_max_chars,
                limit=self.settings.search_results,
            )
            if tweets:
                return tweets

        return []

    async def _scrape(self, result: ScrapeResult) -> None:
        if not self.settings.nitter_instance_list:
            result.errors.append("No Nitter instances configured")
            return

        releases = await self._load_releases()
        content_limit = self.settings.review_content_max_chars

        for release in releases:
            try:
                await self.pacer.wait()
                tweets = await self._search(release)
            except Exception as e:
                self._record_error(result, f"Error scraping X for {release.name}: {e}")
                continue

            for tweet in tweets:
                if not matches(tweet.text, release.name, release.company):
                    continue
                content = tweet.content[:content_limit]
                await self._add_review(
                    result,
                    release,
                    source=ReviewSource.X,
                    source_url=tweet.link,
                    author=tweet.author,
                    content=content,
                    sentiment=self._classify(content),
                    created_at=tweet.published,
                )
