"""
Reviews from Reddit search.

For every release in the window, each enabled subreddit is searched for
the quoted release name plus its company. A subreddit is never tied to
one company, so posts match releases from any lab even when the source row
carries a company label. Requests are paced by reddit_request_interval.
"""

import structlog

from release_timeline.ingestion.matching import matches
from release_timeline.ingestion.parsers import parse_reddit_search
from release_timeline.ingestion.schemas import RedditPost, ReviewSource, SourceType
from release_timeline.pipeline.base import BaseScraper
from release_timeline.pipeline.result import ScrapeResult
from release_timeline.sources.schemas import ScraperSource
from release_timeline.storage.schemas import Release

logger = structlog.get_logger(__name__)


def search_params(release: Release, limit: int) -> dict[str, str | int]:
    """Query parameters for <subreddit>/search.json."""
    return {
        "q": f'"{release.name}" {release.company}',
        "restrict_sr": "on",
        "sort": "relevance",
        "limit": limit,
    }


class RedditReviewScraper(BaseScraper):
    """Searches configured subreddits for posts about each release."""

    name = "reddit"

    def request_interval(self) -> float:
        return self.settings.reddit_request_interval

    async def _search(self, source: ScraperSource, release: Release) -> list[RedditPost]:
        await self.pacer.wait()
        payload = await self.fetcher.get_json(
            f"{source.url.rstrip('/')}/search.json",
            params=search_params(release, self.settings.search_results),
        )
        if payload is None:
            return []
        return parse_reddit_search(
            payload, min_content_chars=self.settings.reddit_min_content_chars
        )

    async def _scrape(self, result: ScrapeResult) -> None:
        sources = await self.store.find_enabled_sources([SourceType.REDDIT])
        if not sources:
            result.errors.append("No Reddit sources configured")
            return

        releases = await self._load_releases()
        logger.info(
            "Searching Reddit",
            releases=len(releases),
            subreddits=len(sources),
            offset=self.options.offset,
        )

        content_limit = self.settings.review_content_max_chars
        for release in releases:
            for source in sources:
                try:
                    posts = await self._search(source, release)
                except Exception as e:
                    self._record_error(
                        result, f"Error scraping {source.name} for {release.name}: {e}"
                    )
                    continue

                for post in posts:
                    if not matches(post.text, release.name, release.company):
                        continue
                    content = post.content[:content_limit]
                    await self._add_review(
                        result,
                        release,
                        source=ReviewSource.REDDIT,
                        source_url=post.url,
                        author=post.author,
                        content=content,
                        sentiment=self._classify(content),
                        created_at=post.created_at,
                    )
