"""
Reviews from independent blogs.

Posts from sources labelled Independent may mention any company's
releases, so matching runs without a company gate.
"""

import structlog

from release_timeline.ingestion.matching import matches
from release_timeline.ingestion.schemas import ReviewSource, SourceType
from release_timeline.pipeline.base import BaseScraper
from release_timeline.pipeline.result import ScrapeResult

logger = structlog.get_logger(__name__)


class BlogReviewScraper(BaseScraper):
    """Attaches independent blog posts to the releases they mention."""

    name = "blog-reviews"

    async def _scrape(self, result: ScrapeResult) -> None:
        sources = await self.store.find_enabled_sources(
            (SourceType.RSS, SourceType.BLOG),
            companies=[self.settings.independent_company],
        )
        if not sources:
            result.errors.append("No independent blog sources configured")
            return

        releases = await self._load_releases()
        if not releases:
            logger.info("No releases to match", scraper=self.name)
            return

        content_limit = self.settings.review_content_max_chars
        for source in sources:
            try:
                posts = await self._fetch_feed(source)
            except Exception as e:
                self._record_error(result, f"Error scraping {source.name}: {e}")
                continue

            logger.debug("Feed fetched", source=source.name, posts=len(posts))
            for post in posts[: self.settings.feed_items]:
                for release in releases:
                    if not matches(post.text, release.name, release.company, source.company):
                        continue
                    content = post.content[:content_limit]
                    await self._add_review(
                        result,
                        release,
                        source=ReviewSource.BLOG,
                        source_url=post.link,
                        author=post.author or source.name,
                        content=content,
                        sentiment=self._classify(content),
                        created_at=post.published,
                    )
