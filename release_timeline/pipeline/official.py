"""
Scrapers for official lab blogs.

- OfficialReleaseScraper: announcement posts from major labs become releases
- OfficialReviewScraper: lab posts that mention one of the lab's own
  releases are stored as positive "(Official)" reviews
"""

from datetime import datetime, timezone

import structlog

from release_timeline.ingestion.heuristics import (
    categorize_release,
    is_coding_related,
    is_coding_tool,
    is_major_lab,
    is_release_announcement,
)
from release_timeline.ingestion.matching import matches
from release_timeline.ingestion.schemas import (
    FeedPost,
    ReleaseCategory,
    ReviewSource,
    Sentiment,
    SourceType,
)
from release_timeline.pipeline.base import BaseScraper
from release_timeline.pipeline.result import ScrapeResult
from release_timeline.sources.schemas import ScraperSource
from release_timeline.storage.schemas import Release

logger = structlog.get_logger(__name__)

FEED_TYPES = (SourceType.RSS, SourceType.BLOG)


class OfficialReleaseScraper(BaseScraper):
    """Detects release announcements in the latest posts of lab blogs."""

    name = "official-releases"
    writes_reviews = False

    async def _scrape(self, result: ScrapeResult) -> None:
        sources = await self.store.find_enabled_sources(FEED_TYPES)
        if not sources:
            result.errors.append("No RSS/blog sources configured")
            return

        for source in sources:
            if not is_major_lab(source.label):
                continue

            try:
                posts = await self._fetch_feed(source)
            except Exception as e:
                self._record_error(result, f"Error scraping {source.name}: {e}")
                continue

            for post in posts[: self.settings.official_release_items]:
                try:
                    await self._ingest_post(source, post, result)
                except Exception as e:
                    self._record_error(
                        result, f"Error processing post {post.link} from {source.name}: {e}"
                    )

    async def _ingest_post(
        self, source: ScraperSource, post: FeedPost, result: ScrapeResult
    ) -> None:
        text = post.text
        if not is_release_announcement(text):
            return

        company = source.label
        published = post.published or datetime.now(timezone.utc)
        release_date = published.date()

        existing = await self.store.find_one_release(post.title, company, release_date)
        if existing is not None:
            result.skipped += 1
            return

        if is_coding_tool(text):
            category = ReleaseCategory.TOOL
        else:
            category = categorize_release(text)

        summary_limit = self.settings.release_summary_max_chars
        await self.store.create_release(
            Release(
                name=post.title,
                company=company,
                category=category,
                release_date=release_date,
                summary=post.content[:summary_limit] + "...",
                docs_url=post.link,
                source_url=post.link,
                is_coding_related=is_coding_related(text),
            )
        )
        result.added += 1
        logger.info("Release announced", release=post.title, company=company)


class OfficialReviewScraper(BaseScraper):
    """Attaches lab blog posts to the same lab's releases."""

    name = "official-reviews"

    async def _scrape(self, result: ScrapeResult) -> None:
        sources = await self.store.find_enabled_sources(
            FEED_TYPES, companies=self.settings.official_company_list
        )
        if not sources:
            result.errors.append("No official company blog sources configured")
            return

        releases = await self._load_releases()
        if not releases:
            logger.info("No releases to match", scraper=self.name)
            return

        content_limit = self.settings.official_review_max_chars
        for source in sources:
            try:
                posts = await self._fetch_feed(source)
            except Exception as e:
                self._record_error(result, f"Error scraping {source.name}: {e}")
                continue

            for post in posts[: self.settings.feed_items]:
                for release in releases:
                    if not matches(post.text, release.name, release.company, source.company):
                        continue
                    await self._add_review(
                        result,
                        release,
                        source=ReviewSource.BLOG,
                        source_url=post.link,
                        author=f"{source.company} (Official)",
                        content=(
                            f"[Official Announcement] {post.title}\n\n"
                            f"{post.content[:content_limit]}"
                        ),
                        sentiment=Sentiment.POSITIVE,
                        created_at=post.published,
                    )
