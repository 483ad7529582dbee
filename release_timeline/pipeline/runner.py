"""
Scrape pipeline: runs the scrapers in their fixed order.

Release-producing scrapers run first so that the review scrapers see the
releases created in the same run.
"""

from collections.abc import Iterable
from uuid import uuid4

import structlog

from release_timeline.config.settings import Settings, get_settings
from release_timeline.ingestion.http_client import FeedFetcher
from release_timeline.observability.logging import bind_context, clear_context
from release_timeline.pipeline.base import BaseScraper, ScrapeOptions
from release_timeline.pipeline.blogs import BlogReviewScraper
from release_timeline.pipeline.catalog import CatalogScraper
from release_timeline.pipeline.official import OfficialReleaseScraper, OfficialReviewScraper
from release_timeline.pipeline.reddit import RedditReviewScraper
from release_timeline.pipeline.result import ScrapeResult
from release_timeline.pipeline.x import XReviewScraper
from release_timeline.storage.repository import TimelineRepository

logger = structlog.get_logger(__name__)

SCRAPERS: dict[str, type[BaseScraper]] = {
    scraper.name: scraper
    for scraper in (
        CatalogScraper,
        OfficialReleaseScraper,
        OfficialReviewScraper,
        BlogReviewScraper,
        RedditReviewScraper,
        XReviewScraper,
    )
}

ALL = "all"


def resolve_scrapers(names: Iterable[str] | None = None) -> list[str]:
    """
    Validate scraper names and put them in pipeline order.

    Args:
        names: Scraper names, or None / ["all"] for every scraper

    Returns:
        Unique names in the fixed pipeline order

    Raises:
        ValueError: On an unknown scraper name
    """
    requested = list(names or [])
    if not requested or ALL in requested:
        return list(SCRAPERS)

    unknown = [n for n in requested if n not in SCRAPERS]
    if unknown:
        raise ValueError(
            f"Unknown scraper(s): {', '.join(unknown)}. "
            f"Choose from: {', '.join(SCRAPERS)}, {ALL}"
        )
    return [name for name in SCRAPERS if name in requested]


def summarize(results: dict[str, ScrapeResult]) -> ScrapeResult:
    """Merge per-scraper results into one total."""
    total = ScrapeResult(scraper=ALL)
    for result in results.values():
        total = total.merge(result)
    return total


class ScrapePipeline:
    """
    Runs scrapers sequentially against one store and one fetcher.

    Usage:
        async with Database() as db, FeedFetcher() as fetcher:
            pipeline = ScrapePipeline(TimelineRepository(db), fetcher)
            results = await pipeline.run(["catalog", "reddit"])
    """

    def __init__(
        self,
        store: TimelineRepository,
        fetcher: FeedFetcher,
        settings: Settings | None = None,
        options: ScrapeOptions | None = None,
    ):
        self._store = store
        self._fetcher = fetcher
        self._settings = settings or get_settings()
        self._options = options or ScrapeOptions()

    def create(self, name: str) -> BaseScraper:
        """Instantiate one scraper by name."""
        return SCRAPERS[name](
            self._store,
            self._fetcher,
            settings=self._settings,
            options=self._options,
        )

    async def run(self, names: Iterable[str] | None = None) -> dict[str, ScrapeResult]:
        """
        Run the selected scrapers in pipeline order.

        Returns:
            Scraper name -> result, in the order the scrapers ran
        """
        selected = resolve_scrapers(names)
        bind_context(run_id=uuid4().hex[:12])
        logger.info("Scrape run starting", scrapers=selected)

        results: dict[str, ScrapeResult] = {}
        try:
            for name in selected:
                results[name] = await self.create(name).run()

            total = summarize(results)
            logger.info(
                "Scrape run finished",
                added=total.added,
                updated=total.updated,
                skipped=total.skipped,
                errors=len(total.errors),
            )
        finally:
            clear_context()
        return results
