"""
Base scraper and shared review-writing logic.

Every scraper follows the same shape: read enabled sources from the
registry, fetch each one through the FeedFetcher, parse, match against
known releases and write through the TimelineRepository. The base class
owns the parts that must behave identically everywhere:

- run() never raises; failures end up in ScrapeResult.errors
- review creation checks the (release_id, source_url) dedup key first
- one Pacer per scraper enforces the minimum interval between requests
- run counters are logged and exported as Prometheus metrics
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar

import structlog

from release_timeline.config.settings import Settings, get_settings
from release_timeline.ingestion.http_client import FeedFetcher
from release_timeline.ingestion.pacing import Pacer
from release_timeline.ingestion.parsers import parse_feed
from release_timeline.ingestion.schemas import FeedPost, ReviewSource, Sentiment
from release_timeline.observability.metrics import get_metrics
from release_timeline.pipeline.result import ScrapeResult
from release_timeline.sentiment.keywords import classify_sentiment
from release_timeline.sources.schemas import ScraperSource
from release_timeline.storage.repository import TimelineRepository
from release_timeline.storage.schemas import Release, Review

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScrapeOptions:
    """Which releases the review scrapers search for."""

    since: date | None = None
    limit: int | None = None
    offset: int = 0


class BaseScraper(ABC):
    """
    Abstract base class for scrapers.

    Subclasses must implement:
        - name: Scraper name used on the CLI, in logs and in metrics
        - _scrape(): Fill in the given ScrapeResult

    Subclasses may override:
        - writes_reviews: Whether `added` counts reviews (else releases)
        - request_interval(): Minimum seconds between outgoing requests
    """

    name: ClassVar[str]
    writes_reviews: ClassVar[bool] = True

    def __init__(
        self,
        store: TimelineRepository,
        fetcher: FeedFetcher,
        settings: Settings | None = None,
        options: ScrapeOptions | None = None,
    ):
        """
        Initialize scraper.

        Args:
            store: Store client for releases, reviews and sources
            fetcher: Open FeedFetcher shared by the whole run
            settings: Settings override (default from environment)
            options: Release window for review scrapers
        """
        self.store = store
        self.fetcher = fetcher
        self.settings = settings or get_settings()
        self.options = options or ScrapeOptions()
        self.pacer = Pacer(min_interval=self.request_interval())

    def request_interval(self) -> float:
        return self.settings.blog_request_interval

    async def run(self) -> ScrapeResult:
        """
        Run the scraper once.

        Returns:
            Counters plus every error collected along the way
        """
        result = ScrapeResult(scraper=self.name)
        start = time.monotonic()
        log = logger.bind(scraper=self.name)
        log.info("Scraper starting")

        try:
            await self._scrape(result)
        except Exception as e:
            log.error("Scraper aborted", error=str(e), error_type=type(e).__name__)
            result.errors.append(f"{self.name} scraper failed: {e}")

        elapsed = time.monotonic() - start
        get_metrics().record_run(
            self.name,
            added=result.added,
            updated=result.updated,
            skipped=result.skipped,
            errors=len(result.errors),
            latency=elapsed,
            reviews=self.writes_reviews,
        )
        log.info(
            "Scraper finished",
            added=result.added,
            updated=result.updated,
            skipped=result.skipped,
            errors=len(result.errors),
            elapsed_seconds=round(elapsed, 2),
        )
        return result

    @abstractmethod
    async def _scrape(self, result: ScrapeResult) -> None:
        """
        Do the work of one run, updating `result` in place.

        Per-source and per-record failures must be caught and recorded with
        _record_error(); anything that escapes aborts the rest of the run.
        """
        ...

    # ── Shared helpers ──────────────────────────────────────────

    def _record_error(self, result: ScrapeResult, message: str) -> None:
        logger.warning("Scrape error", scraper=self.name, error=message)
        result.errors.append(message)

    async def _load_releases(self) -> list[Release]:
        """Releases inside the configured window, newest first."""
        return await self.store.find_releases(
            since=self.options.since,
            limit=self.options.limit,
            offset=self.options.offset,
        )

    async def _fetch_feed(self, source: ScraperSource) -> list[FeedPost]:
        """
        Fetch and parse one RSS/Atom source after pacing.

        Returns:
            Posts in feed order; empty when the source answered non-2xx

        Raises:
            FetchError: When the source could not be reached
        """
        await self.pacer.wait()
        text = await self.fetcher.get_text(source.url)
        if text is None:
            return []
        return parse_feed(text, max_chars=self.settings.feed_content_max_chars)

    def _classify(self, text: str) -> Sentiment:
        return classify_sentiment(text, word_boundary=self.settings.sentiment_word_boundary)

    async def _add_review(
        self,
        result: ScrapeResult,
        release: Release,
        source: ReviewSource,
        source_url: str,
        author: str,
        content: str,
        sentiment: Sentiment,
        created_at: datetime | None = None,
    ) -> bool:
        """
        Create a review unless one exists for (release.id, source_url).

        Store failures are recorded as a per-record error.

        Returns:
            True if a review was created
        """
        review = Review(
            release_id=release.id,
            source=source,
            author=author,
            content=content,
            sentiment=sentiment,
            source_url=source_url,
            created_at=created_at,
        )

        try:
            if await self.store.find_one_review(*review.dedup_key) is not None:
                result.skipped += 1
                return False

            created = await self.store.create_review(review)
        except Exception as e:
            self._record_error(
                result, f"Error saving review {source_url} for {release.name}: {e}"
            )
            return False

        if created is None:
            # Lost a race with a concurrent run
            result.skipped += 1
            return False

        result.added += 1
        logger.debug(
            "Review added",
            scraper=self.name,
            release=release.name,
            source_url=source_url,
        )
        return True

