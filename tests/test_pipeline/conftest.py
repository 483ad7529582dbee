"""Fixtures for scraper tests: an in-memory store and a canned fetcher."""

from collections.abc import Iterable
from datetime import date
from typing import Any

import pytest

from release_timeline.ingestion.schemas import SourceType
from release_timeline.sources.schemas import ScraperSource
from release_timeline.storage.repository import AUXILIARY_RELEASE_FIELDS
from release_timeline.storage.schemas import Release, Review


class InMemoryStore:
    """Implements the TimelineRepository calls the scrapers make."""

    def __init__(self) -> None:
        self.releases: list[Release] = []
        self.reviews: dict[tuple[str, str], Review] = {}
        self.sources: list[ScraperSource] = []
        self.failing_review_urls: set[str] = set()

    def add_source(self, type: str, name: str, url: str, company: str | None = None,
                   enabled: bool = True) -> ScraperSource:
        source = ScraperSource(type=type, name=name, url=url, company=company, enabled=enabled)
        self.sources.append(source)
        return source

    async def find_releases(self, since: date | None = None, limit: int | None = None,
                            offset: int = 0) -> list[Release]:
        rows = [r for r in self.releases if since is None or r.release_date >= since]
        rows.sort(key=lambda r: r.release_date, reverse=True)
        rows = rows[offset:]
        return rows[:limit] if limit is not None else rows

    async def find_one_release(self, name: str, company: str,
                               release_date: date) -> Release | None:
        for release in self.releases:
            if release.name == name:
                return release
        for release in self.releases:
            if release.company == company and release.release_date == release_date:
                return release
        return None

    async def create_release(self, release: Release) -> Release:
        self.releases.append(release)
        return release

    async def update_release(self, release_id: str, **fields: Any) -> Release | None:
        invalid = set(fields) - AUXILIARY_RELEASE_FIELDS
        if invalid:
            raise ValueError(f"Cannot update release fields: {sorted(invalid)}")
        for release in self.releases:
            if release.id == release_id:
                for key, value in fields.items():
                    setattr(release, key, value)
                return release
        return None

    async def find_one_review(self, release_id: str, source_url: str) -> Review | None:
        return self.reviews.get((release_id, source_url))

    async def create_review(self, review: Review) -> Review | None:
        if review.source_url in self.failing_review_urls:
            raise RuntimeError("connection reset")
        if review.dedup_key in self.reviews:
            return None
        self.reviews[review.dedup_key] = review
        return review

    async def find_enabled_sources(self, types: Iterable[SourceType | str],
                                   companies: Iterable[str] | None = None) -> list[ScraperSource]:
        wanted = {SourceType(t) for t in types}
        labels = {c.lower() for c in companies} if companies is not None else None
        found = [
            s for s in self.sources
            if s.enabled and s.type in wanted
            and (labels is None or (s.company or "").lower() in labels)
        ]
        return sorted(found, key=lambda s: (s.type.value, s.name))


class StubFetcher:
    """
    FeedFetcher stand-in answering from a URL -> response mapping.

    A response that is an exception instance is raised. Unknown URLs behave
    like a non-2xx status and return None.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, dict | None]] = []

    def _respond(self, url: str, params: dict | None) -> Any:
        self.calls.append((url, params))
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_text(self, url: str, params: dict | None = None) -> str | None:
        return self._respond(url, params)

    async def get_json(self, url: str, params: dict | None = None) -> Any | None:
        return self._respond(url, params)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def rss_feed():
    """
    Build an RSS 2.0 document from (title, link, description) tuples.

    An optional fourth element overrides the item's pubDate.
    """

    def build(*items: tuple[str, ...], pub_date: str = "Mon, 04 Mar 2024 15:00:00 GMT") -> str:
        entries = []
        for title, link, description, *rest in items:
            entries.append(
                f"<item><title>{title}</title><link>{link}</link>"
                f"<description>{description}</description>"
                f"<pubDate>{rest[0] if rest else pub_date}</pubDate></item>"
            )
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<rss version="2.0"><channel><title>Feed</title>'
            f"{''.join(entries)}</channel></rss>"
        )

    return build
