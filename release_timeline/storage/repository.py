"""
Timeline repository: the store API the scrapers write through.

Wraps the releases and reviews tables and delegates source lookups to
SourcesRepository, so a scraper needs exactly one collaborator.

Tables:
    - releases: one row per tracked model or tool (no unique name)
    - reviews: one row per (release_id, source_url)
    - scraper_sources: see release_timeline.sources.repository
"""

import json
import logging
from collections.abc import Iterable
from datetime import date
from typing import Any

import asyncpg

from release_timeline.ingestion.schemas import SourceType
from release_timeline.sources.repository import SourcesRepository
from release_timeline.sources.schemas import ScraperSource
from release_timeline.storage.database import Database
from release_timeline.storage.schemas import Release, Review

logger = logging.getLogger(__name__)

# Fields a later scrape may overwrite on an existing release
AUXILIARY_RELEASE_FIELDS = frozenset({"is_coding_related", "domain", "parameters"})

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS releases (
    id                TEXT PRIMARY KEY,
    name              TEXT NOT NULL,
    company           TEXT NOT NULL,
    category          TEXT NOT NULL CHECK (category IN ('model', 'tool')),
    release_date      DATE NOT NULL,
    summary           TEXT NOT NULL DEFAULT '',
    features          JSONB NOT NULL DEFAULT '[]',
    pricing           TEXT,
    docs_url          TEXT NOT NULL,
    source_url        TEXT NOT NULL,
    is_coding_related BOOLEAN NOT NULL DEFAULT FALSE,
    domain            TEXT,
    parameters        TEXT,
    created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_releases_name
    ON releases(name);
CREATE INDEX IF NOT EXISTS idx_releases_company_date
    ON releases(company, release_date);
CREATE INDEX IF NOT EXISTS idx_releases_release_date
    ON releases(release_date DESC);

CREATE TABLE IF NOT EXISTS reviews (
    id          TEXT PRIMARY KEY,
    release_id  TEXT NOT NULL REFERENCES releases(id) ON DELETE CASCADE,
    source      TEXT NOT NULL CHECK (source IN ('reddit', 'blog', 'youtube', 'x')),
    author      TEXT NOT NULL,
    content     TEXT NOT NULL,
    sentiment   TEXT NOT NULL CHECK (sentiment IN ('positive', 'neutral', 'negative')),
    source_url  TEXT NOT NULL,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (release_id, source_url)
);

CREATE INDEX IF NOT EXISTS idx_reviews_release_id
    ON reviews(release_id);
"""

_FIND_RELEASES_SQL = """
SELECT * FROM releases
WHERE ($1::date IS NULL OR release_date >= $1)
ORDER BY release_date DESC, name
LIMIT $2 OFFSET $3
"""

# Name match wins over a (company, release_date) match
_FIND_ONE_RELEASE_SQL = """
SELECT * FROM releases
WHERE name = $1 OR (company = $2 AND release_date = $3)
ORDER BY (name = $1) DESC, created_at
LIMIT 1
"""

_INSERT_RELEASE_SQL = """
INSERT INTO releases (
    id, name, company, category, release_date, summary, features, pricing,
    docs_url, source_url, is_coding_related, domain, parameters
)
VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb, $8, $9, $10, $11, $12, $13)
RETURNING *
"""

_FIND_ONE_REVIEW_SQL = """
SELECT * FROM reviews WHERE release_id = $1 AND source_url = $2
"""

_INSERT_REVIEW_SQL = """
INSERT INTO reviews (
    id, release_id, source, author, content, sentiment, source_url, created_at
)
VALUES ($1, $2, $3, $4, $5, $6, $7, COALESCE($8, NOW()))
ON CONFLICT (release_id, source_url) DO NOTHING
RETURNING *
"""


def _decode_features(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = json.loads(value)
    return [str(item) for item in value]


def _record_to_release(record: asyncpg.Record) -> Release:
    """Convert an asyncpg Record to a Release dataclass."""
    return Release(
        id=record["id"],
        name=record["name"],
        company=record["company"],
        category=record["category"],
        release_date=record["release_date"],
        summary=record["summary"],
        features=_decode_features(record["features"]),
        pricing=record["pricing"],
        docs_url=record["docs_url"],
        source_url=record["source_url"],
        is_coding_related=record["is_coding_related"],
        domain=record["domain"],
        parameters=record["parameters"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


def _record_to_review(record: asyncpg.Record) -> Review:
    """Convert an asyncpg Record to a Review dataclass."""
    return Review(
        id=record["id"],
        release_id=record["release_id"],
        source=record["source"],
        author=record["author"],
        content=record["content"],
        sentiment=record["sentiment"],
        source_url=record["source_url"],
        created_at=record["created_at"],
    )


class TimelineRepository:
    """
    Store client for the scrape pipeline.

    Review creation is an atomic conditional insert backed by the
    UNIQUE (release_id, source_url) constraint, so overlapping runs cannot
    create duplicate reviews.
    """

    def __init__(self, database: Database):
        """
        Initialize repository.

        Args:
            database: Connected Database instance
        """
        self._db = database
        self._sources = SourcesRepository(database)

    @property
    def sources(self) -> SourcesRepository:
        return self._sources

    async def create_tables(self) -> None:
        """Create releases, reviews and scraper_sources if they don't exist."""
        await self._sources.create_table()
        await self._db.execute(_CREATE_TABLES_SQL)
        logger.info("Timeline tables ensured")

    # ── Releases ────────────────────────────────────────────────

    async def find_releases(
        self,
        since: date | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Release]:
        """
        Known releases, newest first.

        Args:
            since: Only releases on or after this date
            limit: Maximum number of releases (None for all)
            offset: Number of releases to skip

        Returns:
            Releases ordered by release_date descending, then name
        """
        rows = await self._db.fetch(_FIND_RELEASES_SQL, since, limit, offset)
        return [_record_to_release(r) for r in rows]

    async def find_one_release(
        self,
        name: str,
        company: str,
        release_date: date,
    ) -> Release | None:
        """
        Look up an existing release by name, or else by (company, release_date).

        When both clauses match different rows, the name match is returned.
        """
        row = await self._db.fetchrow(_FIND_ONE_RELEASE_SQL, name, company, release_date)
        return _record_to_release(row) if row else None

    async def create_release(self, release: Release) -> Release:
        row = await self._db.fetchrow(
            _INSERT_RELEASE_SQL,
            release.id,
            release.name,
            release.company,
            release.category.value,
            release.release_date,
            release.summary,
            json.dumps(release.features),
            release.pricing,
            release.docs_url,
            release.source_url,
            release.is_coding_related,
            release.domain,
            release.parameters,
        )
        return _record_to_release(row)

    async def update_release(self, release_id: str, **fields: Any) -> Release | None:
        """
        Update auxiliary fields of an existing release.

        Args:
            release_id: Release to update
            **fields: Any of is_coding_related, domain, parameters

        Returns:
            The updated release, or None if it no longer exists

        Raises:
            ValueError: If a non-auxiliary field is passed
        """
        unknown = set(fields) - AUXILIARY_RELEASE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update release fields: {sorted(unknown)}")
        if not fields:
            return await self._get_release(release_id)

        assignments = []
        params: list[Any] = [release_id]
        for column, value in sorted(fields.items()):
            params.append(value)
            assignments.append(f"{column} = ${len(params)}")

        row = await self._db.fetchrow(
            f"""
            UPDATE releases SET {", ".join(assignments)}, updated_at = NOW()
            WHERE id = $1
            RETURNING *
            """,
            *params,
        )
        return _record_to_release(row) if row else None

    async def _get_release(self, release_id: str) -> Release | None:
        row = await self._db.fetchrow("SELECT * FROM releases WHERE id = $1", release_id)
        return _record_to_release(row) if row else None

    # ── Reviews ─────────────────────────────────────────────────

    async def find_one_review(self, release_id: str, source_url: str) -> Review | None:
        row = await self._db.fetchrow(_FIND_ONE_REVIEW_SQL, release_id, source_url)
        return _record_to_review(row) if row else None

    async def create_review(self, review: Review) -> Review | None:
        """
        Insert a review unless (release_id, source_url) already exists.

        Returns:
            The stored review, or None when another writer got there first
        """
        row = await self._db.fetchrow(
            _INSERT_REVIEW_SQL,
            review.id,
            review.release_id,
            review.source.value,
            review.author,
            review.content,
            review.sentiment.value,
            review.source_url,
            review.created_at,
        )
        if row is None:
            logger.debug(
                f"Review already exists for {review.release_id} {review.source_url}"
            )
            return None
        return _record_to_review(row)

    # ── Sources ─────────────────────────────────────────────────

    async def find_enabled_sources(
        self,
        types: Iterable[SourceType | str],
        companies: Iterable[str] | None = None,
    ) -> list[ScraperSource]:
        return await self._sources.find_enabled(types, companies)

    # ── Status ──────────────────────────────────────────────────

    async def count_releases(self) -> int:
        return await self._db.fetchval("SELECT COUNT(*) FROM releases") or 0

    async def count_reviews(self) -> int:
        return await self._db.fetchval("SELECT COUNT(*) FROM reviews") or 0

    async def count_reviews_by_source(self) -> dict[str, int]:
        rows = await self._db.fetch(
            "SELECT source, COUNT(*) AS n FROM reviews GROUP BY source ORDER BY source"
        )
        return {r["source"]: r["n"] for r in rows}
