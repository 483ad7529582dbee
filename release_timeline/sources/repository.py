"""Database repository for the scraper_sources table."""

import logging
from collections.abc import Iterable

from release_timeline.ingestion.schemas import SourceType
from release_timeline.sources.schemas import ScraperSource
from release_timeline.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS scraper_sources (
    id         TEXT PRIMARY KEY,
    type       TEXT NOT NULL CHECK (type IN ('reddit', 'rss', 'blog', 'csv')),
    name       TEXT NOT NULL,
    url        TEXT NOT NULL,
    company    TEXT,
    enabled    BOOLEAN NOT NULL DEFAULT TRUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (type, url)
);

CREATE INDEX IF NOT EXISTS idx_scraper_sources_type_enabled
    ON scraper_sources(type, enabled) WHERE enabled = TRUE;
"""

_UPSERT_SQL = """
INSERT INTO scraper_sources (id, type, name, url, company, enabled)
VALUES ($1, $2, $3, $4, $5, $6)
ON CONFLICT (type, url) DO UPDATE SET
    name = EXCLUDED.name,
    company = EXCLUDED.company,
    enabled = EXCLUDED.enabled,
    updated_at = NOW()
RETURNING id
"""

_BULK_UPSERT_SQL = """
INSERT INTO scraper_sources (id, type, name, url, company, enabled)
SELECT * FROM unnest(
    $1::text[], $2::text[], $3::text[], $4::text[], $5::text[], $6::boolean[]
)
ON CONFLICT (type, url) DO UPDATE SET
    name = EXCLUDED.name,
    company = EXCLUDED.company,
    enabled = EXCLUDED.enabled,
    updated_at = NOW()
"""

_FIND_ENABLED_SQL = """
SELECT * FROM scraper_sources
WHERE enabled = TRUE
  AND type = ANY($1::text[])
  AND ($2::text[] IS NULL OR lower(company) = ANY($2::text[]))
ORDER BY type, name
"""


def _record_to_source(record) -> ScraperSource:
    """Convert an asyncpg Record to a ScraperSource dataclass."""
    return ScraperSource(
        id=record["id"],
        type=SourceType(record["type"]),
        name=record["name"],
        url=record["url"],
        company=record["company"],
        enabled=record["enabled"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


def _type_values(types: Iterable[SourceType | str]) -> list[str]:
    return [SourceType(t).value for t in types]


class SourcesRepository:
    """Read access for the pipeline plus the writes needed for seeding."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the scraper_sources table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("scraper_sources table ensured")

    async def find_enabled(
        self,
        types: Iterable[SourceType | str],
        companies: Iterable[str] | None = None,
    ) -> list[ScraperSource]:
        """
        Enabled sources of the given types, ordered by (type, name).

        Args:
            types: Source types to include
            companies: If given, only sources whose company matches one of
                these labels (case-insensitive)

        Returns:
            Matching sources; disabled sources are never returned
        """
        company_filter = (
            [c.strip().lower() for c in companies] if companies is not None else None
        )
        rows = await self._db.fetch(
            _FIND_ENABLED_SQL, _type_values(types), company_filter
        )
        return [_record_to_source(r) for r in rows]

    async def upsert(self, source: ScraperSource) -> str:
        """Insert or update a single source keyed by (type, url). Returns its id."""
        row = await self._db.fetchrow(
            _UPSERT_SQL,
            source.id,
            source.type.value,
            source.name,
            source.url,
            source.company,
            source.enabled,
        )
        return row["id"]

    async def bulk_upsert(self, sources: list[ScraperSource]) -> int:
        """Insert or update many sources in one statement.

        Returns the number of sources processed.
        """
        if not sources:
            return 0

        await self._db.execute(
            _BULK_UPSERT_SQL,
            [s.id for s in sources],
            [s.type.value for s in sources],
            [s.name for s in sources],
            [s.url for s in sources],
            [s.company for s in sources],
            [s.enabled for s in sources],
        )
        logger.info("Bulk upserted %d scraper sources", len(sources))
        return len(sources)

    async def list_sources(
        self,
        type: SourceType | str | None = None,
        enabled_only: bool = False,
    ) -> list[ScraperSource]:
        """All sources, optionally filtered by type and enabled flag."""
        conditions: list[str] = []
        params: list = []

        if enabled_only:
            conditions.append("enabled = TRUE")

        if type is not None:
            params.append(SourceType(type).value)
            conditions.append(f"type = ${len(params)}")

        where_clause = " WHERE " + " AND ".join(conditions) if conditions else ""
        rows = await self._db.fetch(
            f"SELECT * FROM scraper_sources{where_clause} ORDER BY type, name",
            *params,
        )
        return [_record_to_source(r) for r in rows]

    async def count(self, enabled_only: bool = False) -> int:
        """Count sources in the table."""
        if enabled_only:
            sql = "SELECT COUNT(*) FROM scraper_sources WHERE enabled = TRUE"
        else:
            sql = "SELECT COUNT(*) FROM scraper_sources"
        return await self._db.fetchval(sql) or 0
