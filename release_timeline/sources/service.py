"""Seeding and lookups for the scraper source registry."""

import json
import logging
from pathlib import Path

from release_timeline.sources.config import SourcesConfig
from release_timeline.sources.repository import SourcesRepository
from release_timeline.sources.schemas import ScraperSource
from release_timeline.storage.database import Database

logger = logging.getLogger(__name__)

_SEED_FILE = Path(__file__).parent / "data" / "seed_sources.json"


def _parse_seed_entry(entry: dict) -> ScraperSource:
    """Convert a JSON seed entry to a ScraperSource dataclass."""
    return ScraperSource(
        type=entry["type"],
        name=entry["name"],
        url=entry["url"],
        company=entry.get("company"),
        enabled=entry.get("enabled", True),
    )


def load_seed_sources(path: Path | None = None) -> list[ScraperSource]:
    """Read and validate a seed file without touching the database.

    Raises:
        KeyError / ValueError: On an entry with a missing field or unknown type
    """
    seed_path = path or _SEED_FILE
    with open(seed_path, encoding="utf-8") as f:
        entries = json.load(f)
    return [_parse_seed_entry(e) for e in entries]


class SourcesService:
    """Populates the registry from a JSON seed list."""

    def __init__(
        self,
        database: Database,
        config: SourcesConfig | None = None,
    ) -> None:
        self._config = config or SourcesConfig()
        self._repo = SourcesRepository(database)

    @property
    def repository(self) -> SourcesRepository:
        """Access the underlying repository for direct DB operations."""
        return self._repo

    async def seed_from_json(self, path: Path | None = None) -> int:
        """Upsert sources from a JSON file, keyed by (type, url).

        Re-seeding updates names, companies and enabled flags in place.
        Returns the number of sources upserted.
        """
        seed_path = path or self._config.seed_path or _SEED_FILE
        sources = load_seed_sources(seed_path)
        count = await self._repo.bulk_upsert(sources)
        logger.info("Seeded %d scraper sources from %s", count, seed_path)
        return count

    async def ensure_seeded(self) -> int:
        """Seed from the default file if the table is empty and seed_on_init is set.

        Returns the number of sources upserted (0 when skipped).
        """
        if not self._config.seed_on_init:
            return 0

        existing = await self._repo.count()
        if existing > 0:
            logger.debug("scraper_sources has %d rows, skipping seed", existing)
            return 0

        logger.info("scraper_sources empty, seeding from default JSON")
        return await self.seed_from_json()
