"""Sources: database-backed registry of feeds the scrapers poll."""

from release_timeline.sources.config import SourcesConfig
from release_timeline.sources.repository import SourcesRepository
from release_timeline.sources.schemas import ScraperSource
from release_timeline.sources.service import SourcesService, load_seed_sources

__all__ = [
    "ScraperSource",
    "SourcesConfig",
    "SourcesRepository",
    "SourcesService",
    "load_seed_sources",
]
