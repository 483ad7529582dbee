"""Data models for the scraper source registry."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from release_timeline.ingestion.schemas import SourceType


@dataclass
class ScraperSource:
    """One external feed to poll: a subreddit, an RSS/Atom feed or a CSV dataset.

    Uniquely identified by (type, url). The pipeline only reads these rows;
    sources with enabled=False are never fetched.
    """

    type: SourceType
    name: str
    url: str
    company: str | None = None
    enabled: bool = True
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.type = SourceType(self.type)
        self.url = self.url.strip()

    @property
    def label(self) -> str:
        """Company label used for matching and attribution, falling back to the name."""
        return self.company or self.name
