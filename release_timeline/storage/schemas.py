"""Row models for the releases and reviews tables."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import uuid4

from release_timeline.ingestion.schemas import ReleaseCategory, ReviewSource, Sentiment


def _new_id() -> str:
    return uuid4().hex


@dataclass
class Release:
    """A tracked AI model or tool.

    Identity is best-effort: a candidate is the same release as a stored row
    when the names are equal, or else when company and release_date are both
    equal. Only is_coding_related, domain and parameters change after creation.
    """

    name: str
    company: str
    category: ReleaseCategory
    release_date: date
    summary: str
    docs_url: str
    source_url: str
    features: list[str] = field(default_factory=list)
    pricing: str | None = None
    is_coding_related: bool = False
    domain: str | None = None
    parameters: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.category = ReleaseCategory(self.category)


@dataclass
class Review:
    """An external post or announcement attached to one release.

    (release_id, source_url) is the dedup key.
    """

    release_id: str
    source: ReviewSource
    author: str
    content: str
    sentiment: Sentiment
    source_url: str
    created_at: datetime | None = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        self.source = ReviewSource(self.source)
        self.sentiment = Sentiment(self.sentiment)

    @property
    def dedup_key(self) -> tuple[str, str]:
        """(release_id, source_url): at most one review exists per key."""
        return (self.release_id, self.source_url)
