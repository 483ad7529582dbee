"""Outcome of a scraper run."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ScrapeResult:
    """
    Counters and collected errors for one scraper run.

    added counts created releases or reviews, updated counts releases whose
    auxiliary fields were refreshed, and skipped counts records that were
    dropped for missing fields or because they already exist.
    """

    scraper: str
    added: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def merge(self, other: "ScrapeResult") -> "ScrapeResult":
        """Combine two results into a new one named after this result."""
        return ScrapeResult(
            scraper=self.scraper,
            added=self.added + other.added,
            updated=self.updated + other.updated,
            skipped=self.skipped + other.skipped,
            errors=[*self.errors, *other.errors],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "scraper": self.scraper,
            "added": self.added,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }
