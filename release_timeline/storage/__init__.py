"""Storage layer for releases and reviews.

TimelineRepository lives in release_timeline.storage.repository.
"""

from release_timeline.storage.database import Database, DatabaseUnavailable
from release_timeline.storage.schemas import Release, Review

__all__ = ["Database", "DatabaseUnavailable", "Release", "Review"]
