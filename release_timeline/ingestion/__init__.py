"""Feed ingestion: fetching, parsing, matching and pacing."""

from release_timeline.ingestion.schemas import (
    FeedPost,
    RedditPost,
    ReleaseCategory,
    ReviewSource,
    Sentiment,
    SourceType,
)

__all__ = [
    "FeedPost",
    "RedditPost",
    "ReleaseCategory",
    "ReviewSource",
    "Sentiment",
    "SourceType",
]
