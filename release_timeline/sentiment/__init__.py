"""Keyword-count sentiment for review text."""

from release_timeline.sentiment.keywords import (
    NEGATIVE_KEYWORDS,
    POSITIVE_KEYWORDS,
    classify_sentiment,
)

__all__ = ["NEGATIVE_KEYWORDS", "POSITIVE_KEYWORDS", "classify_sentiment"]
