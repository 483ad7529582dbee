"""
Keyword-count sentiment for review text.

Counts how many positive and negative terms occur in the lower-cased text
and labels it by whichever side has more hits. Each term counts once no
matter how often it appears.

Usage:
    from release_timeline.sentiment.keywords import classify_sentiment

    classify_sentiment("Great model, really impressive")  # Sentiment.POSITIVE
    classify_sentiment("Fast but poor docs")              # Sentiment.NEUTRAL

By default terms match as plain substrings, so "bad" also matches "badge".
With word_boundary=True a term must start and end on a word boundary.
"""

import re
from functools import lru_cache

from release_timeline.ingestion.schemas import Sentiment

POSITIVE_KEYWORDS: tuple[str, ...] = (
    "amazing",
    "great",
    "excellent",
    "love",
    "impressive",
    "fast",
    "good",
    "better",
    "best",
    "fantastic",
    "awesome",
    "incredible",
    "wonderful",
    "useful",
    "helpful",
    "game changer",
    "game-changer",
)

NEGATIVE_KEYWORDS: tuple[str, ...] = (
    "bad",
    "terrible",
    "awful",
    "slow",
    "broken",
    "disappointing",
    "worse",
    "worst",
    "useless",
    "poor",
    "frustrating",
    "annoying",
    "bug",
    "buggy",
    "crash",
    "fail",
    "doesn't work",
    "sucks",
)


@lru_cache(maxsize=None)
def _boundary_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}\b")


def count_keywords(
    text: str,
    keywords: tuple[str, ...],
    word_boundary: bool = False,
) -> int:
    """
    Count how many of `keywords` occur in `text`.

    Args:
        text: Text to scan
        keywords: Lower-case terms
        word_boundary: Require whole-word matches instead of substrings

    Returns:
        Number of distinct terms found
    """
    lowered = text.lower()
    if word_boundary:
        return sum(1 for kw in keywords if _boundary_pattern(kw).search(lowered))
    return sum(1 for kw in keywords if kw in lowered)


def classify_sentiment(text: str, word_boundary: bool = False) -> Sentiment:
    """
    Label text positive, negative or neutral.

    Ties, including texts with no keywords at all, are neutral.
    """
    positive = count_keywords(text, POSITIVE_KEYWORDS, word_boundary)
    negative = count_keywords(text, NEGATIVE_KEYWORDS, word_boundary)

    if positive > negative:
        return Sentiment.POSITIVE
    if negative > positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
