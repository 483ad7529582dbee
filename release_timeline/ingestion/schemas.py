"""
Record schemas shared by the parsers and the scrapers.

Parsers turn raw feed text into these models; scrapers turn them into
Release / Review rows. Enum values are the exact strings stored in the
database, so do not rename them.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class SourceType(str, Enum):
    """Kinds of configured scraper sources."""

    REDDIT = "reddit"
    RSS = "rss"
    BLOG = "blog"
    CSV = "csv"


class ReviewSource(str, Enum):
    """Where a review was collected from."""

    REDDIT = "reddit"
    BLOG = "blog"
    YOUTUBE = "youtube"
    X = "x"


class Sentiment(str, Enum):
    """Review sentiment labels."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ReleaseCategory(str, Enum):
    """Whether a release is a base model or a product/tool built on one."""

    MODEL = "model"
    TOOL = "tool"


class FeedPost(BaseModel):
    """
    A single RSS item or Atom entry.

    Missing optional fields are empty strings; `title` and `link` are
    required by the parsers before a post is emitted.
    """

    title: str = Field(..., min_length=1)
    link: str = Field(..., min_length=1)
    content: str = Field(
        default="",
        description="Plain text body, HTML stripped and truncated",
    )
    author: str = ""
    published: datetime | None = Field(
        default=None,
        description="UTC publication time, None when missing or unparseable",
    )

    @field_validator("title", "link", "author")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @property
    def text(self) -> str:
        """Title and body joined, used for mention matching."""
        return f"{self.title} {self.content}"


class RedditPost(BaseModel):
    """A post from a Reddit search.json response."""

    author: str = Field(..., description="Rendered as u/<name>")
    title: str = ""
    content: str = Field(..., min_length=1, description="selftext, or title when empty")
    url: str = Field(..., description="Absolute permalink, the review dedup key")
    created_at: datetime | None = None

    @property
    def text(self) -> str:
        """Title and body joined, used for mention matching."""
        if self.title and self.title != self.content:
            return f"{self.title} {self.content}"
        return self.content
