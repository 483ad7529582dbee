"""
Pure parsers from raw feed text to records.

- parse_csv: catalog CSV -> list of header->value mappings
- parse_rss_items / parse_atom_entries / parse_feed: RSS 2.0 and Atom -> FeedPost
- parse_reddit_search: Reddit search.json payload -> RedditPost
- parse_nitter_search: Nitter search RSS -> FeedPost with X author/URL

None of these perform I/O. A record missing a required field is dropped on
its own; the rest of the feed is still returned.
"""

import csv
import html
import logging
import re
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any

import feedparser
from bs4 import BeautifulSoup

from release_timeline.ingestion.schemas import FeedPost, RedditPost

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_MAX_CHARS = 2000
REDDIT_BASE_URL = "https://reddit.com"
X_BASE_URL = "https://x.com"

_HOST_PATTERN = re.compile(r"^https?://[^/]+")
_TITLE_AUTHOR_PATTERN = re.compile(r"^([^:]+):")


# ── CSV ─────────────────────────────────────────────────────

# A quoted field may span at most this many physical lines
MAX_RECORD_LINES = 20


def _csv_records(text: str) -> Iterator[str]:
    """
    Split CSV text into logical records.

    Physical lines are joined while a quoted field is still open. A record
    whose quote is not closed within MAX_RECORD_LINES lines is dropped and
    scanning resumes on the line after its first one, so one bad row never
    swallows the rows behind it.
    """
    lines = [line.rstrip("\r") for line in text.split("\n")]
    i = 0
    while i < len(lines):
        end = i
        record = lines[i]
        while record.count('"') % 2 and end + 1 < len(lines) and end - i + 1 < MAX_RECORD_LINES:
            end += 1
            record = f"{record}\n{lines[end]}"

        if record.count('"') % 2:
            logger.debug(f"Skipping CSV line {i + 1} with an unterminated quote")
            i += 1
            continue

        yield record
        i = end + 1


def parse_csv(text: str) -> list[dict[str, str]]:
    """
    Parse CSV text whose first non-blank line is the header row.

    Quoted fields may contain commas, newlines and doubled quotes. Fields are
    whitespace-trimmed. Rows shorter than the header are padded with empty
    strings; extra trailing values are ignored. A row with an unterminated
    quote or an oversized field is dropped on its own.

    Args:
        text: Raw CSV document

    Returns:
        One mapping per data row, keyed by header name
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    headers: list[str] | None = None
    records: list[dict[str, str]] = []

    for raw in _csv_records(text):
        try:
            row = next(csv.reader([raw], skipinitialspace=True), [])
        except csv.Error as e:
            logger.debug(f"Skipping malformed CSV record: {e}")
            continue

        if not any(value.strip() for value in row):
            continue

        values = [value.strip() for value in row]
        if headers is None:
            headers = values
            continue

        if len(values) < len(headers):
            values.extend([""] * (len(headers) - len(values)))

        records.append(dict(zip(headers, values)))

    return records


# ── RSS / Atom ──────────────────────────────────────────────


def strip_html(value: str) -> str:
    """
    Reduce an HTML fragment to plain text.

    Args:
        value: HTML or plain text

    Returns:
        Text with tags removed, entities decoded and whitespace collapsed
    """
    if not value:
        return ""

    if "<" in value or "&" in value:
        soup = BeautifulSoup(value, "html.parser")
        for element in soup(["script", "style"]):
            element.decompose()
        value = html.unescape(soup.get_text(separator=" "))

    return " ".join(value.split())


def _entry_datetime(entry: Any, *fields: str) -> datetime | None:
    """First parseable timestamp among the given feedparser fields, in UTC."""
    for name in fields:
        parsed = entry.get(f"{name}_parsed")
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return None


def _entry_content(entry: Any) -> str:
    """Value of the first content block, e.g. content:encoded or Atom <content>."""
    for block in entry.get("content") or []:
        value = block.get("value", "")
        if value:
            return value
    return ""


def _feed_kind(parsed: Any, text: str) -> str:
    """Return "rss", "atom" or "" for a feedparser result."""
    version = parsed.get("version", "") or ""
    if version.startswith("rss"):
        return "rss"
    if version.startswith("atom"):
        return "atom"

    # Malformed documents may lose their version but still yield entries
    if "<item" in text:
        return "rss"
    if "<entry" in text:
        return "atom"
    return ""


def _build_post(
    entry: Any,
    body: str,
    published: datetime | None,
    max_chars: int,
) -> FeedPost | None:
    title = strip_html(entry.get("title", "") or "")
    link = (entry.get("link", "") or "").strip()

    if not title or not link:
        logger.debug(f"Skipping feed entry without title or link: {title!r}")
        return None

    return FeedPost(
        title=title,
        link=link,
        content=strip_html(body)[:max_chars],
        author=(entry.get("author", "") or "").strip(),
        published=published,
    )


def _rss_posts(parsed: Any, max_chars: int) -> list[FeedPost]:
    posts = []
    for entry in parsed.entries:
        # description (CDATA or plain), then content:encoded
        body = entry.get("summary", "") or _entry_content(entry)
        published = _entry_datetime(entry, "published", "updated")
        post = _build_post(entry, body, published, max_chars)
        if post is not None:
            posts.append(post)
    return posts


def _atom_posts(parsed: Any, max_chars: int) -> list[FeedPost]:
    posts = []
    for entry in parsed.entries:
        # <content>, then <summary>
        body = _entry_content(entry) or entry.get("summary", "")
        published = _entry_datetime(entry, "published", "updated")
        post = _build_post(entry, body, published, max_chars)
        if post is not None:
            posts.append(post)
    return posts


def _parse_document(text: str) -> tuple[Any, str]:
    if not text or not text.strip():
        return None, ""
    parsed = feedparser.parse(text)
    if parsed.get("bozo"):
        logger.debug(f"Feed is not well-formed: {parsed.get('bozo_exception')}")
    return parsed, _feed_kind(parsed, text)


def parse_rss_items(
    text: str,
    max_chars: int = DEFAULT_CONTENT_MAX_CHARS,
) -> list[FeedPost]:
    """
    Extract posts from the <item> elements of an RSS feed.

    Args:
        text: Raw feed XML
        max_chars: Maximum length of each post's plain-text content

    Returns:
        Posts in feed order; empty if the document is not RSS
    """
    parsed, kind = _parse_document(text)
    if kind != "rss":
        return []
    return _rss_posts(parsed, max_chars)


def parse_atom_entries(
    text: str,
    max_chars: int = DEFAULT_CONTENT_MAX_CHARS,
) -> list[FeedPost]:
    """
    Extract posts from the <entry> elements of an Atom feed.

    Args:
        text: Raw feed XML
        max_chars: Maximum length of each post's plain-text content

    Returns:
        Posts in feed order; empty if the document is not Atom
    """
    parsed, kind = _parse_document(text)
    if kind != "atom":
        return []
    return _atom_posts(parsed, max_chars)


def parse_feed(
    text: str,
    max_chars: int = DEFAULT_CONTENT_MAX_CHARS,
) -> list[FeedPost]:
    """
    Parse a feed of unknown format: RSS items first, Atom entries if none.

    Args:
        text: Raw feed XML
        max_chars: Maximum length of each post's plain-text content

    Returns:
        Posts in feed order
    """
    parsed, kind = _parse_document(text)
    if parsed is None:
        return []

    posts = _rss_posts(parsed, max_chars) if kind == "rss" else []
    if not posts and kind in ("atom", ""):
        posts = _atom_posts(parsed, max_chars)
    return posts


# ── Search results ──────────────────────────────────────────


def parse_reddit_search(
    payload: Any,
    min_content_chars: int = 50,
) -> list[RedditPost]:
    """
    Extract posts from a Reddit search.json payload.

    Content is the post's selftext, or its title for link posts. Posts whose
    content is not longer than `min_content_chars` are dropped as too short
    to be a useful review.

    Args:
        payload: Decoded JSON of shape {"data": {"children": [{"data": {...}}]}}
        min_content_chars: Length a post's content must exceed

    Returns:
        Posts in result order
    """
    if not isinstance(payload, dict):
        return []

    children = (payload.get("data") or {}).get("children") or []
    posts = []

    for child in children:
        data = child.get("data") if isinstance(child, dict) else None
        if not isinstance(data, dict):
            continue

        title = (data.get("title") or "").strip()
        content = (data.get("selftext") or "").strip() or title
        if len(content) <= min_content_chars:
            continue

        permalink = data.get("permalink") or ""
        if not permalink:
            continue

        created_at = None
        created_utc = data.get("created_utc")
        if created_utc is not None:
            try:
                created_at = datetime.fromtimestamp(float(created_utc), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError):
                created_at = None

        posts.append(
            RedditPost(
                author=f"u/{data.get('author') or '[deleted]'}",
                title=title,
                content=content,
                url=f"{REDDIT_BASE_URL}{permalink}",
                created_at=created_at,
            )
        )

    return posts


def _nitter_author(post: FeedPost) -> str:
    name = post.author.strip()
    if not name:
        match = _TITLE_AUTHOR_PATTERN.match(post.title)
        name = match.group(1).strip() if match else ""
    if not name:
        return "Unknown"
    return f"@{name.lstrip('@')}"


def parse_nitter_search(
    text: str,
    min_content_chars: int = 30,
    max_chars: int = DEFAULT_CONTENT_MAX_CHARS,
    limit: int | None = None,
) -> list[FeedPost]:
    """
    Extract tweets from a Nitter search RSS feed.

    Links are rewritten from the Nitter instance host to x.com so the same
    tweet found through different instances shares one dedup key.

    Args:
        text: Raw RSS XML from <instance>/search/rss
        min_content_chars: Length a tweet's text must exceed
        max_chars: Maximum length of each tweet's text
        limit: Only the first `limit` items are considered, before the
            length filter drops short ones

    Returns:
        Tweets as FeedPost with author "@name" and an x.com link
    """
    tweets = []
    for post in parse_rss_items(text, max_chars=max_chars)[:limit]:
        if len(post.content) <= min_content_chars:
            continue

        tweets.append(
            post.model_copy(
                update={
                    "author": _nitter_author(post),
                    "link": _HOST_PATTERN.sub(X_BASE_URL, post.link, count=1),
                }
            )
        )

    return tweets
