from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

import feedparser
import requests

from ..models import Source
from ..utils.logging import get_logger

logger = get_logger("tw.fetchers.rss")


class FeedError(Exception):
    """Raised when a feed cannot be fetched or parsed."""


@dataclass(slots=True)
class FeedItem:
    title: str
    link: str
    description: str
    published: Optional[datetime]
    image_url: str = ""


@dataclass(slots=True)
class ParsedFeed:
    items: List[FeedItem] = field(default_factory=list)
    # feed-level timestamp, used for items that carry none of their own
    published: Optional[datetime] = None


_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/108.0.0.0 Safari/537.36"
    )
}


def _parse_datetime(entry: Any) -> Optional[datetime]:
    # feedparser normalizes '*_parsed' values to UTC struct_time
    for key in ("published_parsed", "updated_parsed"):
        tm = entry.get(key)
        if tm:
            try:
                return datetime(*tm[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                return None
    return None


def _extract_image(entry: Any) -> str:
    for key in ("media_content", "media_thumbnail"):
        for media in entry.get(key) or []:
            url = media.get("url")
            medium = media.get("medium") or ""
            mime = media.get("type") or ""
            if url and (key == "media_thumbnail" or medium == "image" or mime.startswith("image/") or not (medium or mime)):
                return url
    for enclosure in entry.get("enclosures") or []:
        if (enclosure.get("type") or "").startswith("image/") and enclosure.get("href"):
            return enclosure["href"]
    image = entry.get("image")
    if isinstance(image, dict) and image.get("href"):
        return image["href"]
    return ""


def parse_feed(content: bytes | str) -> ParsedFeed:
    """Parse an RSS/Atom document into items.

    Raises ``FeedError`` when feedparser flags the document as broken and could
    not recover anything from it.
    """
    parsed = feedparser.parse(content)
    entries = getattr(parsed, "entries", []) or []
    feed_meta = getattr(parsed, "feed", {}) or {}
    if getattr(parsed, "bozo", False):
        if not entries and not feed_meta.get("title"):
            raise FeedError(f"Unparseable feed: {getattr(parsed, 'bozo_exception', None)}")
        # feedparser sets bozo on recoverable errors and still yields entries
        logger.debug("Feed 'bozo' flagged: %s", getattr(parsed, "bozo_exception", None))

    items: List[FeedItem] = []
    for entry in entries:
        items.append(
            FeedItem(
                title=entry.get("title") or "",
                link=(entry.get("link") or "").strip(),
                description=entry.get("summary") or entry.get("description") or "",
                published=_parse_datetime(entry),
                image_url=_extract_image(entry),
            )
        )
    return ParsedFeed(items=items, published=_parse_datetime(feed_meta))


def fetch_feed(
    source: Source,
    *,
    timeout: float = 10,
    session: requests.Session | None = None,
) -> ParsedFeed:
    """Fetch and parse a feed with a bounded timeout and a browser User-Agent.

    The network request is done with ``requests`` for consistent timeouts and
    headers; the body is then parsed by ``feedparser``. Any failure is raised as
    ``FeedError`` so callers only need to handle one exception type.
    """
    http = session or requests
    logger.debug("Fetching feed %s", source.url)
    try:
        resp = http.get(source.url, headers=_DEFAULT_HEADERS, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FeedError(f"Request failed for {source.url}: {exc}") from exc

    try:
        feed = parse_feed(resp.content)
    except FeedError as exc:
        raise FeedError(f"{source.url}: {exc}") from exc
    logger.info("Fetched %d entries from %s", len(feed.items), source.name)
    return feed
