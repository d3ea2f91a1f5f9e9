from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

CYBERSECURITY = "Cybersecurity"
TECH = "Tech"
DEFENSE = "Defense"
GENERAL = "General"

CATEGORIES = (CYBERSECURITY, TECH, DEFENSE, GENERAL)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # naive values are treated as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_rfc3339(value: datetime) -> str:
    return as_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(slots=True)
class Article:
    title: str
    description: str
    url: str
    source_url: str
    published_at: datetime = field(default_factory=utcnow)
    image_url: str = ""
    rank: int = 0
    category: str = GENERAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "imageUrl": self.image_url,
            "url": self.url,
            "sourceUrl": self.source_url,
            "publishedAt": format_rfc3339(self.published_at),
            "rank": self.rank,
            "category": self.category,
        }
