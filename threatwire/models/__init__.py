"""Typed models used across the application."""

from .source import Source
from .article import (
    Article,
    CATEGORIES,
    CYBERSECURITY,
    DEFENSE,
    GENERAL,
    TECH,
    as_utc,
    format_rfc3339,
    utcnow,
)
from .threat import ThreatScore

__all__ = [
    "Source",
    "Article",
    "CATEGORIES",
    "CYBERSECURITY",
    "TECH",
    "DEFENSE",
    "GENERAL",
    "as_utc",
    "format_rfc3339",
    "utcnow",
    "ThreatScore",
]
