"""Per-item processing: sanitizing, language filtering, classification, scoring."""

from .sanitize import strip_markup
from .classify import classify_source, default_sources
from .scoring import score_article
from .language import LanguageFilter

__all__ = [
    "strip_markup",
    "classify_source",
    "default_sources",
    "score_article",
    "LanguageFilter",
]
