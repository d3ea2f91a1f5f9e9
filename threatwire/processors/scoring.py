"""Keyword relevance ranking.

Every keyword of the category's table that occurs anywhere in the lowercased
``title + " " + description`` adds its weight once. Overlapping keywords count
independently, so "ransomware attack" also scores "ransomware" and "attack".
"""

from __future__ import annotations

from typing import Dict, Mapping

from ..models import CYBERSECURITY, TECH

HIGH = 5
MEDIUM = 3
LOW = 1


def _tiers(high=(), medium=(), low=()) -> Dict[str, int]:
    table: Dict[str, int] = {}
    for weight, words in ((HIGH, high), (MEDIUM, medium), (LOW, low)):
        for word in words:
            table[word] = weight
    return table


CYBERSECURITY_KEYWORDS = _tiers(
    high=(
        "zero-day",
        "exploit in the wild",
        "active attack",
        "critical vulnerability",
        "alert",
        "warning",
        "patch now",
        "ransomware attack",
        "breach confirmed",
    ),
    medium=(
        "vulnerability",
        "exploit",
        "breach",
        "attack",
        "malware",
        "ransomware",
        "phishing",
        "threat",
        "advisory",
    ),
    low=(
        "security",
        "cybersecurity",
        "data",
        "privacy",
        "risk",
        "compliance",
        "encryption",
        "patch",
    ),
)

TECH_KEYWORDS = _tiers(
    high=(
        "ai",
        "artificial intelligence",
        "quantum computing",
        "breakthrough",
        "major update",
        "new chip",
        "innovation",
        "future of tech",
    ),
    medium=(
        "startup",
        "funding",
        "acquisition",
        "cloud",
        "5g",
        "machine learning",
        "data science",
        "web3",
        "metaverse",
        "robotics",
    ),
    low=(
        "review",
        "gadget",
        "app",
        "software",
        "hardware",
        "update",
        "guide",
        "tips",
    ),
)

GENERIC_KEYWORDS = _tiers(low=("news", "update", "report"))

_TABLES: Mapping[str, Mapping[str, int]] = {
    CYBERSECURITY: CYBERSECURITY_KEYWORDS,
    TECH: TECH_KEYWORDS,
}


def keywords_for(category: str) -> Mapping[str, int]:
    return _TABLES.get(category, GENERIC_KEYWORDS)


def score_article(category: str, title: str, description: str) -> int:
    content = f"{title or ''} {description or ''}".lower()
    return sum(weight for keyword, weight in keywords_for(category).items() if keyword in content)
