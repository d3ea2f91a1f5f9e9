from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True, slots=True)
class ThreatScore:
    """Rank distribution of the last 24 hours and the level derived from it."""

    low: int
    medium: int
    high: int
    total: int
    level: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "lowRankCount": self.low,
            "mediumRankCount": self.medium,
            "highRankCount": self.high,
            "totalArticles": self.total,
            "threatLevel": self.level,
        }
