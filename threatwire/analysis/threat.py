from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Iterable

from ..models import ThreatScore, utcnow
from ..storage import ArticleStore

LOW = "low"
MEDIUM = "medium"
HIGH = "high"

NO_THREATS = "No Threats Reported"
CODE_RED = "Code Red"
ATTENTION = "Attention"
BUSINESS_AS_USUAL = "Business as Usual"

MEDIUM_MIN_RANK = 2
HIGH_MIN_RANK = 5
WINDOW = timedelta(hours=24)


def bucket_rank(rank: int) -> str:
    if rank < MEDIUM_MIN_RANK:
        return LOW
    if rank < HIGH_MIN_RANK:
        return MEDIUM
    return HIGH


def threat_level(low: int, medium: int, high: int) -> str:
    # precedence: empty window, then the worst bucket present
    if low + medium + high == 0:
        return NO_THREATS
    if high > 0:
        return CODE_RED
    if medium > 0:
        return ATTENTION
    return BUSINESS_AS_USUAL


def summarize_ranks(ranks: Iterable[int]) -> ThreatScore:
    counts = {LOW: 0, MEDIUM: 0, HIGH: 0}
    for rank in ranks:
        counts[bucket_rank(rank)] += 1
    low, medium, high = counts[LOW], counts[MEDIUM], counts[HIGH]
    return ThreatScore(
        low=low,
        medium=medium,
        high=high,
        total=low + medium + high,
        level=threat_level(low, medium, high),
    )


class ThreatAggregator:
    """Threat level over articles published in the trailing 24 hours.

    Reads are not transactional with ingestion: a score computed during a run
    reflects whatever inserts were committed when the scan ran.
    """

    def __init__(self, store: ArticleStore, *, clock: Callable[[], datetime] = utcnow) -> None:
        self.store = store
        self.clock = clock

    def today_threat_score(self) -> ThreatScore:
        cutoff = self.clock() - WINDOW
        return summarize_ranks(self.store.ranks_since(cutoff))
