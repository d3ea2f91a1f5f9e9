"""Derived views over stored articles."""

from .threat import (
    CODE_RED,
    ATTENTION,
    BUSINESS_AS_USUAL,
    NO_THREATS,
    ThreatAggregator,
    bucket_rank,
    summarize_ranks,
    threat_level,
)

__all__ = [
    "CODE_RED",
    "ATTENTION",
    "BUSINESS_AS_USUAL",
    "NO_THREATS",
    "ThreatAggregator",
    "bucket_rank",
    "summarize_ranks",
    "threat_level",
]
