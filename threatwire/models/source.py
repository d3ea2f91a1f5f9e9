from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Source:
    """A feed to ingest. ``url`` doubles as the classification key."""

    name: str
    url: str
