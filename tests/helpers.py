from __future__ import annotations

import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from threatwire.models import Article
from threatwire.storage import ArticleStore


def make_article(url: str, *, rank: int = 0, hours_ago: float = 1, **overrides) -> Article:
    fields = {
        "title": f"title {url}",
        "description": f"description {url}",
        "url": url,
        "source_url": "https://source.example.com/feed",
        "published_at": datetime.now(timezone.utc).replace(microsecond=0) - timedelta(hours=hours_ago),
        "rank": rank,
        "category": "Cybersecurity",
    }
    fields.update(overrides)
    return Article(**fields)


class StoreTestCase(unittest.TestCase):
    """Gives each test a fresh SQLite file in a temporary directory."""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp(prefix="threatwire-test-"))
        self.store = ArticleStore(self.tmpdir / "news.db")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)
