import unittest
from datetime import datetime, timedelta, timezone

from threatwire.analysis import ThreatAggregator
from threatwire.analysis.threat import (
    ATTENTION,
    BUSINESS_AS_USUAL,
    CODE_RED,
    NO_THREATS,
    bucket_rank,
    summarize_ranks,
    threat_level,
)

from .helpers import StoreTestCase, make_article

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestBuckets(unittest.TestCase):
    def test_boundaries(self):
        self.assertEqual(bucket_rank(0), "low")
        self.assertEqual(bucket_rank(1), "low")
        self.assertEqual(bucket_rank(2), "medium")
        self.assertEqual(bucket_rank(4), "medium")
        self.assertEqual(bucket_rank(5), "high")
        self.assertEqual(bucket_rank(40), "high")

    def test_levels(self):
        self.assertEqual(threat_level(0, 0, 0), NO_THREATS)
        self.assertEqual(threat_level(3, 1, 1), CODE_RED)
        self.assertEqual(threat_level(3, 1, 0), ATTENTION)
        self.assertEqual(threat_level(3, 0, 0), BUSINESS_AS_USUAL)

    def test_summarize(self):
        score = summarize_ranks([10, 5, 4, 2, 1, 0])
        self.assertEqual((score.low, score.medium, score.high, score.total), (2, 2, 2, 6))
        self.assertEqual(score.level, "Code Red")

    def test_to_dict(self):
        self.assertEqual(
            summarize_ranks([]).to_dict(),
            {
                "lowRankCount": 0,
                "mediumRankCount": 0,
                "highRankCount": 0,
                "totalArticles": 0,
                "threatLevel": "No Threats Reported",
            },
        )


class TestThreatAggregator(StoreTestCase):
    def setUp(self):
        super().setUp()
        self.aggregator = ThreatAggregator(self.store, clock=lambda: NOW)

    def add(self, url, rank, age):
        self.store.insert_if_absent(make_article(url, rank=rank, published_at=NOW - age))

    def test_empty_store(self):
        score = self.aggregator.today_threat_score()
        self.assertEqual(score.total, 0)
        self.assertEqual(score.level, NO_THREATS)

    def test_only_last_24_hours_count(self):
        for i, rank in enumerate([10, 5, 4, 2, 1, 0]):
            self.add(f"https://example.com/{i}", rank, timedelta(hours=i + 1))
        self.add("https://example.com/old", 20, timedelta(hours=30))

        score = self.aggregator.today_threat_score()
        self.assertEqual((score.low, score.medium, score.high, score.total), (2, 2, 2, 6))
        self.assertEqual(score.level, CODE_RED)

    def test_window_start_is_inclusive(self):
        self.add("https://example.com/edge", 3, timedelta(hours=24))
        self.add("https://example.com/outside", 3, timedelta(hours=24, seconds=1))
        score = self.aggregator.today_threat_score()
        self.assertEqual(score.total, 1)
        self.assertEqual(score.level, ATTENTION)

    def test_sub_second_clock_excludes_older_articles(self):
        now = datetime(2024, 6, 2, 12, 0, 0, 700000, tzinfo=timezone.utc)
        aggregator = ThreatAggregator(self.store, clock=lambda: now)
        self.store.insert_if_absent(
            make_article("https://example.com/stale", rank=7, published_at=datetime(2024, 6, 1, 12, 0, 0, 200000, tzinfo=timezone.utc))
        )
        self.assertEqual(aggregator.today_threat_score().total, 0)

    def test_only_low_ranks(self):
        self.add("https://example.com/a", 0, timedelta(hours=1))
        self.add("https://example.com/b", 1, timedelta(hours=2))
        self.assertEqual(self.aggregator.today_threat_score().level, BUSINESS_AS_USUAL)


if __name__ == "__main__":
    unittest.main()
