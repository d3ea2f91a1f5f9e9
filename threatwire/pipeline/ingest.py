"""Concurrent feed ingestion with a single serialized writer.

One fetch worker per source parses its feed and turns accepted items into
ranked articles. Workers hand articles to a bounded queue; exactly one writer
thread drains it and performs every insert of the run, so the store never sees
concurrent writes from ingestion.
"""

from __future__ import annotations

import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Sequence

from ..fetchers import FeedError, FeedItem, ParsedFeed, fetch_feed
from ..models import Article, Source, utcnow
from ..processors import classify_source, score_article, strip_markup
from ..storage import ArticleStore, StoreError
from ..utils.logging import get_logger

logger = get_logger("tw.pipeline.ingest")

_DONE = object()


class LanguageCheck(Protocol):
    def is_accepted(self, text: str) -> bool: ...


FetchFn = Callable[..., ParsedFeed]


@dataclass(slots=True)
class RunReport:
    sources: int = 0
    failed_sources: List[str] = field(default_factory=list)
    fetched: int = 0
    skipped_language: int = 0
    skipped_invalid: int = 0
    queued: int = 0
    inserted: int = 0
    duplicates: int = 0
    write_errors: int = 0
    duration: float = 0.0


class _Counters:
    """Worker-side tallies, merged into the report under a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.fetched = 0
        self.skipped_language = 0
        self.skipped_invalid = 0
        self.queued = 0
        self.failed: List[str] = []

    def add(self, *, fetched: int = 0, skipped_language: int = 0, skipped_invalid: int = 0, queued: int = 0) -> None:
        with self._lock:
            self.fetched += fetched
            self.skipped_language += skipped_language
            self.skipped_invalid += skipped_invalid
            self.queued += queued

    def fail(self, url: str) -> None:
        with self._lock:
            self.failed.append(url)


def build_article(
    item: FeedItem,
    source: Source,
    *,
    feed_published: Optional[datetime],
    now: datetime,
) -> Article:
    """Turn an accepted feed item into a classified, ranked article.

    Only the description is sanitized; the title is stored as the feed gave it.
    """
    category = classify_source(source.url)
    description = strip_markup(item.description)
    article = Article(
        title=item.title,
        description=description,
        url=item.link,
        source_url=source.url,
        published_at=item.published or feed_published or now,
        image_url=item.image_url or "",
        category=category,
    )
    article.rank = score_article(category, article.title, article.description)
    return article


class IngestionPipeline:
    """Fetch every source in parallel and persist accepted items.

    ``run_once`` is synchronous: it returns only after all workers have
    finished and the writer has drained the queue.
    """

    def __init__(
        self,
        sources: Sequence[Source],
        store: ArticleStore,
        language_filter: LanguageCheck,
        *,
        fetch: FetchFn = fetch_feed,
        timeout: float = 10,
        queue_size: int = 100,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.sources = list(sources)
        self.store = store
        self.language_filter = language_filter
        self.fetch = fetch
        self.timeout = timeout
        self.queue_size = queue_size
        self.clock = clock

    # ---------------- Writer -----------------
    def _drain(self, articles: "queue.Queue[object]", report: RunReport) -> None:
        while True:
            article = articles.get()
            try:
                if article is _DONE:
                    return
                try:
                    if self.store.insert_if_absent(article):
                        report.inserted += 1
                    else:
                        report.duplicates += 1
                except StoreError as exc:
                    report.write_errors += 1
                    logger.error("Error inserting article %s: %s", getattr(article, "url", "?"), exc)
                except Exception as exc:  # noqa: BLE001 - the writer must keep draining or workers block
                    report.write_errors += 1
                    logger.exception("Unexpected error inserting article %s: %s", getattr(article, "url", "?"), exc)
            finally:
                articles.task_done()

    # ---------------- Workers -----------------
    def _ingest_source(self, source: Source, articles: "queue.Queue[object]", counters: _Counters) -> None:
        try:
            feed = self.fetch(source, timeout=self.timeout)
        except FeedError as exc:
            counters.fail(source.url)
            logger.warning("Error parsing feed from %s: %s", source.url, exc)
            return
        except Exception as exc:  # noqa: BLE001 - one broken source must not end the run
            counters.fail(source.url)
            logger.exception("Unexpected error fetching %s: %s", source.url, exc)
            return

        counters.add(fetched=len(feed.items))
        for item in feed.items:
            if not item.link:
                counters.add(skipped_invalid=1)
                logger.debug("Skipping item without link from %s: %s", source.url, item.title)
                continue
            if not self.language_filter.is_accepted(f"{item.title} {item.description}"):
                counters.add(skipped_language=1)
                logger.debug("Skipping non-English article: %s (Source: %s)", item.title, source.url)
                continue
            article = build_article(item, source, feed_published=feed.published, now=self.clock())
            articles.put(article)  # blocks while the writer is behind
            counters.add(queued=1)

    # ---------------- Run -----------------
    def run_once(self) -> RunReport:
        started = time.perf_counter()
        report = RunReport(sources=len(self.sources))
        if not self.sources:
            logger.info("No sources configured; nothing to ingest")
            return report

        articles: "queue.Queue[object]" = queue.Queue(maxsize=self.queue_size)
        counters = _Counters()
        writer = threading.Thread(target=self._drain, args=(articles, report), name="tw-writer", daemon=True)
        writer.start()

        logger.info("Fetching %d sources", len(self.sources))
        try:
            with ThreadPoolExecutor(max_workers=len(self.sources), thread_name_prefix="tw-fetch") as executor:
                future_map = {
                    executor.submit(self._ingest_source, s, articles, counters): s for s in self.sources
                }
                for fut in as_completed(future_map):
                    s = future_map[fut]
                    try:
                        fut.result()
                    except Exception as exc:  # noqa: BLE001 - isolate item-processing bugs to their source
                        counters.fail(s.url)
                        logger.exception("Ingestion failed for %s: %s", s.url, exc)
        finally:
            # Draining: every worker is done, so the sentinel lands after the last article
            articles.put(_DONE)
            writer.join()

        report.failed_sources = list(counters.failed)
        report.fetched = counters.fetched
        report.skipped_language = counters.skipped_language
        report.skipped_invalid = counters.skipped_invalid
        report.queued = counters.queued
        report.duration = time.perf_counter() - started
        logger.info(
            "News caching job completed: sources=%d, failed=%d, fetched=%d, skipped_language=%d, inserted=%d, duplicates=%d, write_errors=%d, duration=%.1fs",
            report.sources,
            len(report.failed_sources),
            report.fetched,
            report.skipped_language,
            report.inserted,
            report.duplicates,
            report.write_errors,
            report.duration,
        )
        return report
