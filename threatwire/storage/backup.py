"""CSV export/import of the full article store.

Column order is fixed: Title, Description, ImageURL, URL, SourceURL,
PublishedAt (RFC3339), Rank, Category. The header row is mandatory.
"""

from __future__ import annotations

import csv
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, TextIO

from ..models import CATEGORIES, Article, as_utc, format_rfc3339
from ..utils.logging import get_logger
from .sqlite_store import ArticleStore

logger = get_logger("tw.storage.backup")

CSV_HEADER = ("Title", "Description", "ImageURL", "URL", "SourceURL", "PublishedAt", "Rank", "Category")


class BackupError(Exception):
    """Raised when a backup file cannot be used at all."""


@dataclass(slots=True)
class ImportReport:
    read: int = 0
    inserted: int = 0
    duplicates: int = 0
    skipped: int = 0
    failed: int = 0


def _article_row(article: Article) -> list:
    return [
        article.title,
        article.description,
        article.image_url,
        article.url,
        article.source_url,
        format_rfc3339(article.published_at),
        article.rank,
        article.category,
    ]


def export_csv(store: ArticleStore, fh: TextIO) -> int:
    """Write the header and every stored article to ``fh``; return the row count."""
    writer = csv.writer(fh)
    writer.writerow(CSV_HEADER)
    written = 0
    for article in store.stream_all():
        writer.writerow(_article_row(article))
        written += 1
    return written


def iter_csv_lines(store: ArticleStore) -> Iterator[str]:
    """Yield the export one CSV line at a time, for streaming responses."""

    class _Line:
        value = ""

        def write(self, text: str) -> None:
            self.value = text

    line = _Line()
    writer = csv.writer(line)
    writer.writerow(CSV_HEADER)
    yield line.value
    for article in store.stream_all():
        writer.writerow(_article_row(article))
        yield line.value


def export_csv_file(store: ArticleStore, path: str | Path) -> int:
    """Export to ``path`` atomically: a reader never sees a half-written backup."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=".articles-", suffix=".csv", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            written = export_csv(store, fh)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.info("Exported %d articles to %s", written, target)
    return written


def _parse_published(value: str) -> datetime:
    text = value.strip()
    # datetime.fromisoformat only accepts a trailing 'Z' from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    if "T" not in text and "t" not in text:
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")
    parsed = datetime.fromisoformat(text.replace("t", "T"))
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {value!r}")
    return as_utc(parsed)


def _record_to_article(record: list, line_no: int) -> Optional[Article]:
    if len(record) != len(CSV_HEADER):
        logger.warning("Skipping line %d: expected %d columns, got %d", line_no, len(CSV_HEADER), len(record))
        return None
    title, description, image_url, url, source_url, published_raw, rank_raw, category = record
    try:
        published_at = _parse_published(published_raw)
    except ValueError as exc:
        logger.warning("Skipping article %r (line %d): invalid date format: %s", title, line_no, exc)
        return None
    try:
        rank = int(rank_raw.strip())
    except ValueError as exc:
        logger.warning("Skipping article %r (line %d): invalid rank format: %s", title, line_no, exc)
        return None
    if rank < 0:
        logger.warning("Skipping article %r (line %d): negative rank %d", title, line_no, rank)
        return None
    if category not in CATEGORIES:
        logger.warning("Skipping article %r (line %d): unknown category %r", title, line_no, category)
        return None
    if not url:
        logger.warning("Skipping article %r (line %d): empty URL", title, line_no)
        return None
    return Article(
        title=title,
        description=description,
        image_url=image_url,
        url=url,
        source_url=source_url,
        published_at=published_at,
        rank=rank,
        category=category,
    )


def _valid_articles(reader, report: ImportReport) -> Iterator[Article]:
    while True:
        try:
            record = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            report.read += 1
            report.skipped += 1
            logger.warning("Skipping unreadable CSV record near line %d: %s", reader.line_num, exc)
            continue
        if not record:
            continue
        report.read += 1
        article = _record_to_article(record, reader.line_num)
        if article is None:
            report.skipped += 1
            continue
        yield article


def import_csv(store: ArticleStore, path: str | Path) -> ImportReport:
    """Load articles from a CSV backup with insert-if-absent semantics.

    The whole file is rejected (nothing inserted) when it cannot be opened or
    its header does not have exactly eight columns. Individual bad rows are
    logged and skipped. Importing the same file twice leaves the store as after
    the first import.
    """
    file_path = Path(path)
    report = ImportReport()
    try:
        fh = file_path.open("r", encoding="utf-8", newline="")
    except OSError as exc:
        raise BackupError(f"failed to open CSV file {file_path}: {exc}") from exc

    with fh:
        reader = csv.reader(fh)
        try:
            header = next(reader)
        except StopIteration:
            raise BackupError(f"failed to read CSV header: {file_path} is empty") from None
        except csv.Error as exc:
            raise BackupError(f"failed to read CSV header: {exc}") from exc
        if len(header) != len(CSV_HEADER):
            raise BackupError(f"invalid CSV header: expected {len(CSV_HEADER)} columns, got {len(header)}")

        report.inserted, report.duplicates, report.failed = store.insert_many_if_absent(_valid_articles(reader, report))

    logger.info(
        "Loaded %d articles from CSV file %s (duplicates=%d, skipped=%d, failed=%d)",
        report.inserted,
        file_path,
        report.duplicates,
        report.skipped,
        report.failed,
    )
    return report
