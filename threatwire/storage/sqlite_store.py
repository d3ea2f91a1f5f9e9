"""SQLite-backed article store.

Connections are opened per operation. The journal runs in WAL mode so readers
(queries, threat aggregation, CSV export) never block on, or observe a partial
write from, the ingestion writer.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from ..models import Article, as_utc
from ..utils.logging import get_logger

logger = get_logger("tw.storage")

# UTC, fixed width: lexical order equals chronological order
_DB_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_COLUMNS = "title, description, imageUrl, url, sourceUrl, publishedAt, rank, category"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS articles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    imageUrl TEXT,
    url TEXT NOT NULL UNIQUE,
    sourceUrl TEXT NOT NULL,
    publishedAt DATETIME DEFAULT CURRENT_TIMESTAMP,
    rank INTEGER DEFAULT 0,
    category TEXT DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_sourceUrl ON articles (sourceUrl);
CREATE INDEX IF NOT EXISTS idx_publishedAt ON articles (publishedAt);
"""

_INSERT_SQL = f"INSERT OR IGNORE INTO articles({_COLUMNS}) VALUES(?, ?, ?, ?, ?, ?, ?, ?)"

# rows per commit during bulk inserts
_BATCH_SIZE = 500

SORT_RANK = "rank"
SORT_RECENCY = "recency"


class StoreError(Exception):
    """Raised when the article store cannot be opened or queried."""


def to_db_time(value: datetime) -> str:
    return as_utc(value).strftime(_DB_TIME_FORMAT)


def from_db_time(value: str) -> datetime:
    # tolerate fractional seconds / 'T' separators written by other tools
    text = str(value).replace("T", " ").rstrip("Z")
    try:
        parsed = datetime.strptime(text[:19], _DB_TIME_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(text)
    return as_utc(parsed)


def _py_lower(value):
    # SQLite LOWER() only folds ASCII
    return value.lower() if isinstance(value, str) else value


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_article(row: sqlite3.Row) -> Article:
    return Article(
        title=row["title"],
        description=row["description"] or "",
        image_url=row["imageUrl"] or "",
        url=row["url"],
        source_url=row["sourceUrl"],
        published_at=from_db_time(row["publishedAt"]),
        rank=int(row["rank"] or 0),
        category=row["category"] or "",
    )


def _article_params(article: Article) -> tuple:
    return (
        article.title,
        article.description,
        article.image_url,
        article.url,
        article.source_url,
        to_db_time(article.published_at),
        article.rank,
        article.category,
    )


@dataclass(slots=True)
class ArticleQuery:
    """Filters for ``ArticleStore.query``.

    ``source`` and ``category`` accept ``""`` or ``"all"`` as "no filter".
    ``search`` matches title or description, case-insensitively. ``start`` and
    ``end`` are inclusive. ``limit`` <= 0 means unlimited.
    """

    source: str = ""
    category: str = ""
    search: str = ""
    limit: int = 0
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    sort_by: str = SORT_RECENCY

    def to_sql(self) -> Tuple[str, list]:
        sql = f"SELECT {_COLUMNS} FROM articles"
        where: List[str] = []
        params: list = []

        if self.source and self.source != "all":
            where.append("sourceUrl = ?")
            params.append(self.source)
        if self.category and self.category != "all":
            where.append("category = ?")
            params.append(self.category)
        if self.search:
            pattern = "%" + _escape_like(self.search.lower()) + "%"
            where.append("(py_lower(title) LIKE ? ESCAPE '\\' OR py_lower(description) LIKE ? ESCAPE '\\')")
            params.extend([pattern, pattern])
        if self.start is not None:
            where.append("publishedAt >= ?")
            params.append(to_db_time(self.start))
        if self.end is not None:
            where.append("publishedAt <= ?")
            params.append(to_db_time(self.end))

        if where:
            sql += " WHERE " + " AND ".join(where)
        if self.sort_by == SORT_RANK:
            sql += " ORDER BY rank DESC, publishedAt DESC"
        else:
            sql += " ORDER BY publishedAt DESC"
        if self.limit and self.limit > 0:
            sql += " LIMIT ?"
            params.append(int(self.limit))
        return sql, params


class ArticleStore:
    """Durable article collection keyed by unique URL.

    Only insert-if-absent, read, and full clear exist; stored articles are never
    updated.
    """

    def __init__(self, db_path: str | Path = "./news.db", *, timeout: float = 30.0) -> None:
        self.db_path = str(db_path)
        self.timeout = timeout
        if self.db_path == ":memory:":
            # each operation opens its own connection, which would see an empty database
            raise StoreError("in-memory databases are not supported; use a file path")
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot create database directory for {self.db_path}: {exc}") from exc
        try:
            with self.get_connection() as conn:
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.executescript(_SCHEMA)
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to initialize database at {self.db_path}: {exc}") from exc
        logger.info("Article store ready at %s", self.db_path)

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to open database at {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        conn.create_function("py_lower", 1, _py_lower, deterministic=True)
        try:
            conn.execute("PRAGMA synchronous=NORMAL;")
            yield conn
        finally:
            conn.close()

    # ---------------- Writes -----------------
    def insert_if_absent(self, article: Article) -> bool:
        """Insert ``article``; return False if its URL is already stored."""
        try:
            with self.get_connection() as conn:
                cur = conn.execute(_INSERT_SQL, _article_params(article))
                conn.commit()
                return cur.rowcount == 1
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to insert article {article.url}: {exc}") from exc

    def insert_many_if_absent(self, articles: Iterable[Article]) -> Tuple[int, int, int]:
        """Insert-if-absent for many articles on one connection.

        A row the database refuses is logged and counted, and the rest are still
        inserted. Commits every ``_BATCH_SIZE`` rows.

        Returns ``(inserted, duplicates, failed)``.
        """
        inserted = duplicates = failed = 0
        pending = 0
        try:
            with self.get_connection() as conn:
                for article in articles:
                    try:
                        cur = conn.execute(_INSERT_SQL, _article_params(article))
                    except sqlite3.Error as exc:
                        failed += 1
                        logger.warning("Error inserting article %s: %s", article.url, exc)
                        continue
                    if cur.rowcount == 1:
                        inserted += 1
                    else:
                        duplicates += 1
                    pending += 1
                    if pending >= _BATCH_SIZE:
                        conn.commit()
                        pending = 0
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to insert article batch: {exc}") from exc
        return inserted, duplicates, failed

    def clear_all(self) -> None:
        """Delete every article. Administrative and test use only."""
        try:
            with self.get_connection() as conn:
                conn.execute("DELETE FROM articles")
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to clear articles: {exc}") from exc

    # ---------------- Reads -----------------
    def query(self, query: ArticleQuery | None = None) -> List[Article]:
        sql, params = (query or ArticleQuery()).to_sql()
        try:
            with self.get_connection() as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.error("Article query failed: %s", exc)
            raise StoreError(f"Article query failed: {exc}") from exc
        return [_row_to_article(row) for row in rows]

    def count(self) -> int:
        try:
            with self.get_connection() as conn:
                (total,) = conn.execute("SELECT COUNT(*) FROM articles").fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to count articles: {exc}") from exc
        return int(total)

    def ranks_since(self, cutoff: datetime) -> List[int]:
        """Ranks of articles published at or after ``cutoff``."""
        if cutoff.microsecond:
            # stored times have whole seconds; round up so nothing older than cutoff counts
            cutoff = cutoff.replace(microsecond=0) + timedelta(seconds=1)
        try:
            with self.get_connection() as conn:
                rows = conn.execute(
                    "SELECT rank FROM articles WHERE publishedAt >= ?",
                    (to_db_time(cutoff),),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read ranks: {exc}") from exc
        return [int(row["rank"] or 0) for row in rows]

    def stream_all(self) -> Iterator[Article]:
        """Yield every article, most recent first.

        Lazy and single-pass: rows are fetched as the caller iterates and the
        connection is released when the iterator is exhausted or closed.
        """
        with self.get_connection() as conn:
            try:
                cursor = conn.execute(f"SELECT {_COLUMNS} FROM articles ORDER BY publishedAt DESC")
                for row in cursor:
                    yield _row_to_article(row)
            except sqlite3.Error as exc:
                raise StoreError(f"Failed to stream articles: {exc}") from exc
