"""Article persistence: SQLite store plus CSV backup/restore."""

from .sqlite_store import SORT_RANK, SORT_RECENCY, ArticleQuery, ArticleStore, StoreError
from .backup import CSV_HEADER, BackupError, ImportReport, export_csv, export_csv_file, import_csv

__all__ = [
    "ArticleStore",
    "ArticleQuery",
    "StoreError",
    "SORT_RANK",
    "SORT_RECENCY",
    "CSV_HEADER",
    "BackupError",
    "ImportReport",
    "export_csv",
    "export_csv_file",
    "import_csv",
]
