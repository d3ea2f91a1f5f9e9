"""Application entrypoint for the threatwire news service.

This script orchestrates the high-level flow:
1) load configuration and open the article store
2) restore from the CSV backup if the store is empty
3) ingest once, then every interval in the background
4) serve the query API until interrupted
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from .analysis import ThreatAggregator
from .models import Source
from .pipeline import IngestionPipeline, RecurringTask
from .processors import LanguageFilter, default_sources
from .storage import ArticleStore, BackupError, StoreError, export_csv_file, import_csv
from .utils.config_loader import ConfigError, load_sources_config
from .utils.logging import configure_logging, get_logger
from .utils.settings import Settings
from .web import create_app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="threatwire: ingest, rank, and serve security and tech news"
    )
    parser.add_argument(
        "--config",
        default="config/sources.yaml",
        help="Path to sources configuration file (YAML); built-in feeds are used if missing",
    )
    parser.add_argument("--db", default=None, help="SQLite database path (overrides THREATWIRE_DB_PATH)")
    parser.add_argument(
        "--backup-csv",
        default=None,
        help="CSV backup used for restore on an empty store (overrides THREATWIRE_BACKUP_CSV)",
    )
    parser.add_argument("--host", default=None, help="Bind address (overrides HOST)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (overrides PORT)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (overrides LOG_LEVEL)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="Run one ingestion and exit")
    mode.add_argument("--export", metavar="PATH", help="Write the store to a CSV file and exit")
    mode.add_argument("--import", dest="import_path", metavar="PATH", help="Load a CSV file into the store and exit")
    return parser.parse_args(argv)


def load_sources(config_path: Path) -> List[Source]:
    if config_path.exists():
        return load_sources_config(config_path)
    return default_sources()


def restore_if_empty(store: ArticleStore, backup_path: Path) -> None:
    logger = get_logger("tw.agent")
    try:
        count = store.count()
    except StoreError as exc:
        logger.warning("Failed to get article count: %s", exc)
        return
    if count:
        return
    if not backup_path.exists():
        logger.info("No CSV backup file found, starting with empty database.")
        return
    logger.info("Database is empty, loading articles from CSV backup %s", backup_path)
    try:
        import_csv(store, backup_path)
    except (BackupError, StoreError) as exc:
        logger.warning("Failed to load articles from CSV: %s", exc)


def main(argv: Optional[List[str]] = None) -> int:
    # Optional: load .env
    try:
        from dotenv import load_dotenv

        load_dotenv(override=False)
    except ImportError:
        pass
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("tw.agent")

    try:
        settings = Settings.from_env()
        store = ArticleStore(args.db or settings.db_path)
    except (ConfigError, StoreError) as exc:  # startup fatal
        logger.exception("Failed to initialize: %s", exc)
        return 1

    if args.export:
        try:
            export_csv_file(store, args.export)
        except (OSError, StoreError) as exc:
            logger.exception("Export failed: %s", exc)
            return 1
        return 0

    if args.import_path:
        try:
            import_csv(store, args.import_path)
        except (BackupError, StoreError) as exc:
            logger.exception("Import failed: %s", exc)
            return 1
        return 0

    config_path = Path(args.config)
    try:
        sources = load_sources(config_path)
    except ConfigError as exc:
        logger.exception("Failed to load configuration: %s", exc)
        return 1
    logger.info("Loaded %d source(s)", len(sources))

    backup_path = Path(args.backup_csv or settings.backup_csv)
    restore_if_empty(store, backup_path)

    pipeline = IngestionPipeline(
        sources,
        store,
        LanguageFilter(min_confidence=settings.language_min_confidence),
        timeout=settings.fetch_timeout_seconds,
        queue_size=settings.queue_size,
    )

    if args.once:
        report = pipeline.run_once()
        all_failed = report.sources > 0 and len(report.failed_sources) == report.sources
        return 1 if all_failed else 0

    job = RecurringTask(pipeline.run_once, interval_minutes=settings.fetch_interval_minutes, name="news caching job")
    job.start(run_immediately=True)

    app = create_app(store, ThreatAggregator(store))
    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Server starting on %s:%d...", host, port)
    try:
        app.run(host=host, port=port, threaded=True, use_reloader=False)
    except KeyboardInterrupt:
        pass
    finally:
        job.stop(timeout=5)
        if settings.backup_on_exit:
            try:
                export_csv_file(store, backup_path)
            except (OSError, StoreError) as exc:
                logger.error("Failed to write CSV backup on exit: %s", exc)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
