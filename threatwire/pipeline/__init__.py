"""Ingestion run and its periodic schedule."""

from .ingest import IngestionPipeline, RunReport, build_article
from .scheduler import RecurringTask

__all__ = ["IngestionPipeline", "RunReport", "build_article", "RecurringTask"]
