"""Root logger setup for the service.

Every record carries the thread name: fetch workers (``tw-fetch_N``), the
ingestion writer (``tw-writer``), the schedule thread and Flask request threads
all log through the same handlers.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Literal

LogOutput = Literal["stdout", "file", "both"]
LogFormat = Literal["text", "json"]

DEFAULT_LOG_FILE = "logs/threatwire.log"

_FORMATS = {
    "text": "%(asctime)s | %(levelname)s | %(name)s | %(threadName)s | %(message)s",
    "json": (
        '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", '
        '"thread": "%(threadName)s", "message": "%(message)s"}'
    ),
}

# logs every connection at DEBUG
_QUIET_LOGGERS = ("urllib3",)


def _build_handlers(output: str, file_path: str) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if output in ("file", "both"):
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(file_path, maxBytes=10 * 1024 * 1024, backupCount=5))
    return handlers


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
) -> None:
    """Replace the root logger's handlers.

    Unset arguments fall back to ``LOG_LEVEL`` (INFO), ``LOG_OUTPUT`` (stdout),
    ``LOG_FILE_PATH`` and ``LOG_FORMAT`` (text), read at call time so values
    loaded from ``.env`` apply.
    """
    if level is None:
        level = (os.environ.get("LOG_LEVEL") or "INFO").upper()
    if output is None:
        output = (os.environ.get("LOG_OUTPUT") or "stdout").lower()
    if file_path is None:
        file_path = os.environ.get("LOG_FILE_PATH") or DEFAULT_LOG_FILE
    if log_format is None:
        log_format = (os.environ.get("LOG_FORMAT") or "text").lower()

    formatter = logging.Formatter(_FORMATS.get(log_format, _FORMATS["text"]))
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in _build_handlers(output, file_path):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
