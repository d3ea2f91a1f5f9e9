from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping, TypeVar

from .config_loader import ConfigError

T = TypeVar("T")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _read(env: Mapping[str, str], key: str, default: T, convert: Callable[[str], T]) -> T:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return convert(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {key}: {raw!r}") from exc


@dataclass(slots=True)
class Settings:
    """Runtime settings read from the environment (after ``.env`` is loaded)."""

    db_path: str = "./news.db"
    backup_csv: str = "./articles.csv"
    fetch_interval_minutes: int = 15
    fetch_timeout_seconds: float = 10.0
    queue_size: int = 100
    language_min_confidence: float = 0.5
    backup_on_exit: bool = True
    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = cls()
        settings = cls(
            db_path=_read(env, "THREATWIRE_DB_PATH", defaults.db_path, str),
            backup_csv=_read(env, "THREATWIRE_BACKUP_CSV", defaults.backup_csv, str),
            fetch_interval_minutes=_read(env, "FETCH_INTERVAL_MINUTES", defaults.fetch_interval_minutes, int),
            fetch_timeout_seconds=_read(env, "FETCH_TIMEOUT_SECONDS", defaults.fetch_timeout_seconds, float),
            queue_size=_read(env, "INGEST_QUEUE_SIZE", defaults.queue_size, int),
            language_min_confidence=_read(env, "LANGUAGE_MIN_CONFIDENCE", defaults.language_min_confidence, float),
            backup_on_exit=_read(env, "BACKUP_ON_EXIT", defaults.backup_on_exit, _parse_bool),
            host=_read(env, "HOST", defaults.host, str),
            port=_read(env, "PORT", defaults.port, int),
        )
        if settings.fetch_interval_minutes <= 0:
            raise ConfigError("FETCH_INTERVAL_MINUTES must be positive")
        if settings.fetch_timeout_seconds <= 0:
            raise ConfigError("FETCH_TIMEOUT_SECONDS must be positive")
        if settings.queue_size <= 0:
            raise ConfigError("INGEST_QUEUE_SIZE must be positive")
        if not 0.0 <= settings.language_min_confidence <= 1.0:
            raise ConfigError("LANGUAGE_MIN_CONFIDENCE must be between 0 and 1")
        return settings
