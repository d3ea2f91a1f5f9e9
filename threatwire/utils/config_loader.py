from __future__ import annotations

from pathlib import Path
from typing import Iterable, List
from urllib.parse import urlparse

import yaml

from ..models import Source


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


REQUIRED_FIELDS = {"url"}


def _validate_source_dict(entry: dict) -> None:
    """Validate a single source mapping from YAML.

    Required fields: url (absolute http/https).
    Optional fields:
      - name: str (defaults to the URL)
    """
    missing = REQUIRED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    url_str = str(entry["url"]).strip()
    parsed = urlparse(url_str)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url_str}'. Must be absolute http(s) URL.")

    if "name" in entry and entry["name"] is not None and not isinstance(entry["name"], str):
        raise ConfigError(f"'name' must be a string if provided, got: {type(entry['name'])}")


def _coerce_source(entry: dict) -> Source:
    url = str(entry["url"]).strip()
    name = str(entry.get("name") or "").strip() or url
    return Source(name=name, url=url)


def load_sources_config(path: Path | str) -> List[Source]:
    """Load ``sources.yaml`` into typed ``Source`` instances.

    YAML structure:
      - Top-level mapping
      - Key ``sources``: list of source mappings with fields
          - url: http/https feed URL (required); also the classification key,
            so it must match the classifier's URL exactly
          - name: string (optional)

    Duplicate URLs are rejected: each feed gets exactly one fetch worker per run.
    Unknown top-level keys are ignored for forward compatibility.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {config_path} is not valid YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping at the top level")

    sources_raw: Iterable[dict] = (data.get("sources") or [])
    if not isinstance(sources_raw, list):
        raise ConfigError("'sources' must be a list in the YAML configuration")

    sources: List[Source] = []
    seen: set[str] = set()
    for item in sources_raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Each source must be a mapping, got: {type(item)}")
        _validate_source_dict(item)
        source = _coerce_source(item)
        if source.url in seen:
            raise ConfigError(f"Duplicate source URL: {source.url}")
        seen.add(source.url)
        sources.append(source)
    return sources
