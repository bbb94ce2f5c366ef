"""Configuration loading utilities for file-drop ingestion."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "default.yaml"


class ConfigError(Exception):
    """Raised when configuration loading fails."""


def load_default_config() -> Dict[str, Any]:
    """Load the default ingestion configuration.

    A missing default file is not an error: the built-in defaults of
    :class:`~filedrop_ingest.params.IngestParams` apply.

    Raises
    ------
    ConfigError
        If the default configuration file cannot be parsed.
    """

    if not DEFAULT_CONFIG_PATH.exists():
        return {}
    return load_custom_config(DEFAULT_CONFIG_PATH)


def load_config(config_path: Path | None = None) -> Dict[str, Any]:
    """Load the default configuration, overlaid with ``config_path`` if given."""

    base = load_default_config()
    if config_path is None or Path(config_path) == DEFAULT_CONFIG_PATH:
        return base

    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config path does not exist: {path}")
    return {**base, **load_custom_config(path)}


def load_custom_config(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from ``path``."""

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping, got {type(data).__name__}")
    return data
