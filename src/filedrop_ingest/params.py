"""Parameter handling utilities for ingest configuration merging."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .artifacts import ArtifactPolicy
from .config import ConfigError, load_custom_config, load_default_config
from .constants import (
    COMPLETION_DELAY,
    DEFAULT_PAGE_SIZE,
    PREVIEW_LIMIT,
    PROGRESS_CAP,
    PROGRESS_COMPLETE,
    PROGRESS_INTERVAL,
    PROGRESS_STEP,
)
from .models import UploadMode


@dataclass
class IngestParams:
    """Session settings resolved from defaults, config files and the CLI."""

    default_mode: UploadMode = UploadMode.FILE
    artifact_names_extra: List[str] = field(default_factory=list)
    page_size: int = DEFAULT_PAGE_SIZE
    progress_step: int = PROGRESS_STEP
    progress_interval: float = PROGRESS_INTERVAL
    progress_cap: int = PROGRESS_CAP
    completion_delay: float = COMPLETION_DELAY
    preview_limit: int = PREVIEW_LIMIT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_mode": self.default_mode.value,
            "artifact_names_extra": list(self.artifact_names_extra),
            "page_size": int(self.page_size),
            "progress_step": int(self.progress_step),
            "progress_interval": float(self.progress_interval),
            "progress_cap": int(self.progress_cap),
            "completion_delay": float(self.completion_delay),
            "preview_limit": int(self.preview_limit),
        }

    def artifact_policy(self) -> ArtifactPolicy:
        return ArtifactPolicy().extended(self.artifact_names_extra)

    def validate(self) -> None:
        if self.page_size < 1:
            raise ConfigError(f"page_size must be positive, got {self.page_size}")
        if self.progress_step < 1:
            raise ConfigError(f"progress_step must be positive, got {self.progress_step}")
        if not 0 <= self.progress_cap < PROGRESS_COMPLETE:
            raise ConfigError(f"progress_cap must be in [0, {PROGRESS_COMPLETE}), got {self.progress_cap}")
        if self.progress_interval < 0 or self.completion_delay < 0:
            raise ConfigError("progress_interval and completion_delay must not be negative")
        if self.preview_limit < 0:
            raise ConfigError(f"preview_limit must not be negative, got {self.preview_limit}")


def _coerce(name: str, value: Any) -> Any:
    try:
        if name == "default_mode":
            return UploadMode(value)
        if name == "artifact_names_extra":
            return [str(item) for item in (value or [])]
        if name in {"page_size", "progress_step", "progress_cap", "preview_limit"}:
            return int(value)
        if name in {"progress_interval", "completion_delay"}:
            return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from exc
    raise ConfigError(f"Unknown parameter: {name}")


def _params_from_dict(config: Dict[str, Any]) -> IngestParams:
    known = {f.name for f in fields(IngestParams)}
    values = {key: _coerce(key, value) for key, value in config.items() if key in known and value is not None}
    return IngestParams(**values)


def load_default_params() -> Tuple[IngestParams, Dict[str, str]]:
    """Load params from the default configuration file."""

    params = _params_from_dict(load_default_config())
    sources = {key: "default" for key in params.to_dict().keys()}
    return params, sources


def load_config_params(config_path: Optional[Path | str]) -> Optional[Dict[str, Any]]:
    """Load raw overrides from a user-provided config path if present."""

    if config_path is None:
        return None
    path_obj = Path(config_path)
    if not path_obj.exists():
        raise ConfigError(f"Config path does not exist: {path_obj}")
    return load_custom_config(path_obj)


def merge_params(
    default_params: IngestParams,
    config_overrides: Optional[Dict[str, Any]],
    cli_overrides: Dict[str, Any],
) -> Tuple[IngestParams, Dict[str, str]]:
    """Merge params with precedence cli > config > default, tracking sources."""

    merged = IngestParams()
    sources: Dict[str, str] = {}
    config_overrides = config_overrides or {}
    for field_name in merged.to_dict().keys():
        if cli_overrides.get(field_name) is not None:
            value = _coerce(field_name, cli_overrides[field_name])
            source = "cli"
        elif config_overrides.get(field_name) is not None:
            value = _coerce(field_name, config_overrides[field_name])
            source = "config"
        else:
            value = getattr(default_params, field_name)
            source = "default"
        setattr(merged, field_name, value)
        sources[field_name] = source

    merged.validate()
    return merged, sources
