"""Params resolve cli > config > default and reject bad values."""
from __future__ import annotations

from pathlib import Path

import pytest

from filedrop_ingest.config import ConfigError, load_config
from filedrop_ingest.models import UploadMode
from filedrop_ingest.params import IngestParams, load_config_params, merge_params


def test_precedence_and_sources(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.yaml"
    config_path.write_text("default_mode: folder\npage_size: 7\nartifact_names_extra: [notes.tmp]\n", encoding="utf-8")

    params, sources = merge_params(IngestParams(), load_config_params(config_path), {"page_size": 3})

    assert params.default_mode is UploadMode.FOLDER
    assert params.page_size == 3
    assert params.artifact_names_extra == ["notes.tmp"]
    assert params.completion_delay == IngestParams().completion_delay
    assert sources["page_size"] == "cli"
    assert sources["default_mode"] == "config"
    assert sources["completion_delay"] == "default"
    assert "notes.tmp" in params.artifact_policy()
    assert ".DS_Store" in params.artifact_policy()


def test_invalid_values_raise_config_error() -> None:
    with pytest.raises(ConfigError):
        merge_params(IngestParams(), {"default_mode": "archive"}, {})
    with pytest.raises(ConfigError):
        merge_params(IngestParams(), {"progress_cap": 100}, {})
    with pytest.raises(ConfigError):
        merge_params(IngestParams(), None, {"page_size": 0})


def test_missing_or_malformed_config(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("page_size: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(broken)

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just text\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(scalar)
