"""Tests for settings loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.core.settings import (
    PROJECT_ROOT,
    Settings,
    load_settings,
    resolve_path,
    validate_settings,
)


_MINIMAL_VALID_SETTINGS = """
store:
  path: data/config_store.json
observability:
  log_level: DEBUG
  trace_enabled: true
  trace_file: logs/traces.jsonl
"""


def _write_yaml(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_settings_valid_yaml_returns_settings(tmp_path: Path) -> None:
    config_path = _write_yaml(tmp_path / "settings.yaml", _MINIMAL_VALID_SETTINGS)

    settings = load_settings(str(config_path))

    assert isinstance(settings, Settings)
    assert settings.store["path"] == "data/config_store.json"
    assert settings.store_path == PROJECT_ROOT / "data" / "config_store.json"
    assert settings.log_level == "DEBUG"
    assert settings.trace_enabled is True
    assert settings.trace_file == PROJECT_ROOT / "logs" / "traces.jsonl"
    assert settings.json_log_file is None


def test_load_settings_defaults_without_observability(tmp_path: Path) -> None:
    config_path = _write_yaml(tmp_path / "settings.yaml", "store:\n  path: /abs/store.json\n")

    settings = load_settings(config_path)

    assert settings.store_path == Path("/abs/store.json")
    assert settings.log_level == "INFO"
    assert settings.trace_enabled is False


def test_load_settings_missing_store_path_raises_readable_error(tmp_path: Path) -> None:
    invalid_yaml = _MINIMAL_VALID_SETTINGS.replace(
        "store:\n  path: data/config_store.json\n",
        "store:\n",
        1,
    )
    config_path = _write_yaml(tmp_path / "settings.yaml", invalid_yaml)

    with pytest.raises(ValueError, match=r"store\.path"):
        load_settings(str(config_path))


def test_load_settings_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "nope.yaml"))


def test_load_settings_non_mapping_raises(tmp_path: Path) -> None:
    config_path = _write_yaml(tmp_path / "settings.yaml", "- just\n- a list\n")

    with pytest.raises(ValueError, match="YAML mapping"):
        load_settings(str(config_path))


def test_load_settings_invalid_yaml_raises_value_error(tmp_path: Path) -> None:
    config_path = _write_yaml(tmp_path / "settings.yaml", "store: [unclosed\n")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_settings(str(config_path))


def test_validate_settings_empty_store_path_raises() -> None:
    settings = Settings(
        store={"path": ""},
        observability={},
        raw={"store": {"path": ""}, "observability": {}},
    )

    with pytest.raises(ValueError, match=r"store\.path"):
        validate_settings(settings)


def test_resolve_path_keeps_absolute_and_anchors_relative(tmp_path: Path) -> None:
    assert resolve_path(tmp_path) == tmp_path
    assert resolve_path("config/settings.yaml") == PROJECT_ROOT / "config" / "settings.yaml"


def test_repository_settings_file_loads() -> None:
    settings = load_settings("config/settings.yaml")

    assert settings.store_path.name == "config_store.json"
    assert settings.trace_enabled is False
    assert settings.json_log_file is None
