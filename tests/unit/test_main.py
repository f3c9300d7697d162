"""Tests for the main.py entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

import main as entry


def _write_settings(tmp_path: Path, extra: str = "") -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(
        f"store:\n  path: {tmp_path / 'store.json'}\n"
        "observability:\n  log_level: INFO\n" + extra,
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def detach_json_handlers():
    yield
    logger = logging.getLogger("src.core")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_main_reports_namespaces(tmp_path: Path, caplog) -> None:
    (tmp_path / "store.json").write_text(
        json.dumps({"net": {"host": "localhost", "port": "80"}}),
        encoding="utf-8",
    )

    with caplog.at_level(logging.INFO):
        entry.main(str(_write_settings(tmp_path)))

    assert "namespaces=1" in caplog.text
    assert "net: 2 properties" in caplog.text


def test_main_missing_settings_exits_1(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        entry.main(str(tmp_path / "missing.yaml"))

    assert excinfo.value.code == 1


def test_main_writes_json_log_and_traces(tmp_path: Path) -> None:
    json_log = tmp_path / "logs" / "store.jsonl"
    traces = tmp_path / "logs" / "traces.jsonl"
    settings_path = _write_settings(
        tmp_path,
        f"  trace_enabled: true\n  trace_file: {traces}\n  json_log_file: {json_log}\n",
    )

    entry.main(str(settings_path))

    # Missing store file: one load trace and one ERROR record
    (trace,) = [json.loads(line) for line in traces.read_text(encoding="utf-8").splitlines()]
    assert trace["trace_type"] == "load"
    records = [json.loads(line) for line in json_log.read_text(encoding="utf-8").splitlines()]
    assert any("Unable to open configuration file" in r["message"] for r in records)
