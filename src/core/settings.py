"""Settings loading and validation utilities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


# Repository root (src/core/settings.py -> parents[2])
PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_SETTINGS_PATH = "config/settings.yaml"


def resolve_path(path: str | Path) -> Path:
    """Resolve *path* against the project root unless it is absolute.

    Args:
        path: Absolute path, or a path relative to the repository root.

    Returns:
        Absolute :class:`Path`.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return PROJECT_ROOT / candidate


@dataclass(slots=True)
class Settings:
    """Application settings structure.

    Attributes:
        store: Config store section (``path``).
        observability: Logging and tracing section.
        raw: Original full settings dictionary.
    """

    store: dict[str, Any]
    observability: dict[str, Any]
    raw: dict[str, Any]

    @property
    def store_path(self) -> Path:
        return resolve_path(self.store["path"])

    @property
    def log_level(self) -> str:
        return str(self.observability.get("log_level", "INFO"))

    @property
    def trace_enabled(self) -> bool:
        return bool(self.observability.get("trace_enabled", False))

    @property
    def trace_file(self) -> Path:
        return resolve_path(self.observability.get("trace_file", "logs/traces.jsonl"))

    @property
    def json_log_file(self) -> Path | None:
        value = self.observability.get("json_log_file")
        return resolve_path(value) if value else None


def _require_path(data: dict[str, Any], dotted_path: str) -> None:
    current: Any = data
    for key in dotted_path.split("."):
        if not isinstance(current, dict) or key not in current:
            raise ValueError(f"Missing required settings field: {dotted_path}")
        current = current[key]


def validate_settings(settings: Settings) -> None:
    """Validate required settings fields.

    Args:
        settings: Parsed settings object.

    Raises:
        ValueError: If any required field is missing or has the wrong type.
    """

    required_paths = [
        "store",
        "store.path",
    ]

    for path in required_paths:
        _require_path(settings.raw, path)

    if not isinstance(settings.store["path"], str) or not settings.store["path"]:
        raise ValueError("Settings field store.path must be a non-empty string")

    if not isinstance(settings.observability, dict):
        raise ValueError("Settings field observability must be a mapping")


def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    """Load YAML settings from a file and validate required fields.

    Args:
        path: Path to the YAML settings file. Relative paths are resolved
            against the project root.

    Returns:
        Parsed and validated settings object.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If YAML is invalid or required fields are missing.
    """

    settings_path = resolve_path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as fp:
        try:
            parsed = yaml.safe_load(fp)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in settings file {settings_path}: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ValueError("Settings file must contain a YAML mapping at top level")

    settings = Settings(
        store=parsed.get("store") or {},
        observability=parsed.get("observability") or {},
        raw=parsed,
    )
    validate_settings(settings)
    return settings
