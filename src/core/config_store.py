"""Persistent namespaced configuration store.

Holds a two-level mapping ``namespace -> property -> value`` (all strings)
and keeps a JSON file as its single source of truth:

- Loaded once on construction. A missing, unreadable or malformed file
  yields an empty store; nothing is raised.
- Saved in full after every ``set``. The tree is written to a sibling
  ``<file>.updated`` file which is then swapped onto the real path.
- Save failures are logged and never raised; the in-memory change stays.

Design Principles:
- Instance-owned: callers hold the store, there is no module-level state
- Thread-safe: one lock guards the tree, one serializes the file section
- Deterministic: keys are sorted on disk for diff-friendly output
"""

import json
import logging
import os
import threading
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from src.core.settings import Settings
from src.core.trace.trace_collector import TraceCollector
from src.core.trace.trace_context import TraceContext

logger = logging.getLogger(__name__)

ConfigNamespace = Dict[str, str]
ConfigTree = Dict[str, ConfigNamespace]

UPDATE_SUFFIX = ".updated"


class ConfigStore:
    """Namespaced key-value configuration backed by a JSON file.

    File Format:
        {
          "namespace": {
            "property": "value",
            ...
          },
          ...
        }

    Args:
        file_path: Path of the backing JSON file. It is not created until
            the first successful save.
        trace_collector: Optional collector; when given, every load and
            save records a :class:`TraceContext` and hands it over.

    Example:
        >>> store = ConfigStore("data/config_store.json")
        >>> store.set("foo", "bar", "baz")
        >>> store.get("foo", "bar")
        'baz'
        >>> store.get("foo", "missing") is None
        True
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        trace_collector: Optional[TraceCollector] = None,
    ):
        self._file_path = Path(file_path)
        self._trace_collector = trace_collector
        self._save_lock = threading.Lock()
        self._tree_lock = threading.Lock()
        self._config: ConfigTree = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def temp_path(self) -> Path:
        """Sibling file the tree is written to before the swap."""
        return self._file_path.with_name(self._file_path.name + UPDATE_SUFFIX)

    # ===== Public API =====

    def get(self, namespace: str, property: str) -> Optional[str]:
        """Return the value of ``namespace::property``, or None if unset.

        An unknown namespace and an unknown property are indistinguishable.
        """
        with self._tree_lock:
            section = self._config.get(namespace)
            value = section.get(property) if section is not None else None

        if section is None:
            logger.debug("No config result for %s::%s", namespace, property)
        else:
            logger.debug("Config result for %s::%s is %r", namespace, property, value)
        return value

    def set(self, namespace: str, property: str, value: str) -> None:
        """Set ``namespace::property`` to *value* and save the whole tree.

        The namespace is created on demand. A failed save is logged and
        leaves the in-memory change in place.

        Raises:
            TypeError: If any argument is not a ``str``. Nothing is stored.
        """
        for name, arg in (("namespace", namespace), ("property", property), ("value", value)):
            if not isinstance(arg, str):
                raise TypeError(f"{name} must be a str, got {type(arg).__name__}")

        logger.debug("Setting config for %s::%s to %s", namespace, property, value)
        with self._tree_lock:
            self._config.setdefault(namespace, {})[property] = value
        self.save()

    def save(self) -> bool:
        """Write the full tree to disk through the ``.updated`` temp file.

        Returns:
            True if the backing file now holds the current tree, False if
            the attempt failed (the cause is logged).
        """
        trace = self._start_trace("save")
        try:
            with self._save_lock:
                # Snapshot inside the save lock so the last save to finish
                # always carries every mutation made before it started.
                with self._trace_stage(trace, "serialize") as stage:
                    payload = self._serialize()
                    stage["bytes"] = len(payload)
                return self._write(payload, trace)
        finally:
            self._finish_trace(trace)

    def namespaces(self) -> List[str]:
        """Return the sorted list of namespace names."""
        with self._tree_lock:
            return sorted(self._config)

    def get_namespace(self, namespace: str) -> ConfigNamespace:
        """Return a copy of one namespace (empty dict when absent)."""
        with self._tree_lock:
            return dict(self._config.get(namespace, {}))

    def to_dict(self) -> ConfigTree:
        """Return a deep copy of the whole tree."""
        with self._tree_lock:
            return {ns: dict(props) for ns, props in self._config.items()}

    # ===== Private Helper Methods =====

    def _load(self) -> ConfigTree:
        """Read and parse the backing file, falling back to an empty tree."""
        trace = self._start_trace("load")
        try:
            try:
                with self._trace_stage(trace, "read") as stage:
                    with open(self._file_path, "rb") as f:
                        raw = f.read()
                    stage["bytes"] = len(raw)
            except OSError as e:
                logger.error("Unable to open configuration file %s: %s", self._file_path, e)
                return {}

            try:
                with self._trace_stage(trace, "parse") as stage:
                    parsed = self._parse(raw)
                    stage["namespaces"] = len(parsed)
            except ValueError as e:
                logger.error("Unable to parse JSON from config file %s: %s", self._file_path, e)
                return {}

            logger.debug("Parsed config file %s: %r", self._file_path, parsed)
            return parsed
        finally:
            self._finish_trace(trace)

    @staticmethod
    def _parse(raw: bytes) -> ConfigTree:
        """Decode *raw* and check it is an object of objects of strings.

        Raises:
            ValueError: If the bytes are not UTF-8 JSON or have the wrong shape.
        """
        data: Any = json.loads(raw.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"top level must be an object, got {type(data).__name__}")

        tree: ConfigTree = {}
        for namespace, section in data.items():
            if not isinstance(section, dict):
                raise ValueError(
                    f"namespace {namespace!r} must be an object, got {type(section).__name__}"
                )
            for property, value in section.items():
                if not isinstance(value, str):
                    raise ValueError(
                        f"{namespace}::{property} must be a string, got {type(value).__name__}"
                    )
            tree[namespace] = dict(section)
        return tree

    def _serialize(self) -> str:
        # ASCII escapes keep lone surrogates encodable and round-trippable
        with self._tree_lock:
            return json.dumps(self._config, indent=2, sort_keys=True, ensure_ascii=True) + "\n"

    def _write(self, payload: str, trace: Optional[TraceContext]) -> bool:
        """Write *payload* to the temp file and swap it onto the real path.

        Must be called with the save lock held.
        """
        temp_path = self.temp_path
        try:
            with self._trace_stage(trace, "write_temp", {"path": str(temp_path)}):
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_path, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())

            # Atomic rename: readers see either the old or the new file
            with self._trace_stage(trace, "swap", {"path": str(self._file_path)}):
                os.replace(temp_path, self._file_path)

        except (OSError, ValueError) as e:
            logger.error("While writing configuration file %s: %s", self._file_path, e)
            self._discard_temp(temp_path)
            return False

        logger.debug("Wrote configuration file %s", self._file_path)
        return True

    @staticmethod
    def _discard_temp(temp_path: Path) -> None:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Unable to remove temporary config file %s: %s", temp_path, e)

    # ---- tracing helpers -----------------------------------------------

    def _start_trace(self, trace_type: str) -> Optional[TraceContext]:
        if self._trace_collector is None:
            return None
        trace = TraceContext(trace_type=trace_type)
        trace.metadata["file_path"] = str(self._file_path)
        return trace

    def _finish_trace(self, trace: Optional[TraceContext]) -> None:
        if trace is not None:
            self._trace_collector.collect(trace)

    @staticmethod
    def _trace_stage(trace: Optional[TraceContext], stage_name: str, data: Optional[Dict[str, Any]] = None):
        if trace is None:
            return nullcontext({})
        return trace.stage_timer(stage_name, data)


def create_config_store(
    settings: Settings,
    file_path: Optional[Union[str, Path]] = None,
) -> ConfigStore:
    """Factory function to create a ConfigStore from application settings.

    Args:
        settings: Application settings.
        file_path: Optional override for ``store.path``.

    Returns:
        ConfigStore loaded from the configured file, with a trace collector
        attached when ``observability.trace_enabled`` is set.

    Example:
        >>> settings = load_settings("config/settings.yaml")
        >>> store = create_config_store(settings)
    """
    collector = TraceCollector(settings.trace_file) if settings.trace_enabled else None
    path = Path(file_path) if file_path is not None else settings.store_path
    return ConfigStore(path, trace_collector=collector)
