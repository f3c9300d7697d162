"""Config store entry point.

Loads application settings, opens the configured store and reports what
it holds.  Exits with status 1 when the settings cannot be loaded.
"""

from __future__ import annotations

import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config_store import create_config_store
from src.core.settings import DEFAULT_SETTINGS_PATH, load_settings
from src.observability.logger import attach_json_handler, get_logger


LOGGER = get_logger(__name__)


def main(settings_path: str = DEFAULT_SETTINGS_PATH) -> None:
    """Open the configured store and log a summary of its namespaces."""
    try:
        settings = load_settings(settings_path)
    except (FileNotFoundError, ValueError) as exc:
        LOGGER.error("Failed to load settings: %s", exc)
        raise SystemExit(1) from exc

    get_logger(__name__, settings.log_level)
    if settings.json_log_file is not None:
        attach_json_handler(settings.json_log_file)

    store = create_config_store(settings)
    namespaces = store.namespaces()
    LOGGER.info(
        "Config store ready (file=%s, namespaces=%d, tracing=%s)",
        store.file_path,
        len(namespaces),
        "on" if settings.trace_enabled else "off",
    )
    for namespace in namespaces:
        LOGGER.info("  %s: %d properties", namespace, len(store.get_namespace(namespace)))


if __name__ == "__main__":
    main(*sys.argv[1:2])
