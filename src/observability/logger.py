"""Observability logger utilities.

Provides:
- ``get_logger``: standard human-readable logger on stderr.
- ``JSONFormatter``: custom :class:`logging.Formatter` that emits JSON.
- ``attach_json_handler``: mirror a logger's records into a JSON Lines file.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


# ── Human-readable logger ───────────────────────────────────────────


def get_logger(name: str = "config-store", log_level: Optional[str] = None) -> logging.Logger:
    """Get a configured logger.

    Args:
        name: Logger name.
        log_level: Optional log level string (e.g., "INFO").

    Returns:
        Configured logger instance.
    """

    if log_level:
        level = getattr(logging, log_level.upper(), logging.INFO)
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)

    return logging.getLogger(name)


# ── JSON Lines formatter ────────────────────────────────────────────


class JSONFormatter(logging.Formatter):
    """Logging formatter that outputs one JSON object per line.

    Each record becomes ``timestamp``, ``level``, ``logger`` and
    ``message``, plus ``exception`` when it carries a traceback.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        """Return the log record as a single-line JSON string."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload)


# ── JSON Lines file handler ─────────────────────────────────────────


def attach_json_handler(
    log_path: str | Path,
    *,
    name: str = "src.core",
    level: int = logging.NOTSET,
) -> logging.Logger:
    """Mirror records of logger *name* into a JSON Lines file.

    Records still propagate to the console handlers, and the logger's
    effective level still applies.  Repeated calls for the same logger
    and path do not add duplicate handlers.

    Args:
        log_path: File path for the JSONL output.  Parent directories
            are created automatically.
        name: Logger name whose records are captured (children included).
        level: Minimum level written to the file.

    Returns:
        The logger the handler was attached to.
    """
    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)

    target = os.path.abspath(path)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return logger

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    return logger
