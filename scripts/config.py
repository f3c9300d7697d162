#!/usr/bin/env python
"""Command-line access to a config store file.

Usage:
    # Read one property
    python scripts/config.py get adapters ping_interval

    # Write one property (creates the namespace if needed)
    python scripts/config.py set adapters ping_interval 30

    # Dump every namespace, or just one
    python scripts/config.py show
    python scripts/config.py show adapters

    # Work on an explicit file instead of store.path from settings
    python scripts/config.py --file /tmp/store.json show

Exit codes:
    0 - Success
    1 - Property not found
    2 - Configuration error
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path
_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
sys.path.insert(0, str(_REPO_ROOT))

from src.core.config_store import ConfigStore, create_config_store
from src.core.settings import load_settings
from src.observability.logger import attach_json_handler, get_logger

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Read and write namespaced properties of the config store.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--config",
        default=str(_REPO_ROOT / "config" / "settings.yaml"),
        help="Path to settings file (default: config/settings.yaml)"
    )

    parser.add_argument(
        "--file", "-f",
        default=None,
        help="Config store file to use instead of store.path from settings"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="Print one property value")
    get_parser.add_argument("namespace")
    get_parser.add_argument("property")

    set_parser = subparsers.add_parser("set", help="Set one property value")
    set_parser.add_argument("namespace")
    set_parser.add_argument("property")
    set_parser.add_argument("value")

    show_parser = subparsers.add_parser("show", help="Print the stored tree as JSON")
    show_parser.add_argument("namespace", nargs="?", default=None)

    return parser.parse_args(argv)


def _open_store(args: argparse.Namespace) -> Optional[ConfigStore]:
    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        if args.file is None:
            print(f"[FAIL] Failed to load configuration: {e}", file=sys.stderr)
            return None
        # An explicit --file does not need the settings file
        logger.debug("Settings unavailable, using %s directly: %s", args.file, e)
        return ConfigStore(args.file)

    get_logger(__name__, settings.log_level)
    if settings.json_log_file is not None:
        attach_json_handler(settings.json_log_file)
    return create_config_store(settings, file_path=args.file)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    store = _open_store(args)
    if store is None:
        return 2

    if args.command == "get":
        value = store.get(args.namespace, args.property)
        if value is None:
            print(f"[INFO] {args.namespace}::{args.property} is not set", file=sys.stderr)
            return 1
        print(value)
        return 0

    if args.command == "set":
        store.set(args.namespace, args.property, args.value)
        print(f"[OK] {args.namespace}::{args.property} = {args.value!r}")
        return 0

    if args.namespace is not None:
        tree = {args.namespace: store.get_namespace(args.namespace)}
    else:
        tree = store.to_dict()
    print(json.dumps(tree, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
