"""
Observability Layer - Logging.

This package contains observability components:
- Human-readable console logger
- JSON Lines log formatter and file handler
"""

__all__ = []
