"""
Core Layer - Config store and its supporting pieces.

This package contains:
- Namespaced persistent config store (config_store.py)
- Application settings (settings.py)
- Trace collection
"""
