"""
Trace Module.

This package contains tracing components for config store operations:
- Trace context
- Trace collector
"""

from src.core.trace.trace_context import TraceContext
from src.core.trace.trace_collector import TraceCollector

__all__ = ['TraceContext', 'TraceCollector']
