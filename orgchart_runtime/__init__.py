"""
Org Chart Runtime — Session Layer v1

Stateful comparison sessions around the Org Chart Kernel v1.0:
cache invalidation, drift summary, consistency checks, observability.
"""

from .session import ComparisonSession, SessionStateError, DeterminismError
from .drift import summarize_changes
from .observability import SessionMetrics, collect_metrics

__all__ = [
    "ComparisonSession",
    "SessionStateError",
    "DeterminismError",
    "summarize_changes",
    "SessionMetrics",
    "collect_metrics",
]
