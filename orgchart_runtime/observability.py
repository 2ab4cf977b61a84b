"""
Observability — In-process metrics collection.

No external dependencies. Uses compute_chart_diagnostics + timing.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import ComparisonSession


@dataclass(frozen=True)
class SessionMetrics:
    """Snapshot of observable session metrics."""

    rebuild_latency_ms: float
    node_count: int
    detached_count: int
    error_count: int
    warning_count: int
    added_count: int
    removed_count: int
    moved_count: int
    last_tree_hash: str
    warnings: list


def collect_metrics(session: "ComparisonSession") -> SessionMetrics:
    """
    Collect metrics from a live session.

    Drops the cached view and rebuilds it to measure latency.
    """
    from orgchart_kernel.engine import ComparisonView

    start = time.perf_counter()
    session.set_target(session.target)
    view = session.view()
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    added = removed = moved = 0
    if isinstance(view, ComparisonView):
        added = len(view.analysis.added)
        removed = len(view.analysis.removed)
        moved = len(view.analysis.moved)

    return SessionMetrics(
        rebuild_latency_ms=round(elapsed_ms, 2),
        node_count=view.diagnostics["node_count"],
        detached_count=len(view.outcome.detached),
        error_count=len(view.report.errors),
        warning_count=len(view.report.warnings),
        added_count=added,
        removed_count=removed,
        moved_count=moved,
        last_tree_hash=view.tree_hash,
        warnings=list(view.diagnostics["warnings"]),
    )
