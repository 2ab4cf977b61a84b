"""
Comparison Session — holds the baseline and target batches of one
comparison and caches what is derived from them.

Invalidation rules:
  set_baseline()  drops the baseline tree, comparison maps and view
  set_target()    drops the view only (baseline maps stay valid)

Nothing here detects in-place mutation of a batch after it was handed
over; callers replace a batch by calling the setter again.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Optional, Union

from orgchart_kernel.comparison import build_comparison_maps, index_records
from orgchart_kernel.builder import build_hierarchy
from orgchart_kernel.domain_types import ComparisonMaps, TreeNode
from orgchart_kernel.engine import (
    ChartView,
    ComparisonView,
    build_chart_view,
    build_comparison_view,
)
from orgchart_kernel.invariants import validate_tree_invariants

from .drift import summarize_changes

if TYPE_CHECKING:
    from .observability import SessionMetrics

logger = logging.getLogger(__name__)

View = Union[ChartView, ComparisonView]


class SessionStateError(Exception):
    """Raised when a session is asked for a view it has no data for."""


class DeterminismError(Exception):
    """Raised when a fresh rebuild hashes differently from the cached view."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Determinism failure: cached tree hash={expected!r}, "
            f"rebuilt tree hash={actual!r}"
        )


class ComparisonSession:
    """
    Stateful holder around the pure view pipeline.

    Without a baseline the session yields a ChartView of the target; with
    one it yields a ComparisonView annotated against the baseline.
    """

    def __init__(self) -> None:
        self._baseline: Any = None
        self._target: Any = None
        self._baseline_root: Optional[TreeNode] = None
        self._maps: Optional[ComparisonMaps] = None
        self._view: Optional[View] = None
        self._last_build_ms: float = 0.0

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_baseline(self, records: Any) -> None:
        self._baseline = _snapshot(records)
        self._baseline_root = None
        self._maps = None
        self._view = None
        logger.debug("Baseline replaced; comparison maps invalidated")

    def clear_baseline(self) -> None:
        self._baseline = None
        self._baseline_root = None
        self._maps = None
        self._view = None

    def set_target(self, records: Any) -> None:
        self._target = _snapshot(records)
        self._view = None

    @property
    def has_baseline(self) -> bool:
        return self._baseline is not None

    @property
    def has_target(self) -> bool:
        return self._target is not None

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def view(self) -> View:
        """Return the cached view, rebuilding whatever is stale."""
        if self._target is None:
            raise SessionStateError("No target batch loaded; call set_target() first")
        if self._view is not None:
            return self._view

        start = time.perf_counter()
        if self._baseline is None:
            self._view = build_chart_view(self._target)
        else:
            if self._maps is None:
                self._baseline_root = build_hierarchy(self._baseline)
                self._maps = build_comparison_maps(self._baseline, self._baseline_root)
            self._view = build_comparison_view(
                self._baseline,
                self._target,
                baseline_root=self._baseline_root,
                maps=self._maps,
            )
        self._last_build_ms = round((time.perf_counter() - start) * 1000.0, 2)
        logger.info("View rebuilt in %.2f ms (hash %s)", self._last_build_ms, self._view.tree_hash[:12])
        return self._view

    def summary(self) -> Optional[dict]:
        """Drift summary, or None when no baseline is loaded."""
        view = self.view()
        if not isinstance(view, ComparisonView):
            return None
        return summarize_changes(
            view.analysis,
            baseline_count=len(index_records(self._baseline)),
            target_count=len(index_records(self._target)),
        )

    # ------------------------------------------------------------------
    # Consistency verification
    # ------------------------------------------------------------------

    def verify_consistency(self) -> bool:
        """
        Check tree invariants on the cached view, then rebuild from scratch
        (no cached maps) and compare canonical tree hashes.

        Raises TreeInvariantViolationError or DeterminismError on mismatch.
        """
        view = self.view()
        validate_tree_invariants(view.root)

        if self._baseline is None:
            fresh: View = build_chart_view(self._target)
        else:
            fresh = build_comparison_view(self._baseline, self._target)

        if fresh.tree_hash != view.tree_hash:
            raise DeterminismError(view.tree_hash, fresh.tree_hash)
        return True

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_metrics(self) -> "SessionMetrics":
        """Collect metrics from the current session."""
        from .observability import collect_metrics
        return collect_metrics(self)

    @property
    def last_build_ms(self) -> float:
        return self._last_build_ms

    @property
    def baseline(self) -> Any:
        return self._baseline

    @property
    def target(self) -> Any:
        return self._target


def _snapshot(records: Any) -> Any:
    """Shallow copy of list-shaped input; anything else is kept for the
    pipeline to report as a shape error."""
    if isinstance(records, (list, tuple)):
        return list(records)
    return records
