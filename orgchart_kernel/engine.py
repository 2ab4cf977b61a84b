"""
Org Chart Kernel — View Pipeline v1.0

Top-level orchestrator. Delegates to validation.py, builder.py,
comparison.py and statistics.py, and reports via diagnostics.py.

Both pipelines are pure: every call builds fresh nodes and maps from the
batches it is given and never mutates them. Dirty data never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .builder import build_hierarchy, build_hierarchy_outcome
from .comparison import annotate_tree, build_comparison_maps, classify_changes
from .diagnostics import compute_chart_diagnostics
from .domain_types import (
    BuildOutcome,
    ChangeAnalysis,
    ComparisonMaps,
    TreeNode,
    ValidationReport,
)
from .hashing import canonical_tree_hash
from .statistics import compute_stats
from .validation import validate_records

logger = logging.getLogger(__name__)


@dataclass
class ChartView:
    """Single-snapshot result: validation report plus a stat-bearing tree."""

    report: ValidationReport
    outcome: BuildOutcome
    diagnostics: dict = field(default_factory=dict)
    tree_hash: str = ""

    @property
    def root(self) -> Optional[TreeNode]:
        return self.outcome.root

    def to_dict(self) -> dict:
        return {
            "report": self.report.to_dict(),
            "tree": self.root.to_dict() if self.root is not None else None,
            "root_candidates": list(self.outcome.root_candidates),
            "detached": list(self.outcome.detached),
            "broken_cycles": list(self.outcome.broken_cycles),
            "diagnostics": self.diagnostics,
            "tree_hash": self.tree_hash,
        }


@dataclass
class ComparisonView:
    """Baseline vs. target result: classification plus an annotated target tree."""

    report: ValidationReport
    analysis: ChangeAnalysis
    outcome: BuildOutcome
    baseline_root: Optional[TreeNode]
    maps: ComparisonMaps
    diagnostics: dict = field(default_factory=dict)
    tree_hash: str = ""

    @property
    def root(self) -> Optional[TreeNode]:
        return self.outcome.root

    def to_dict(self) -> dict:
        return {
            "report": self.report.to_dict(),
            "analysis": self.analysis.to_dict(),
            "baseline_maps": self.maps.to_dict(),
            "tree": self.root.to_dict() if self.root is not None else None,
            "root_candidates": list(self.outcome.root_candidates),
            "detached": list(self.outcome.detached),
            "broken_cycles": list(self.outcome.broken_cycles),
            "diagnostics": self.diagnostics,
            "tree_hash": self.tree_hash,
        }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_chart_view(records: Any) -> ChartView:
    """validate -> build -> stats for one snapshot."""
    report = validate_records(records)
    outcome = build_hierarchy_outcome(records)
    compute_stats(outcome.root)
    return ChartView(
        report=report,
        outcome=outcome,
        diagnostics=compute_chart_diagnostics(outcome.root, records),
        tree_hash=canonical_tree_hash(outcome.root),
    )


def build_comparison_view(
    baseline: Any,
    target: Any,
    baseline_root: Optional[TreeNode] = None,
    maps: Optional[ComparisonMaps] = None,
) -> ComparisonView:
    """
    classify -> build both -> baseline maps -> annotate -> stats.

    ``baseline_root`` and ``maps`` may be passed in when the caller already
    holds them for an unchanged baseline; they are otherwise rebuilt.
    """
    analysis = classify_changes(baseline, target)
    if baseline_root is None:
        baseline_root = build_hierarchy(baseline)
    if maps is None:
        maps = build_comparison_maps(baseline, baseline_root)

    outcome = build_hierarchy_outcome(target)
    annotate_tree(outcome.root, analysis)
    compute_stats(outcome.root, maps)

    logger.debug(
        "Comparison: %d added, %d removed, %d moved",
        len(analysis.added), len(analysis.removed), len(analysis.moved),
    )

    return ComparisonView(
        report=validate_records(target),
        analysis=analysis,
        outcome=outcome,
        baseline_root=baseline_root,
        maps=maps,
        diagnostics=compute_chart_diagnostics(outcome.root, target),
        tree_hash=canonical_tree_hash(outcome.root),
    )
