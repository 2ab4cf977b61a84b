"""
Org Chart Kernel v1.0
Deterministic, in-memory hierarchy construction and comparison engine.
Flat employee records in; a rooted, annotated, stat-bearing tree out.
"""

from .domain_types import (
    EmployeeRecord, TreeNode, NodeStats, BuildOutcome,
    ValidationReport, ValidationStats, RelationIssue,
    ClassifiedRecord, ChangeAnalysis, ComparisonMaps,
    coerce_record, coerce_records, effective_fte, is_invalid_fte, parse_fte,
)
from .identity import normalize_id
from .validation import validate_records
from .relations import validate_relations, detect_cycles
from .builder import build_hierarchy, build_hierarchy_outcome
from .ordering import reorder_children
from .comparison import (
    classify_changes,
    annotate_tree,
    build_comparison_maps,
    index_records,
)
from .statistics import compute_stats
from .invariants import TreeInvariantViolationError, validate_tree_invariants
from .diagnostics import compute_chart_diagnostics
from .hashing import canonical_tree_serialize, canonical_tree_hash
from .engine import ChartView, ComparisonView, build_chart_view, build_comparison_view
from .constants import (
    CHANGE_NONE,
    CHANGE_ADDED,
    CHANGE_MOVED,
    CHANGE_REMOVED,
    DEFAULT_FTE,
    UNKNOWN_MANAGER_NAME,
)

__all__ = [
    "EmployeeRecord",
    "TreeNode",
    "NodeStats",
    "BuildOutcome",
    "ValidationReport",
    "ValidationStats",
    "RelationIssue",
    "ClassifiedRecord",
    "ChangeAnalysis",
    "ComparisonMaps",
    "coerce_record",
    "coerce_records",
    "effective_fte",
    "is_invalid_fte",
    "parse_fte",
    "normalize_id",
    "validate_records",
    "validate_relations",
    "detect_cycles",
    "build_hierarchy",
    "build_hierarchy_outcome",
    "reorder_children",
    "classify_changes",
    "annotate_tree",
    "build_comparison_maps",
    "index_records",
    "compute_stats",
    "TreeInvariantViolationError",
    "validate_tree_invariants",
    "compute_chart_diagnostics",
    "canonical_tree_serialize",
    "canonical_tree_hash",
    "ChartView",
    "ComparisonView",
    "build_chart_view",
    "build_comparison_view",
    "CHANGE_NONE",
    "CHANGE_ADDED",
    "CHANGE_MOVED",
    "CHANGE_REMOVED",
    "DEFAULT_FTE",
    "UNKNOWN_MANAGER_NAME",
]
