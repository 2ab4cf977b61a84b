"""
Org Chart Kernel — Comparison Engine v1.0

Diffs two flat record batches (baseline, target) keyed by identity:

  added    target keys absent from the baseline
  removed  baseline keys absent from the target
  moved    keys in both whose normalized manager reference changed

Also annotates a target tree with the classification and precomputes the
baseline lookups the statistics aggregator needs for net-change fields.
Within a batch the first record seen for a key is authoritative, matching
the builder.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .constants import (
    CHANGE_ADDED,
    CHANGE_MOVED,
    CHANGE_NONE,
    CHANGE_REMOVED,
    UNKNOWN_MANAGER_NAME,
)
from .domain_types import (
    ChangeAnalysis,
    ClassifiedRecord,
    ComparisonMaps,
    EmployeeRecord,
    TreeNode,
    coerce_records,
)
from .ordering import reorder_children


# ---------------------------------------------------------------------------
# Indexing
# ---------------------------------------------------------------------------

def index_records(records: Any) -> Dict[str, EmployeeRecord]:
    """Identity-keyed map in input order; blank ids skipped, first seen wins."""
    index: Dict[str, EmployeeRecord] = {}
    for record in coerce_records(records) or []:
        key = record.key
        if key and key not in index:
            index[key] = record
    return index


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_changes(baseline: Any, target: Any) -> ChangeAnalysis:
    """Set-difference classification of target against baseline."""
    baseline_map = index_records(baseline)
    target_map = index_records(target)

    added = [
        ClassifiedRecord(record=rec, change_type=CHANGE_ADDED)
        for key, rec in target_map.items()
        if key not in baseline_map
    ]
    removed = [
        ClassifiedRecord(record=rec, change_type=CHANGE_REMOVED)
        for key, rec in baseline_map.items()
        if key not in target_map
    ]

    moved: List[ClassifiedRecord] = []
    for key, rec in target_map.items():
        before = baseline_map.get(key)
        if before is None or before.manager_key == rec.manager_key:
            continue
        previous_manager = baseline_map.get(before.manager_key)
        moved.append(ClassifiedRecord(
            record=rec,
            change_type=CHANGE_MOVED,
            previous_manager=before.manager_id,
            previous_manager_name=(
                previous_manager.display_name
                if previous_manager is not None
                else UNKNOWN_MANAGER_NAME
            ),
        ))

    return ChangeAnalysis(
        added=added,
        removed=removed,
        moved=moved,
        total_direct_changes=len(added) + len(removed) + len(moved),
    )


# ---------------------------------------------------------------------------
# Annotation
# ---------------------------------------------------------------------------

def annotate_tree(root: Optional[TreeNode], analysis: ChangeAnalysis) -> None:
    """
    Mark every node of the target tree with its change type, then reorder
    its children so changed ones come first. Mutates the tree in place.

    A node's children are marked before they are reordered, so ordering
    only reflects a node's own children.
    """
    if root is None:
        return

    added_keys = {c.key for c in analysis.added}
    moved_by_key = {c.key: c for c in analysis.moved}

    _mark(root, added_keys, moved_by_key)
    stack: List[TreeNode] = [root]
    while stack:
        node = stack.pop()
        for child in node.children:
            _mark(child, added_keys, moved_by_key)
        node.children = reorder_children(node.children)
        stack.extend(reversed(node.children))


def _mark(
    node: TreeNode,
    added_keys: set,
    moved_by_key: Dict[str, ClassifiedRecord],
) -> None:
    key = node.key
    if key in added_keys:
        node.change_type = CHANGE_ADDED
        node.previous_manager = None
        node.previous_manager_name = None
    elif key in moved_by_key:
        details = moved_by_key[key]
        node.change_type = CHANGE_MOVED
        node.previous_manager = details.previous_manager
        node.previous_manager_name = details.previous_manager_name
    else:
        node.change_type = CHANGE_NONE
        node.previous_manager = None
        node.previous_manager_name = None


# ---------------------------------------------------------------------------
# Baseline lookups
# ---------------------------------------------------------------------------

def build_comparison_maps(
    baseline_records: Any,
    baseline_hierarchy: Optional[TreeNode],
) -> ComparisonMaps:
    """
    Precompute, for every baseline id: its manager's name, the ids of its
    direct reports, and its total-descendant count (from the baseline tree).
    """
    baseline_map = index_records(baseline_records)

    previous_manager_map: Dict[str, str] = {}
    direct_reports_map: Dict[str, List[str]] = {key: [] for key in baseline_map}
    for key, rec in baseline_map.items():
        manager_key = rec.manager_key
        if not manager_key or manager_key == key:
            continue
        manager = baseline_map.get(manager_key)
        if manager is None:
            continue
        previous_manager_map[key] = manager.display_name
        direct_reports_map[manager_key].append(key)

    total_reports_map: Dict[str, int] = {}
    if baseline_hierarchy is not None:
        for node in baseline_hierarchy.iter_post_order():
            total_reports_map[node.key] = sum(
                1 + total_reports_map[child.key] for child in node.children
            )

    return ComparisonMaps(
        previous_manager_map=previous_manager_map,
        direct_reports_map=direct_reports_map,
        total_reports_map=total_reports_map,
        baseline_names={key: rec.display_name for key, rec in baseline_map.items()},
    )
