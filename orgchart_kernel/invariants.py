"""
Org Chart Kernel — Tree Invariant Checks v1.0

Hard-fail validation of a built tree. Every check raises
TreeInvariantViolationError on failure. The build pipeline never calls
this; it exists for tests and for session consistency checks.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .constants import CHANGE_REMOVED, CHANGE_TYPES, FTE_DECIMALS
from .domain_types import TreeNode, effective_fte, round_half_up


class TreeInvariantViolationError(Exception):
    """Raised when a built tree violates a structural invariant."""

    def __init__(self, rule: str, detail: str) -> None:
        self.rule = rule
        self.detail = detail
        super().__init__(f"[INVARIANT:{rule}] {detail}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_tree_invariants(root: Optional[TreeNode]) -> None:
    """
    Run all tree checks. Raises TreeInvariantViolationError on the first
    failure. An empty tree (None) is valid.
    """
    if root is None:
        return
    order = _check_reachability(root)
    _check_identity_keys(order)
    _check_change_types(order)
    _check_stats(order)


# ---------------------------------------------------------------------------
# Individual checks (private)
# ---------------------------------------------------------------------------

def _check_reachability(root: TreeNode) -> List[TreeNode]:
    """Every node reachable exactly once from the root (no cycles, no sharing)."""
    seen: set = set()
    order: List[TreeNode] = []
    stack: List[TreeNode] = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            raise TreeInvariantViolationError(
                "node_reachable_twice",
                f"Node {node.key!r} is reachable more than once from the root "
                f"(shared child or reporting cycle)",
            )
        seen.add(id(node))
        order.append(node)
        stack.extend(reversed(node.children))
    return order


def _check_identity_keys(order: List[TreeNode]) -> None:
    keys: set = set()
    for node in order:
        if not node.key:
            raise TreeInvariantViolationError(
                "blank_identity_key", "Tree contains a node with a blank id",
            )
        if node.key in keys:
            raise TreeInvariantViolationError(
                "duplicate_identity_key",
                f"Identity key {node.key!r} appears in more than one node",
            )
        keys.add(node.key)


def _check_change_types(order: List[TreeNode]) -> None:
    for node in order:
        if node.change_type not in CHANGE_TYPES or node.change_type == CHANGE_REMOVED:
            raise TreeInvariantViolationError(
                "change_type",
                f"Node {node.key!r} has change type {node.change_type!r}; "
                f"removed nodes never appear in the live tree",
            )


def _check_stats(order: List[TreeNode]) -> None:
    """Stats, where attached, must match a fresh recount."""
    fte_sums: Dict[int, float] = {}
    counts: Dict[int, int] = {}
    for node in reversed(order):  # reverse pre-order: children first
        fte_sums[id(node)] = effective_fte(node.record.fte) + sum(
            fte_sums[id(c)] for c in node.children
        )
        counts[id(node)] = sum(1 + counts[id(c)] for c in node.children)

        stats = node.stats
        if stats is None:
            continue
        if stats.direct_reports != len(node.children):
            raise TreeInvariantViolationError(
                "direct_reports",
                f"Node {node.key!r}: direct_reports={stats.direct_reports}, "
                f"children={len(node.children)}",
            )
        if stats.total_reports != counts[id(node)]:
            raise TreeInvariantViolationError(
                "total_reports",
                f"Node {node.key!r}: total_reports={stats.total_reports}, "
                f"descendants={counts[id(node)]}",
            )
        expected_fte = round_half_up(fte_sums[id(node)], FTE_DECIMALS)
        if abs(stats.total_fte - expected_fte) > 1e-9:
            raise TreeInvariantViolationError(
                "total_fte",
                f"Node {node.key!r}: total_fte={stats.total_fte}, expected={expected_fte}",
            )
        if (
            stats.direct_reports_net_change is not None
            and stats.direct_reports_net_change
            != len(stats.direct_reports_added or []) - len(stats.direct_reports_removed or [])
        ):
            raise TreeInvariantViolationError(
                "direct_reports_net_change",
                f"Node {node.key!r}: net change does not equal |added| - |removed|",
            )
