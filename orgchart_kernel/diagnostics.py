"""
Org Chart Kernel — Diagnostics v1.0

Compute a diagnostic summary of a built tree for the preview and
dashboard screens.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from .comparison import index_records
from .constants import FTE_DECIMALS, WIDE_SPAN_THRESHOLD
from .domain_types import TreeNode, effective_fte, round_half_up


def compute_chart_diagnostics(
    root: Optional[TreeNode],
    records: Any = None,
) -> dict:
    """
    Return a diagnostic dict summarising the tree.
    depth counts levels (root alone = 1, empty tree = 0).
    When ``records`` is given, unique records missing from the tree are
    counted as unreachable.
    """
    node_count = 0
    manager_count = 0
    leaf_count = 0
    depth = 0
    max_span = 0
    total_fte = 0.0
    wide: List[str] = []
    in_tree: set = set()

    stack: List[Tuple[TreeNode, int]] = [(root, 1)] if root is not None else []
    while stack:
        node, level = stack.pop()
        node_count += 1
        in_tree.add(node.key)
        depth = max(depth, level)
        total_fte += effective_fte(node.record.fte)
        span = len(node.children)
        max_span = max(max_span, span)
        if span:
            manager_count += 1
            if span > WIDE_SPAN_THRESHOLD:
                wide.append(node.key)
        else:
            leaf_count += 1
        for child in reversed(node.children):
            stack.append((child, level + 1))

    unreachable: List[str] = []
    if records is not None:
        unreachable = [k for k in index_records(records) if k not in in_tree]

    warnings: List[str] = []
    if unreachable:
        warnings.append(
            f"{len(unreachable)} record(s) not reachable from root "
            f"{root.key if root is not None else '-'}: {', '.join(unreachable[:5])}"
            + ("..." if len(unreachable) > 5 else "")
        )
    if wide:
        warnings.append(
            f"{len(wide)} manager(s) with more than {WIDE_SPAN_THRESHOLD} "
            f"direct reports: {', '.join(wide)}"
        )

    return {
        "node_count": node_count,
        "manager_count": manager_count,
        "leaf_count": leaf_count,
        "depth": depth,
        "max_span": max_span,
        "total_fte": round_half_up(total_fte, FTE_DECIMALS),
        "unreachable_count": len(unreachable),
        "warnings": warnings,
    }
