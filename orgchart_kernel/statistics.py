"""
Org Chart Kernel — Statistics Aggregator v1.0

Single post-order walk (children before parent) attaching NodeStats to
every node:

  direct_reports = len(children)
  total_reports  = Σ over children (1 + child.total_reports)
  total_fte      = own FTE (default 1 when absent/invalid) + Σ descendant FTE,
                   rounded to 2 decimals

When baseline ComparisonMaps are supplied, nodes whose key has a baseline
entry also get added/removed direct-report names and net changes.
Sums are carried unrounded; only the stored total_fte is rounded.
"""

from __future__ import annotations

from typing import Dict, Optional

from .constants import FTE_DECIMALS
from .domain_types import (
    ComparisonMaps,
    NodeStats,
    TreeNode,
    effective_fte,
    round_half_up,
)


def compute_stats(
    root: Optional[TreeNode],
    maps: Optional[ComparisonMaps] = None,
) -> Optional[NodeStats]:
    """Attach stats to every node; return the root's stats."""
    if root is None:
        return None

    fte_sums: Dict[int, float] = {}
    for node in root.iter_post_order():
        fte_sum = effective_fte(node.record.fte)
        total_reports = 0
        for child in node.children:
            fte_sum += fte_sums[id(child)]
            total_reports += 1 + child.stats.total_reports
        fte_sums[id(node)] = fte_sum

        stats = NodeStats(
            direct_reports=len(node.children),
            total_reports=total_reports,
            total_fte=round_half_up(fte_sum, FTE_DECIMALS),
        )
        if maps is not None:
            _apply_baseline(node, stats, maps)
        node.stats = stats

    return root.stats


def _apply_baseline(node: TreeNode, stats: NodeStats, maps: ComparisonMaps) -> None:
    key = node.key

    baseline_reports = maps.direct_reports_map.get(key)
    if baseline_reports is not None:
        baseline_set = set(baseline_reports)
        current_set = {child.key for child in node.children}
        stats.direct_reports_added = [
            child.name for child in node.children if child.key not in baseline_set
        ]
        stats.direct_reports_removed = [
            maps.baseline_names.get(k, k) for k in baseline_reports if k not in current_set
        ]
        stats.direct_reports_net_change = (
            len(stats.direct_reports_added) - len(stats.direct_reports_removed)
        )

    baseline_total = maps.total_reports_map.get(key)
    if baseline_total is not None:
        stats.total_reports_net_change = stats.total_reports - baseline_total
