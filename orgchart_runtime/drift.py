"""
Drift Summary — pure function, no side effects.

Condenses a ChangeAnalysis plus the two batch sizes into the headline
numbers of the comparison overview panel.
"""

from __future__ import annotations

from orgchart_kernel.domain_types import ChangeAnalysis


def summarize_changes(
    analysis: ChangeAnalysis,
    baseline_count: int,
    target_count: int,
) -> dict:
    """
    Returns dict with:
        baseline_count, target_count, net_change, added_count,
        removed_count, moved_count, unchanged_count, total_direct_changes

    ``unchanged_count`` counts target employees that were neither added
    nor moved.
    """
    added = len(analysis.added)
    removed = len(analysis.removed)
    moved = len(analysis.moved)

    return {
        "baseline_count": baseline_count,
        "target_count": target_count,
        "net_change": target_count - baseline_count,
        "added_count": added,
        "removed_count": removed,
        "moved_count": moved,
        "unchanged_count": max(target_count - added - moved, 0),
        "total_direct_changes": analysis.total_direct_changes,
    }
