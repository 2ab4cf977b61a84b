"""
Org Chart Kernel — Child Ordering Policy v1.0

Added and moved children sort ahead of unchanged ones. The sort is stable:
relative order inside each group is preserved, never re-sorted by name/id.
"""

from __future__ import annotations

from typing import List

from .constants import SURFACED_CHANGE_TYPES
from .domain_types import TreeNode


def reorder_children(children: List[TreeNode]) -> List[TreeNode]:
    """Return a new list; the input list is left untouched."""
    return sorted(
        children,
        key=lambda node: 0 if node.change_type in SURFACED_CHANGE_TYPES else 1,
    )
