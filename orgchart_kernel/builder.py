"""
Org Chart Kernel — Hierarchy Builder v1.0

Converts a flat record batch into a single rooted tree.

Structural defects never raise; they are resolved by fixed fallback rules:
  - blank or repeated ids: later rows are skipped (first seen wins)
  - absent, self-referential or unknown manager: root candidate
  - manager already below the node (reporting cycle): root candidate
  - root: the LAST root candidate in input order; if there is none,
    the first record. Candidates other than the root, and everything
    under them, are detached from the returned tree.

The single-root rule mirrors the upload flow's one-CEO assumption. It is a
documented fallback, not a correctness guarantee; forests are not built.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .domain_types import BuildOutcome, TreeNode, coerce_records

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_hierarchy(records: Any) -> Optional[TreeNode]:
    """Return the root of a freshly built tree, or None for empty input."""
    return build_hierarchy_outcome(records).root


def build_hierarchy_outcome(records: Any) -> BuildOutcome:
    """
    Build the tree and report which fallbacks were applied.

    Assignment is a single pass in input order keyed by identity, so a
    node is attached at most once and never below one of its descendants.
    """
    batch = coerce_records(records)
    if not batch:
        return BuildOutcome()

    nodes: Dict[str, TreeNode] = {}
    skipped_rows: List[int] = []
    for index, record in enumerate(batch):
        key = record.key
        if not key or key in nodes:
            skipped_rows.append(index + 1)
            continue
        nodes[key] = TreeNode(record=record)

    if not nodes:
        return BuildOutcome(skipped_rows=skipped_rows)

    parent: Dict[str, str] = {}
    candidates: List[str] = []
    broken_cycles: List[str] = []

    for key, node in nodes.items():
        manager_key = node.record.manager_key
        if not manager_key or manager_key == key or manager_key not in nodes:
            candidates.append(key)
            continue
        if node.children and _reaches(manager_key, key, parent):
            broken_cycles.append(key)
            candidates.append(key)
            continue
        parent[key] = manager_key
        nodes[manager_key].children.append(node)

    used_fallback = False
    if candidates:
        root = nodes[candidates[-1]]
    else:
        # Unreachable while cycle breaking is in place; kept so the
        # builder always returns a tree.
        root = next(iter(nodes.values()))
        used_fallback = True

    reachable = {n.key for n in root.iter_nodes()}
    detached = [k for k in nodes if k not in reachable]

    if broken_cycles:
        logger.info(
            "Broke %d reporting cycle(s) at: %s",
            len(broken_cycles), ", ".join(broken_cycles),
        )
    if detached:
        logger.info(
            "Root %r chosen from %d candidate(s); %d record(s) detached",
            root.key, len(candidates), len(detached),
        )
    if skipped_rows:
        logger.debug("Skipped rows with blank or repeated ids: %s", skipped_rows)

    return BuildOutcome(
        root=root,
        root_candidates=candidates,
        detached=detached,
        broken_cycles=broken_cycles,
        skipped_rows=skipped_rows,
        used_fallback_root=used_fallback,
    )


# ---------------------------------------------------------------------------
# Helpers (private)
# ---------------------------------------------------------------------------

def _reaches(start: str, target: str, parent: Dict[str, str]) -> bool:
    """True if walking up assigned parents from ``start`` hits ``target``."""
    current: Optional[str] = start
    while current is not None:
        if current == target:
            return True
        current = parent.get(current)
    return False
