"""
Org Chart Kernel — Canonical Tree Hashing v1.0

Deterministic canonical serialization + SHA-256 hashing of a built tree.
Two trees hash equal iff they have the same nodes, the same parent/child
relationships, the same child order and the same change annotations.

Rules:
  - Nodes listed in pre-order
  - Each node: key, display name, manager key, change type, child keys
  - UTF-8 JSON, ASCII-escaped, no whitespace
  - Stats are excluded (derived data)
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, List, Optional

from .domain_types import TreeNode


def canonical_tree_serialize(root: Optional[TreeNode]) -> bytes:
    """Canonical serialization of a tree to UTF-8 JSON bytes."""
    obj = _build_canonical_dict(root)
    return json.dumps(obj, ensure_ascii=True, separators=(",", ":"), sort_keys=False).encode("utf-8")


def canonical_tree_hash(root: Optional[TreeNode]) -> str:
    """SHA-256 of canonical serialization. Lowercase hex string."""
    return hashlib.sha256(canonical_tree_serialize(root)).hexdigest()


def _build_canonical_dict(root: Optional[TreeNode]) -> Dict[str, Any]:
    nodes: List[Dict[str, Any]] = []
    if root is not None:
        for node in root.iter_nodes():
            nodes.append({
                "key": node.key,
                "name": node.name,
                "manager": node.record.manager_key,
                "change_type": node.change_type,
                "previous_manager_name": node.previous_manager_name,
                "children": [child.key for child in node.children],
            })
    return {
        "tree_version": 1,
        "root": root.key if root is not None else None,
        "nodes": nodes,
    }
