"""
Org Chart Kernel — Relation Audit v1.0

Stricter import-time audit of reporting relations. Unlike the record
validator this also flags multiple/no top-level employees and reporting
cycles, with enough detail to point the uploader at the offending rows.

Pure dict-based graph analysis. No external dependencies.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .domain_types import RelationIssue, coerce_records
from .identity import same_identity


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_relations(records: Any) -> List[RelationIssue]:
    """
    Audit reporting relations in three passes:
      1. missing ids, duplicates, self-references, top-level detection
      2. manager references resolve to a known employee
      3. reporting cycles
    Returns an empty list for a clean batch; never raises.
    """
    batch = coerce_records(records)
    if not batch:
        return []

    issues: List[RelationIssue] = []
    first_row: Dict[str, int] = {}
    top_level: List[str] = []

    for index, record in enumerate(batch):
        row = index + 1
        key = record.key
        manager_key = record.manager_key

        if not key:
            issues.append(RelationIssue(
                "Missing Employee ID",
                "An employee is missing their unique ID, which is required.",
                f"Row {row}",
            ))
        elif key in first_row:
            issues.append(RelationIssue(
                "Duplicate Employee ID",
                f'The employee ID "{key}" is used more than once. All IDs must be unique.',
                f"Row {row} is a duplicate of row {first_row[key]}",
            ))
        else:
            first_row[key] = row

        if same_identity(record.id, record.manager_id):
            issues.append(RelationIssue(
                "Self-Reference Error",
                f'Employee "{key}" cannot be their own manager.',
                f"Row {row}",
            ))

        if not manager_key:
            top_level.append(key)

    if len(top_level) > 1:
        issues.append(RelationIssue(
            "Multiple CEOs Found",
            "Your organization has more than one person without a manager. "
            "There should be only one CEO.",
            f"Found {len(top_level)} top-level employees: {', '.join(top_level)}",
        ))
    elif not top_level:
        issues.append(RelationIssue(
            "No CEO Found",
            "No employee was found without a manager. "
            "Your organization must have one top-level person (CEO).",
            "Please ensure at least one employee has a blank manager field.",
        ))

    for index, record in enumerate(batch):
        manager_key = record.manager_key
        if manager_key and manager_key not in first_row:
            issues.append(RelationIssue(
                "Manager Does Not Exist",
                "A manager listed for an employee does not exist as an employee in the file.",
                f'Row {index + 1}: Manager "{manager_key}" for Employee '
                f'"{record.key}" is not a valid employee.',
            ))

    for cycle in detect_cycles(batch):
        issues.append(RelationIssue(
            "Circular Reference Found",
            "A circular reporting structure (a loop) was detected.",
            f"Cycle path: {' → '.join(cycle)} → {cycle[0]}",
        ))

    return issues


def build_reporting_map(records: Any) -> Dict[str, List[str]]:
    """Forward map worker -> [manager], only for managers that are employees."""
    batch = coerce_records(records) or []
    known = {r.key for r in batch if r.key}
    adj: Dict[str, List[str]] = {}
    for record in batch:
        key, manager_key = record.key, record.manager_key
        if key and manager_key and manager_key in known:
            adj.setdefault(key, []).append(manager_key)
    return adj


def detect_cycles(records: Any) -> List[List[str]]:
    """
    Detect reporting cycles in the worker -> manager graph.

    Returns a list of cycles (each a list of identity keys in walk order),
    de-duplicated by member set. Uses iterative DFS with explicit colour
    tracking.
    """
    batch = coerce_records(records) or []
    adj = build_reporting_map(batch)

    nodes: List[str] = list(dict.fromkeys(r.key for r in batch if r.key))

    WHITE, GREY, BLACK = 0, 1, 2
    colour: Dict[str, int] = {n: WHITE for n in nodes}
    cycles: List[List[str]] = []

    def _dfs(start: str) -> None:
        stack: List[Tuple[str, int]] = [(start, 0)]
        colour[start] = GREY

        while stack:
            node, idx = stack[-1]
            neighbours = adj.get(node, [])
            if idx < len(neighbours):
                stack[-1] = (node, idx + 1)
                nbr = neighbours[idx]
                if colour.get(nbr, WHITE) == GREY:
                    path = [n for n, _ in stack]
                    cycles.append(path[path.index(nbr):])
                elif colour.get(nbr, WHITE) == WHITE:
                    colour[nbr] = GREY
                    stack.append((nbr, 0))
            else:
                colour[node] = BLACK
                stack.pop()

    for node in nodes:
        if colour[node] == WHITE:
            _dfs(node)

    unique: List[List[str]] = []
    seen: set = set()
    for cycle in cycles:
        signature = tuple(sorted(cycle))
        if signature not in seen:
            seen.add(signature)
            unique.append(cycle)
    return unique
