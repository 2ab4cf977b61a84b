"""
Org Chart Kernel — Core Domain Types v1.0

Pure data. No traversal logic beyond iteration helpers.
Raw record values are kept as supplied (ids may be ints, FTE may be the
string "abc"); normalization happens at the point of comparison.

────────────────────────────────────────────────
DOMAIN GLOSSARY
────────────────────────────────────────────────

Identity key:
    Normalized string form of a record's id, used for all equality/lookup.

Root candidate:
    A record whose manager reference is absent, empty, self-referential,
    unresolved, or would close a reporting cycle.

Baseline / Target:
    The two snapshots compared; baseline is the "before", target the "after".

Net change:
    Difference between current and baseline counts for a statistic at a node.

────────────────────────────────────────────────
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .constants import CHANGE_NONE, DEFAULT_FTE, MAX_FTE, MIN_FTE
from .identity import normalize_id


# ── Record field aliases ──────────────────────────────────────
# Accepts snake_case, the camelCase of the upload mapping, and the
# legacy "manager" key used by older snapshots.
_FIELD_ALIASES: Dict[str, tuple] = {
    "id": ("id",),
    "name": ("name",),
    "manager_id": ("manager_id", "managerId", "manager"),
    "title": ("title",),
    "department": ("department",),
    "location": ("location",),
    "job_family": ("job_family", "jobFamily"),
    "management_level": ("management_level", "managementLevel"),
    "fte": ("fte", "FTE"),
}

_ALIAS_TO_FIELD: Dict[str, str] = {
    alias: fname for fname, aliases in _FIELD_ALIASES.items() for alias in aliases
}


# ── Numeric helpers ───────────────────────────────────────────

def round_half_up(value: float, places: int) -> float:
    """Round half away from zero (spreadsheet rounding, not banker's)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_fte(raw: Any) -> Optional[float]:
    """
    Parse a raw FTE value.

    Returns None only when the value is absent (None). Anything else that
    is not numeric, blank strings included, comes back as NaN.
    """
    if raw is None or isinstance(raw, bool):
        return None if raw is None else math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    try:
        return float(str(raw).strip())
    except ValueError:
        return math.nan


def is_invalid_fte(raw: Any) -> bool:
    """True if an FTE is present but NaN or outside [MIN_FTE, MAX_FTE]."""
    value = parse_fte(raw)
    if value is None:
        return False
    return math.isnan(value) or value < MIN_FTE or value > MAX_FTE


def effective_fte(raw: Any) -> float:
    """FTE used for aggregation: DEFAULT_FTE when absent or invalid."""
    value = parse_fte(raw)
    if value is None or is_invalid_fte(raw):
        return DEFAULT_FTE
    return value


# ── Employee Record ───────────────────────────────────────────

@dataclass
class EmployeeRecord:
    """One flat input row, already mapped to the employee shape."""

    id: Any = None
    name: Any = None
    manager_id: Any = None
    title: Any = None
    department: Any = None
    location: Any = None
    job_family: Any = None
    management_level: Any = None
    fte: Any = None

    @property
    def key(self) -> str:
        return normalize_id(self.id)

    @property
    def manager_key(self) -> str:
        return normalize_id(self.manager_id)

    @property
    def display_name(self) -> str:
        """Trimmed name, falling back to the identity key when blank."""
        text = "" if self.name is None else str(self.name).strip()
        return text or self.key

    def has_name(self) -> bool:
        return self.name is not None and str(self.name).strip() != ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmployeeRecord":
        """Build a record from a plain mapping, honouring field aliases."""
        values: Dict[str, Any] = {}
        for key, value in data.items():
            fname = _ALIAS_TO_FIELD.get(key)
            if fname is not None and fname not in values:
                values[fname] = value
        return cls(**values)

    @classmethod
    def from_row(
        cls, row: Mapping[str, Any], column_mapping: Mapping[str, str],
    ) -> "EmployeeRecord":
        """
        Build a record from a raw upload row using a field -> column mapping,
        e.g. {"id": "Worker ID", "managerId": "Manager ID"}.
        Unknown fields and unmapped columns are ignored.
        """
        values: Dict[str, Any] = {}
        for mapped_field, column in column_mapping.items():
            fname = _ALIAS_TO_FIELD.get(mapped_field)
            if fname is None or not column or column not in row:
                continue
            values[fname] = row[column]
        return cls(**values)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "manager_id": self.manager_id,
            "title": self.title,
            "department": self.department,
            "location": self.location,
            "job_family": self.job_family,
            "management_level": self.management_level,
            "fte": self.fte,
        }


def coerce_record(item: Any) -> EmployeeRecord:
    """Turn any batch element into a record; unusable shapes become empty."""
    if isinstance(item, EmployeeRecord):
        return item
    if isinstance(item, Mapping):
        return EmployeeRecord.from_dict(item)
    return EmployeeRecord()


def coerce_records(items: Any) -> Optional[List[EmployeeRecord]]:
    """Coerce a batch; None when the input is not list-shaped."""
    if not isinstance(items, (list, tuple)):
        return None
    return [coerce_record(item) for item in items]


# ── Tree ──────────────────────────────────────────────────────

@dataclass
class NodeStats:
    """
    Rolled-up statistics for one node.

    Net-change fields stay None when the baseline has no entry for the
    node; None means "no data", 0 means "no change".
    """

    direct_reports: int = 0
    total_reports: int = 0
    total_fte: float = 0.0
    direct_reports_added: Optional[List[str]] = None
    direct_reports_removed: Optional[List[str]] = None
    direct_reports_net_change: Optional[int] = None
    total_reports_net_change: Optional[int] = None

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {
            "direct_reports": self.direct_reports,
            "total_reports": self.total_reports,
            "total_fte": self.total_fte,
        }
        if self.direct_reports_net_change is not None:
            out["direct_reports_added"] = list(self.direct_reports_added or [])
            out["direct_reports_removed"] = list(self.direct_reports_removed or [])
            out["direct_reports_net_change"] = self.direct_reports_net_change
        if self.total_reports_net_change is not None:
            out["total_reports_net_change"] = self.total_reports_net_change
        return out


@dataclass(eq=False)
class TreeNode:
    """Wraps exactly one EmployeeRecord. Child order is significant."""

    record: EmployeeRecord
    children: List["TreeNode"] = field(default_factory=list)
    change_type: str = CHANGE_NONE
    previous_manager: Any = None
    previous_manager_name: Optional[str] = None
    stats: Optional[NodeStats] = None

    @property
    def key(self) -> str:
        return self.record.key

    @property
    def name(self) -> str:
        return self.record.display_name

    def iter_nodes(self) -> Iterator["TreeNode"]:
        """Pre-order traversal with an explicit stack."""
        stack: List[TreeNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_post_order(self) -> Iterator["TreeNode"]:
        """Children before parent, with an explicit stack."""
        stack: List[tuple] = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                yield node
                continue
            stack.append((node, True))
            for child in reversed(node.children):
                stack.append((child, False))

    def to_dict(self) -> dict:
        """Nested plain dict for the rendering layer (no recursion limit)."""
        root_out: Dict[str, Any] = {}
        stack: List[tuple] = [(self, root_out)]
        while stack:
            node, out = stack.pop()
            out.update(node.record.to_dict())
            out["key"] = node.key
            out["change_type"] = node.change_type
            if node.change_type != CHANGE_NONE and node.previous_manager_name is not None:
                out["previous_manager"] = node.previous_manager
                out["previous_manager_name"] = node.previous_manager_name
            if node.stats is not None:
                out["stats"] = node.stats.to_dict()
            out["children"] = []
            for child in node.children:
                child_out: Dict[str, Any] = {}
                out["children"].append(child_out)
                stack.append((child, child_out))
        return root_out


@dataclass(frozen=True)
class BuildOutcome:
    """
    Result of a hierarchy build, including the structural fallbacks that
    were applied silently. Keys are identity keys, in input order.
    """

    root: Optional[TreeNode] = None
    root_candidates: List[str] = field(default_factory=list)
    detached: List[str] = field(default_factory=list)
    broken_cycles: List[str] = field(default_factory=list)
    skipped_rows: List[int] = field(default_factory=list)
    used_fallback_root: bool = False


# ── Validation ────────────────────────────────────────────────

@dataclass
class ValidationStats:
    total_employees: int = 0
    unique_managers: int = 0
    hierarchy_levels: int = 0
    orphaned_managers: int = 0
    average_team_size: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_employees": self.total_employees,
            "unique_managers": self.unique_managers,
            "hierarchy_levels": self.hierarchy_levels,
            "orphaned_managers": self.orphaned_managers,
            "average_team_size": self.average_team_size,
        }


@dataclass
class ValidationReport:
    """Errors block finalization; warnings never do."""

    total_rows: int = 0
    valid_rows: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats: ValidationStats = field(default_factory=ValidationStats)

    @property
    def can_finalize(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "valid_rows": self.valid_rows,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "stats": self.stats.to_dict(),
        }


@dataclass(frozen=True)
class RelationIssue:
    """One structural finding from the stricter import-time relation audit."""

    issue_type: str
    message: str
    details: str

    def to_dict(self) -> dict:
        return {"type": self.issue_type, "message": self.message, "details": self.details}


# ── Comparison ────────────────────────────────────────────────

@dataclass
class ClassifiedRecord:
    """A record tagged with its change classification."""

    record: EmployeeRecord
    change_type: str
    previous_manager: Any = None
    previous_manager_name: Optional[str] = None

    @property
    def key(self) -> str:
        return self.record.key

    @property
    def name(self) -> str:
        return self.record.display_name

    def to_dict(self) -> dict:
        out = self.record.to_dict()
        out["change_type"] = self.change_type
        if self.previous_manager_name is not None:
            out["previous_manager"] = self.previous_manager
            out["previous_manager_name"] = self.previous_manager_name
        return out


@dataclass
class ChangeAnalysis:
    added: List[ClassifiedRecord] = field(default_factory=list)
    removed: List[ClassifiedRecord] = field(default_factory=list)
    moved: List[ClassifiedRecord] = field(default_factory=list)
    total_direct_changes: int = 0

    def to_dict(self) -> dict:
        return {
            "added": [c.to_dict() for c in self.added],
            "removed": [c.to_dict() for c in self.removed],
            "moved": [c.to_dict() for c in self.moved],
            "total_direct_changes": self.total_direct_changes,
        }


@dataclass(frozen=True)
class ComparisonMaps:
    """
    Baseline lookups consumed by the statistics aggregator.
    Read-only for a comparison session; rebuild when the baseline changes.
    """

    previous_manager_map: Dict[str, str] = field(default_factory=dict)
    direct_reports_map: Dict[str, List[str]] = field(default_factory=dict)
    total_reports_map: Dict[str, int] = field(default_factory=dict)
    baseline_names: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "previous_manager_map": dict(self.previous_manager_map),
            "direct_reports_map": {k: list(v) for k, v in self.direct_reports_map.items()},
            "total_reports_map": dict(self.total_reports_map),
        }
