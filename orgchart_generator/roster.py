"""
Roster Compiler — Deterministic generator producing valid employee batches.

generate_roster(spec, seed) → List[dict]
mutate_roster(records, seed, hires, exits, moves) → List[dict]

Records use the upload shape (id, name, managerId, title, location,
jobFamily, managementLevel, fte). Output is validated through the kernel
before returning: a generated batch always has a clean report and a
single root that reaches every record.
"""

from __future__ import annotations

import copy
from typing import Dict, List, Set

from orgchart_kernel.builder import build_hierarchy_outcome
from orgchart_kernel.identity import normalize_id
from orgchart_kernel.validation import validate_records

from .deterministic_rng import DeterministicRNG
from .roster_spec import RosterSpec


_FIRST_NAMES = [
    "Alice", "Bruno", "Cara", "Dmitri", "Elena", "Farid", "Greta", "Hugo",
    "Ines", "Jonas", "Katja", "Luca", "Mira", "Noah", "Olga", "Pavel",
]
_LAST_NAMES = [
    "Berger", "Costa", "Dietrich", "Engel", "Fischer", "Gruber", "Horvat",
    "Ivanova", "Jansen", "Keller", "Lang", "Moser",
]
_TITLES_BY_DEPTH = [
    "Chief Executive Officer",
    "Vice President",
    "Director",
    "Manager",
    "Team Lead",
]
_TITLE_DEFAULT = "Specialist"


class GeneratorInvariantError(Exception):
    """Raised when a generated roster fails kernel validation."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Generated roster failed validation: {detail}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_roster(spec: RosterSpec, seed: int) -> List[dict]:
    """
    Build a single-root roster of ``spec.employee_count`` employees.
    Each new employee reports to a random existing employee whose span is
    still below ``spec.max_span``.

    Raises GeneratorInvariantError if the result is not a clean tree.
    """
    rng = DeterministicRNG(seed)
    records: List[dict] = []
    depth: Dict[str, int] = {}
    span: Dict[str, int] = {}
    open_managers: List[str] = []

    for n in range(1, spec.employee_count + 1):
        emp_id = f"{spec.id_prefix}{n:04d}"
        if not open_managers:
            manager_id = None
            level = 0
        else:
            manager_id = rng.rand_choice(open_managers)
            level = depth[manager_id] + 1
            span[manager_id] += 1
            if span[manager_id] >= spec.max_span:
                open_managers.remove(manager_id)

        depth[emp_id] = level
        span[emp_id] = 0
        if spec.max_span > 0:
            open_managers.append(emp_id)
        records.append(_make_record(rng, spec, emp_id, manager_id, level))

    _verify(records)
    return records


def mutate_roster(
    records: List[dict],
    seed: int,
    hires: int = 0,
    exits: int = 0,
    moves: int = 0,
) -> List[dict]:
    """
    Derive a target snapshot from a baseline roster.

    exits  remove employees that have no reports (so nobody is orphaned)
    moves  reassign distinct non-root employees to a manager outside
           their own subtree
    hires  add new employees under random existing managers

    Counts are capped by what the roster allows. The input is not mutated.
    """
    rng = DeterministicRNG(seed)
    exit_rng, move_rng, hire_rng = rng.fork("exits"), rng.fork("moves"), rng.fork("hires")
    target = [copy.deepcopy(r) for r in records]
    by_id = {normalize_id(r["id"]): r for r in target}

    for _ in range(exits):
        reports = _reports_map(target)
        leaves = [
            k for k, r in by_id.items()
            if normalize_id(r.get("managerId")) and not reports.get(k)
        ]
        if not leaves:
            break
        gone = exit_rng.rand_choice(leaves)
        target.remove(by_id.pop(gone))

    movable = [k for k, r in by_id.items() if normalize_id(r.get("managerId"))]
    for key in move_rng.sample(movable, moves):
        record = by_id[key]
        blocked = _subtree(key, _reports_map(target)) | {normalize_id(record["managerId"])}
        options = [k for k in by_id if k not in blocked]
        if not options:
            continue
        record["managerId"] = move_rng.rand_choice(options)

    spec = RosterSpec(employee_count=0)
    next_n = len(records) + 1
    for _ in range(hires):
        emp_id = f"H{next_n:04d}"
        while emp_id in by_id:
            next_n += 1
            emp_id = f"H{next_n:04d}"
        manager_id = hire_rng.rand_choice(list(by_id)) if by_id else None
        record = _make_record(hire_rng, spec, emp_id, manager_id, len(_TITLES_BY_DEPTH))
        target.append(record)
        by_id[emp_id] = record
        next_n += 1

    _verify(target)
    return target


# ---------------------------------------------------------------------------
# Helpers (private)
# ---------------------------------------------------------------------------

def _make_record(
    rng: DeterministicRNG,
    spec: RosterSpec,
    emp_id: str,
    manager_id,
    level: int,
) -> dict:
    title = _TITLES_BY_DEPTH[level] if level < len(_TITLES_BY_DEPTH) else _TITLE_DEFAULT
    return {
        "id": emp_id,
        "name": rng.full_name(_FIRST_NAMES, _LAST_NAMES),
        "managerId": manager_id,
        "title": title,
        "location": rng.rand_choice(spec.locations),
        "jobFamily": rng.rand_choice(spec.job_families),
        "managementLevel": f"L{min(level, 5) + 1}",
        "fte": rng.rand_choice(spec.fte_choices),
    }


def _reports_map(records: List[dict]) -> Dict[str, List[str]]:
    reports: Dict[str, List[str]] = {}
    for r in records:
        manager_key = normalize_id(r.get("managerId"))
        if manager_key:
            reports.setdefault(manager_key, []).append(normalize_id(r["id"]))
    return reports


def _subtree(key: str, reports: Dict[str, List[str]]) -> Set[str]:
    seen: Set[str] = set()
    stack = [key]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        stack.extend(reports.get(current, []))
    return seen


def _verify(records: List[dict]) -> None:
    if not records:
        return
    report = validate_records(records)
    if report.errors:
        raise GeneratorInvariantError("; ".join(report.errors[:3]))
    outcome = build_hierarchy_outcome(records)
    if outcome.detached or outcome.broken_cycles:
        raise GeneratorInvariantError(
            f"{len(outcome.detached)} detached, {len(outcome.broken_cycles)} cycle(s)"
        )
