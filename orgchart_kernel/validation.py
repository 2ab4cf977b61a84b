"""
Org Chart Kernel — Record Validator v1.0

Inspects a flat record batch for structural defects and produces a
ValidationReport. Never raises for malformed data: blocking problems go
to ``errors``, non-blocking ones to ``warnings``.

Row numbers in messages are 1-based positions in the input batch.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List

from .constants import NO_DATA_ERROR, ORPHAN_PREVIEW_LIMIT, TEAM_SIZE_DECIMALS
from .identity import same_identity
from .domain_types import (
    EmployeeRecord,
    ValidationReport,
    ValidationStats,
    coerce_records,
    is_invalid_fte,
    round_half_up,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_records(records: Any) -> ValidationReport:
    """
    Run all per-record checks, then the aggregate orphaned-manager check,
    and compute batch statistics.

    Per-record checks accumulate (no short-circuit), in order:
      missing id, missing name, duplicate id, self-management, invalid FTE.
    """
    batch = coerce_records(records)
    if batch is None:
        return ValidationReport(errors=[NO_DATA_ERROR])

    report = ValidationReport(total_rows=len(batch))
    employee_map: Dict[str, EmployeeRecord] = {}
    referenced_managers: Dict[str, None] = {}  # ordered set

    for index, record in enumerate(batch):
        row = index + 1
        key = record.key
        manager_key = record.manager_key

        if not key:
            report.errors.append(f"Missing employee ID in row {row}")

        if not record.has_name():
            report.errors.append(f"Missing employee name in row {row}")

        if key:
            if key in employee_map:
                report.errors.append(f'Duplicate employee ID "{key}" found in row {row}')
            else:
                employee_map[key] = record

        if same_identity(record.id, record.manager_id):
            report.errors.append(
                f'Employee "{record.display_name}" ({key}) reports to themselves in row {row}'
            )

        if is_invalid_fte(record.fte):
            report.warnings.append(
                f'Invalid FTE value "{record.fte}" in row {row} (should be 0-2)'
            )

        if manager_key:
            referenced_managers.setdefault(manager_key, None)

        if key and record.has_name():
            report.valid_rows += 1

    orphaned = [m for m in referenced_managers if m not in employee_map]
    if orphaned:
        report.warnings.append(_orphan_warning(orphaned))

    report.stats = ValidationStats(
        total_employees=len(employee_map),
        unique_managers=len(referenced_managers),
        hierarchy_levels=compute_hierarchy_levels(employee_map),
        orphaned_managers=len(orphaned),
        average_team_size=compute_average_team_size(employee_map),
    )
    return report


def compute_hierarchy_levels(employee_map: Dict[str, EmployeeRecord]) -> int:
    """
    Longest manager chain over all employees.

    Each walk keeps its own visited set; revisiting a node ends the walk,
    so a reporting cycle contributes the steps taken before it closed.
    """
    max_level = 0
    for record in employee_map.values():
        level = 0
        visited: set = set()
        current = record
        while current.manager_key and current.key not in visited:
            visited.add(current.key)
            manager = employee_map.get(current.manager_key)
            if manager is None:
                break
            level += 1
            current = manager
        max_level = max(max_level, level)
    return max_level


def compute_average_team_size(employee_map: Dict[str, EmployeeRecord]) -> float:
    """Mean direct-report count over managers with at least one report."""
    team_sizes = Counter(
        r.manager_key for r in employee_map.values() if r.manager_key
    )
    if not team_sizes:
        return 0.0
    average = sum(team_sizes.values()) / len(team_sizes)
    return round_half_up(average, TEAM_SIZE_DECIMALS)


# ---------------------------------------------------------------------------
# Helpers (private)
# ---------------------------------------------------------------------------

def _orphan_warning(orphaned: List[str]) -> str:
    preview = ", ".join(orphaned[:ORPHAN_PREVIEW_LIMIT])
    message = (
        f"Found {len(orphaned)} manager IDs that don't exist as employees: {preview}"
    )
    remainder = len(orphaned) - ORPHAN_PREVIEW_LIMIT
    if remainder > 0:
        message += f" (and {remainder} more)"
    return message
