"""
Org Chart Kernel v1.0 — Comparison, Audit and Tree Checks

Covers:
  - moves with resolved / unknown previous managers
  - child ordering (changed first, stable within groups)
  - baseline comparison maps
  - relation audit and cycle detection
  - validator messages and batch statistics
  - tree invariant failures
  - canonical hash sensitivity
  - diagnostics
  - change-first ordering on a fresh comparison, three-person cycles

Run:  python -m orgchart_kernel.test_comparison
"""

from __future__ import annotations

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orgchart_kernel.builder import build_hierarchy, build_hierarchy_outcome
from orgchart_kernel.comparison import (
    annotate_tree,
    build_comparison_maps,
    classify_changes,
)
from orgchart_kernel.constants import (
    CHANGE_ADDED,
    CHANGE_MOVED,
    CHANGE_NONE,
    CHANGE_REMOVED,
    UNKNOWN_MANAGER_NAME,
)
from orgchart_kernel.diagnostics import compute_chart_diagnostics
from orgchart_kernel.domain_types import EmployeeRecord, TreeNode, effective_fte, parse_fte
from orgchart_kernel.engine import build_comparison_view
from orgchart_kernel.hashing import canonical_tree_hash
from orgchart_kernel.invariants import (
    TreeInvariantViolationError,
    validate_tree_invariants,
)
from orgchart_kernel.ordering import reorder_children
from orgchart_kernel.relations import detect_cycles, validate_relations
from orgchart_kernel.statistics import compute_stats
from orgchart_kernel.validation import validate_records


def _header(title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


def _rec(emp_id, name, manager=None, **extra) -> dict:
    out = {"id": emp_id, "name": name, "managerId": manager}
    out.update(extra)
    return out


BASE = [
    _rec("1", "Alice"),
    _rec("2", "Bob", "1"),
    _rec("3", "Cara", "1"),
    _rec("4", "Dan", "2"),
    _rec("5", "Eli", "2"),
]


# ───────────────────────────────────────────────────────────────
# Moves
# ───────────────────────────────────────────────────────────────

def test_move_records_previous_manager() -> None:
    _header("Moves -- previous manager resolved from the baseline")
    target = [
        _rec("1", "Alice"),
        _rec("2", "Bob", "1"),
        _rec("3", "Cara", "1"),
        _rec("4", "Dan", "3"),
        _rec("5", "Eli", "2"),
    ]
    analysis = classify_changes(BASE, target)
    assert analysis.added == [] and analysis.removed == []
    assert [c.key for c in analysis.moved] == ["4"]
    moved = analysis.moved[0]
    assert moved.change_type == CHANGE_MOVED
    assert moved.previous_manager == "2"
    assert moved.previous_manager_name == "Bob"
    assert analysis.total_direct_changes == 1

    view = build_comparison_view(BASE, target)
    cara = next(n for n in view.root.iter_nodes() if n.key == "3")
    bob = next(n for n in view.root.iter_nodes() if n.key == "2")
    assert cara.children[0].change_type == CHANGE_MOVED
    assert cara.children[0].previous_manager_name == "Bob"
    assert cara.stats.direct_reports_added == ["Dan"]
    assert cara.stats.direct_reports_net_change == 1
    assert cara.stats.total_reports_net_change == 1
    assert bob.stats.direct_reports_removed == ["Dan"]
    assert bob.stats.direct_reports_net_change == -1
    assert bob.stats.total_reports_net_change == -1
    assert view.root.stats.total_reports_net_change == 0
    validate_tree_invariants(view.root)
    print("\n[PASS] Move PASSED")


def test_move_from_unknown_manager() -> None:
    _header("Moves -- previous manager missing from baseline")
    before = [_rec("1", "Alice"), _rec("2", "Bob", "99")]
    after = [_rec("1", "Alice"), _rec("2", "Bob", "1")]
    analysis = classify_changes(before, after)
    assert len(analysis.moved) == 1
    assert analysis.moved[0].previous_manager_name == UNKNOWN_MANAGER_NAME
    print("\n[PASS] Unknown manager PASSED")


def test_classify_identical_batches() -> None:
    _header("Classification -- baseline equals target")
    analysis = classify_changes(BASE, list(BASE))
    assert analysis.added == []
    assert analysis.removed == []
    assert analysis.moved == []
    assert analysis.total_direct_changes == 0
    assert [c.change_type for c in classify_changes(BASE, []).removed] == [CHANGE_REMOVED] * 5
    print("\n[PASS] Identical batches PASSED")


# ───────────────────────────────────────────────────────────────
# Ordering and annotation
# ───────────────────────────────────────────────────────────────

def test_reorder_children_is_stable() -> None:
    _header("Ordering -- changed first, stable within groups")
    kids = []
    for key, change in [("a", CHANGE_NONE), ("b", CHANGE_MOVED), ("c", CHANGE_NONE),
                        ("d", CHANGE_ADDED), ("e", CHANGE_NONE)]:
        node = TreeNode(record=EmployeeRecord(id=key, name=key.upper()))
        node.change_type = change
        kids.append(node)

    ordered = reorder_children(kids)
    assert [n.key for n in ordered] == ["b", "d", "a", "c", "e"]
    assert [n.key for n in kids] == ["a", "b", "c", "d", "e"]
    print("\n[PASS] Ordering PASSED")


def test_annotate_resets_stale_marks() -> None:
    _header("Annotation -- second pass clears earlier marks")
    target = BASE + [_rec("6", "Fay", "1")]
    root = build_hierarchy(target)
    annotate_tree(root, classify_changes(BASE, target))
    assert [c.key for c in root.children] == ["6", "2", "3"]

    annotate_tree(root, classify_changes(target, target))
    assert all(n.change_type == CHANGE_NONE for n in root.iter_nodes())
    print("\n[PASS] Annotation reset PASSED")


# ───────────────────────────────────────────────────────────────
# Comparison maps
# ───────────────────────────────────────────────────────────────

def test_comparison_maps() -> None:
    _header("Comparison maps -- baseline lookups")
    records = BASE + [_rec("7", "Gus", "7")]
    maps = build_comparison_maps(records, build_hierarchy(BASE))
    assert maps.previous_manager_map["4"] == "Bob"
    assert "1" not in maps.previous_manager_map
    assert maps.direct_reports_map["1"] == ["2", "3"]
    assert maps.direct_reports_map["5"] == []
    assert maps.direct_reports_map["7"] == []
    assert maps.total_reports_map["1"] == 4
    assert maps.total_reports_map["2"] == 2
    assert maps.baseline_names["3"] == "Cara"
    print("\n[PASS] Comparison maps PASSED")


def test_stats_without_baseline() -> None:
    _header("Statistics -- plain rollup")
    root = build_hierarchy([_rec("1", "A", fte=0.333), _rec("2", "B", "1", fte=0.333),
                            _rec("3", "C", "2", fte=0.334)])
    stats = compute_stats(root)
    assert stats.direct_reports == 1
    assert stats.total_reports == 2
    assert stats.total_fte == 1.0
    assert stats.direct_reports_net_change is None
    assert compute_stats(None) is None
    print("\n[PASS] Plain stats PASSED")


# ───────────────────────────────────────────────────────────────
# Validator
# ───────────────────────────────────────────────────────────────

def test_validator_messages() -> None:
    _header("Validator -- messages, order and statistics")
    records = [
        _rec("1", "Alice"),
        _rec("", "Nobody", "1"),
        _rec("3", "  ", "1"),
        _rec("4", "Self", "4"),
        _rec("5", "Eve", "M1"),
        _rec("6", "Fay", "M2"),
    ]
    report = validate_records(records)
    assert report.errors == [
        "Missing employee ID in row 2",
        "Missing employee name in row 3",
        'Employee "Self" (4) reports to themselves in row 4',
    ], report.errors
    assert report.warnings == [
        "Found 2 manager IDs that don't exist as employees: M1, M2",
    ], report.warnings
    assert report.total_rows == 6
    assert report.valid_rows == 4
    assert report.stats.total_employees == 5
    assert report.stats.unique_managers == 4
    assert report.stats.orphaned_managers == 2
    print("\n[PASS] Validator PASSED")


def test_validator_orphan_overflow() -> None:
    _header("Validator -- orphan preview is capped")
    records = [_rec("1", "Root")] + [
        _rec(str(10 + i), f"E{i}", f"X{i}") for i in range(7)
    ]
    report = validate_records(records)
    assert report.warnings == [
        "Found 7 manager IDs that don't exist as employees: "
        "X0, X1, X2, X3, X4 (and 2 more)"
    ], report.warnings
    print("\n[PASS] Orphan overflow PASSED")


def test_validator_levels_and_team_size() -> None:
    _header("Validator -- hierarchy levels and team size")
    report = validate_records(BASE)
    assert report.stats.hierarchy_levels == 2
    # teams: 1 -> {2, 3}, 2 -> {4, 5}
    assert report.stats.average_team_size == 2.0

    cyclic = [_rec("A", "Ann", "B"), _rec("B", "Ben", "A")]
    assert validate_records(cyclic).stats.hierarchy_levels == 2
    print("\n[PASS] Levels PASSED")


# ───────────────────────────────────────────────────────────────
# Relation audit
# ───────────────────────────────────────────────────────────────

def test_relation_audit() -> None:
    _header("Relation audit -- structural findings")
    records = [
        _rec("1", "Alice"),
        _rec("2", "Bob"),
        _rec("2", "Bobby", "1"),
        _rec("3", "Cara", "3"),
        _rec("4", "Dan", "404"),
        _rec("5", "Eve", "6"),
        _rec("6", "Fay", "5"),
    ]
    issues = validate_relations(records)
    types = [i.issue_type for i in issues]
    assert "Duplicate Employee ID" in types
    assert "Self-Reference Error" in types
    assert "Multiple CEOs Found" in types
    assert "Manager Does Not Exist" in types
    assert types.count("Circular Reference Found") == 2  # 3 -> 3 and 5 <-> 6

    dup = next(i for i in issues if i.issue_type == "Duplicate Employee ID")
    assert dup.details == "Row 3 is a duplicate of row 2"
    missing = next(i for i in issues if i.issue_type == "Manager Does Not Exist")
    assert '"404"' in missing.details
    assert dup.to_dict()["type"] == "Duplicate Employee ID"

    no_ceo = validate_relations([_rec("1", "A", "2"), _rec("2", "B", "1")])
    assert [i.issue_type for i in no_ceo] == ["No CEO Found", "Circular Reference Found"]
    assert validate_relations(BASE) == []
    assert validate_relations(None) == []
    print("\n[PASS] Relation audit PASSED")


def test_detect_cycles() -> None:
    _header("Cycle detection -- dedup by member set")
    records = [
        _rec("A", "a", "B"),
        _rec("B", "b", "C"),
        _rec("C", "c", "A"),
        _rec("D", "d", "A"),
    ]
    cycles = detect_cycles(records)
    assert len(cycles) == 1
    assert sorted(cycles[0]) == ["A", "B", "C"]
    assert detect_cycles(BASE) == []
    print("\n[PASS] Cycle detection PASSED")


# ───────────────────────────────────────────────────────────────
# Tree invariants
# ───────────────────────────────────────────────────────────────

def test_invariants_detect_tampering() -> None:
    _header("Tree invariants -- tampered trees are rejected")

    root = build_hierarchy(BASE)
    compute_stats(root)
    validate_tree_invariants(root)

    root.stats.total_reports += 1
    try:
        validate_tree_invariants(root)
        raise AssertionError("expected total_reports violation")
    except TreeInvariantViolationError as e:
        assert e.rule == "total_reports"
        assert str(e).startswith("[INVARIANT:total_reports]")

    root = build_hierarchy(BASE)
    root.children[0].children.append(root.children[1])
    try:
        validate_tree_invariants(root)
        raise AssertionError("expected shared-node violation")
    except TreeInvariantViolationError as e:
        assert e.rule == "node_reachable_twice"

    root = build_hierarchy(BASE)
    root.children[0].change_type = CHANGE_REMOVED
    try:
        validate_tree_invariants(root)
        raise AssertionError("expected change_type violation")
    except TreeInvariantViolationError as e:
        assert e.rule == "change_type"

    validate_tree_invariants(None)
    print("\n[PASS] Invariants PASSED")


# ───────────────────────────────────────────────────────────────
# Hashing and diagnostics
# ───────────────────────────────────────────────────────────────

def test_hash_sensitivity() -> None:
    _header("Hashing -- stable, order and annotation sensitive")
    h1 = canonical_tree_hash(build_hierarchy(BASE))
    h2 = canonical_tree_hash(build_hierarchy(list(BASE)))
    assert h1 == h2
    assert len(h1) == 64

    swapped = [BASE[0], BASE[2], BASE[1], BASE[3], BASE[4]]
    assert canonical_tree_hash(build_hierarchy(swapped)) != h1

    root = build_hierarchy(BASE)
    compute_stats(root)
    assert canonical_tree_hash(root) == h1

    root.children[0].change_type = CHANGE_MOVED
    assert canonical_tree_hash(root) != h1
    assert canonical_tree_hash(None) == canonical_tree_hash(None)
    print("\n[PASS] Hashing PASSED")


def test_diagnostics() -> None:
    _header("Diagnostics -- shape summary")
    records = BASE + [_rec("8", "Orphan", "missing"), _rec("9", "Lone")]
    root = build_hierarchy(records)
    diag = compute_chart_diagnostics(root, records)
    # last root candidate wins: "9" is the root, the rest is detached
    assert root.key == "9"
    assert diag["node_count"] == 1
    assert diag["unreachable_count"] == 6
    assert diag["depth"] == 1
    assert len(diag["warnings"]) == 1

    diag = compute_chart_diagnostics(build_hierarchy(BASE), BASE)
    assert diag == {
        "node_count": 5,
        "manager_count": 2,
        "leaf_count": 3,
        "depth": 3,
        "max_span": 2,
        "total_fte": 5.0,
        "unreachable_count": 0,
        "warnings": [],
    }, diag

    wide = [_rec("0", "Boss")] + [_rec(str(i), f"W{i}", "0") for i in range(1, 18)]
    diag = compute_chart_diagnostics(build_hierarchy(wide))
    assert diag["max_span"] == 17
    assert "more than 15 direct reports" in diag["warnings"][0]
    print("\n[PASS] Diagnostics PASSED")


# ───────────────────────────────────────────────────────────────
# Change-first ordering on a fresh comparison
# ───────────────────────────────────────────────────────────────

def test_fresh_comparison_surfaces_changes_first() -> None:
    _header("Ordering -- new hire and mover lead their siblings")
    target = BASE + [_rec("6", "Fay", "1")]
    target[4] = _rec("5", "Eli", "3")
    target.append(_rec("7", "Gus", "3"))
    view = build_comparison_view(BASE, target)
    root = view.root
    assert [c.key for c in root.children] == ["6", "2", "3"], [c.key for c in root.children]
    cara = root.children[2]
    assert [c.key for c in cara.children] == ["5", "7"]
    assert [c.change_type for c in cara.children] == [CHANGE_MOVED, CHANGE_ADDED]
    assert cara.children[0].previous_manager_name == "Bob"

    body = view.to_dict()
    assert [c["key"] for c in body["tree"]["children"]] == ["6", "2", "3"]
    assert body["baseline_maps"]["direct_reports_map"]["2"] == ["4", "5"]
    print("\n[PASS] Fresh ordering PASSED")


def test_three_cycle_with_tail() -> None:
    _header("Builder -- three-person cycle with a tail")
    records = [
        _rec("A", "Ann", "C"),
        _rec("B", "Ben", "A"),
        _rec("C", "Cal", "B"),
        _rec("T", "Tia", "A"),
    ]
    outcome = build_hierarchy_outcome(records)
    assert outcome.broken_cycles == ["C"]
    assert outcome.root_candidates == ["C"]
    assert outcome.detached == []
    assert not outcome.used_fallback_root

    root = outcome.root
    compute_stats(root)
    validate_tree_invariants(root)
    assert root.key == "C"
    assert root.stats.total_reports == 3
    ann = root.children[0]
    assert ann.key == "A"
    assert [c.key for c in ann.children] == ["B", "T"]
    print("\n[PASS] Three-cycle PASSED")


def test_blank_fte_is_flagged() -> None:
    _header("Validator -- blank FTE warns, absent FTE does not")
    records = [
        _rec("1", "Alice"),
        _rec("2", "Bob", "1", fte=""),
        _rec("3", "Cara", "1", fte="   "),
        _rec("4", "Dan", "1", fte=None),
    ]
    report = validate_records(records)
    assert report.warnings == [
        'Invalid FTE value "" in row 2 (should be 0-2)',
        'Invalid FTE value "   " in row 3 (should be 0-2)',
    ], report.warnings
    assert effective_fte("") == 1.0
    assert parse_fte(None) is None

    root = build_hierarchy(records)
    assert compute_stats(root).total_fte == 4.0
    print("\n[PASS] Blank FTE PASSED")


def test_self_reference_across_id_spellings() -> None:
    _header("Validator -- self-reference compares identity keys")
    records = [_rec("1", "Alice"), {"id": 9, "name": "Nina", "managerId": 9.0}]
    report = validate_records(records)
    assert report.errors == ['Employee "Nina" (9) reports to themselves in row 2']
    issues = validate_relations(records)
    assert "Self-Reference Error" in [i.issue_type for i in issues]
    print("\n[PASS] Self-reference spellings PASSED")


# ───────────────────────────────────────────────────────────────
# Runner
# ───────────────────────────────────────────────────────────────

def main() -> None:
    results = []
    for fn in [
        test_move_records_previous_manager,
        test_move_from_unknown_manager,
        test_classify_identical_batches,
        test_reorder_children_is_stable,
        test_annotate_resets_stale_marks,
        test_comparison_maps,
        test_stats_without_baseline,
        test_validator_messages,
        test_validator_orphan_overflow,
        test_validator_levels_and_team_size,
        test_relation_audit,
        test_detect_cycles,
        test_invariants_detect_tampering,
        test_hash_sensitivity,
        test_diagnostics,
        test_fresh_comparison_surfaces_changes_first,
        test_three_cycle_with_tail,
        test_blank_fte_is_flagged,
        test_self_reference_across_id_spellings,
    ]:
        try:
            fn()
            results.append(True)
        except Exception as e:
            print(f"\n[ERROR] UNEXPECTED ERROR in {fn.__name__}: {e}")
            import traceback
            traceback.print_exc()
            results.append(False)

    print(f"\n{'='*60}")
    passed = sum(results)
    total = len(results)
    print(f"  RESULTS: {passed}/{total} checks passed")
    print(f"{'='*60}")
    sys.exit(0 if all(results) else 1)


if __name__ == "__main__":
    main()
