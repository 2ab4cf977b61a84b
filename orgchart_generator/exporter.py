"""
JSON Roster Exporter.

Exports a generated roster + metadata to a JSON file.
Never exports built trees; the roster is the only source of truth.
"""

from __future__ import annotations

import json
from typing import List

from .roster_spec import RosterSpec


def export_roster(
    records: List[dict],
    path: str,
    spec: RosterSpec,
    seed: int,
) -> None:
    """
    Write roster + metadata to a JSON file.

    Output format:
    {
        "metadata": {"seed": int, "spec": {...}},
        "employees": [record, ...]
    }
    """
    doc = {
        "metadata": {
            "seed": seed,
            "spec": spec.to_dict(),
        },
        "employees": records,
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc, f, ensure_ascii=True, indent=2)
