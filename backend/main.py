# file: backend/main.py
"""
FastAPI Backend — Org Chart Kernel API v1.

Stateless: every request builds from the records it carries.
No in-memory state between requests.

Endpoints:
  GET  /health     — liveness
  POST /validate   — validation report + relation audit
  POST /hierarchy  — chart view of one snapshot
  POST /compare    — comparison view of baseline vs. target
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# Add project root to path for kernel imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orgchart_kernel.comparison import index_records
from orgchart_kernel.domain_types import EmployeeRecord
from orgchart_kernel.engine import build_chart_view, build_comparison_view
from orgchart_kernel.relations import validate_relations
from orgchart_kernel.validation import validate_records

from orgchart_runtime.drift import summarize_changes

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
API_VERSION = "1.0.0"

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="OrgChart API",
    version=API_VERSION,
    description="Deterministic org chart construction and comparison API",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        FRONTEND_URL,
        "http://localhost:3000",
        "http://localhost:3001",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RecordsRequest(BaseModel):
    records: List[Dict[str, Any]]
    column_mapping: Optional[Dict[str, str]] = None


class CompareRequest(BaseModel):
    baseline: List[Dict[str, Any]]
    target: List[Dict[str, Any]]
    column_mapping: Optional[Dict[str, str]] = None


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _map_rows(
    rows: List[Dict[str, Any]], column_mapping: Optional[Dict[str, str]],
) -> list:
    """Apply the upload column mapping; without one, rows pass through as-is."""
    if not column_mapping:
        return rows
    return [EmployeeRecord.from_row(row, column_mapping) for row in rows]


def _internal_error(action: str, exc: Exception) -> HTTPException:
    logger.exception("%s failed", action)
    return HTTPException(status_code=500, detail=f"{action} failed: {exc}")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.post("/validate")
def validate(req: RecordsRequest):
    """
    Validation report for the upload screen. ``can_finalize`` gates the
    finalize action; relation issues are informational.
    """
    records = _map_rows(req.records, req.column_mapping)
    try:
        report = validate_records(records)
        issues = validate_relations(records)
    except Exception as exc:
        raise _internal_error("Validation", exc)

    logger.info(
        "Validated %d row(s): %d error(s), %d warning(s), %d relation issue(s)",
        report.total_rows, len(report.errors), len(report.warnings), len(issues),
    )
    return {
        "report": report.to_dict(),
        "relation_issues": [i.to_dict() for i in issues],
        "can_finalize": report.can_finalize,
    }


@app.post("/hierarchy")
def hierarchy(req: RecordsRequest):
    """validate → build → stats for one snapshot."""
    records = _map_rows(req.records, req.column_mapping)
    try:
        view = build_chart_view(records)
    except Exception as exc:
        raise _internal_error("Hierarchy build", exc)
    return view.to_dict()


@app.post("/compare")
def compare(req: CompareRequest):
    """Baseline vs. target: annotated target tree plus drift summary."""
    baseline = _map_rows(req.baseline, req.column_mapping)
    target = _map_rows(req.target, req.column_mapping)
    try:
        view = build_comparison_view(baseline, target)
        summary = summarize_changes(
            view.analysis,
            baseline_count=len(index_records(baseline)),
            target_count=len(index_records(target)),
        )
    except Exception as exc:
        raise _internal_error("Comparison", exc)

    result = view.to_dict()
    result["summary"] = summary
    return result


@app.get("/health")
def health():
    return {"status": "ok", "version": API_VERSION}
