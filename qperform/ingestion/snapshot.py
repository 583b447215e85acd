"""
Snapshot loaders: read performance and action-log exports from disk into
validated models.

Supported formats (picked by file suffix)
------------------------------------------
  .json  — an array of objects, one per row, keyed by model field name.
  .csv   — comma delimited with a header row; column names are model field
           names. Empty cells are treated as absent, so optional fields fall
           back to their defaults.

Required columns:
  performance  → agent_email, start_date, end_date, month_num, year_num
  action log   → agent_email, action_type, action_date
  leader map   → agent_email, leader_email

Date columns are ISO ``YYYY-MM-DD``. Boolean columns (``is_active``) accept
true/false/1/0/yes/no.

All rows are validated before any are returned. If any row fails, one
``ValueError`` is raised listing the first 10 failures.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from qperform.models.action import ActionLogEntry
from qperform.models.performance import PerformanceRecord

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

PERFORMANCE_REQUIRED_COLUMNS = frozenset({
    "agent_email", "start_date", "end_date", "month_num", "year_num",
})
ACTION_REQUIRED_COLUMNS = frozenset({"agent_email", "action_type", "action_date"})
LEADER_MAP_REQUIRED_COLUMNS = frozenset({"agent_email", "leader_email"})

_MAX_ERRORS_SHOWN = 10


def load_performance_records(path: Path) -> list[PerformanceRecord]:
    """Load a weekly performance snapshot.

    Args:
        path: ``.json`` or ``.csv`` file (must exist).

    Returns:
        Validated records in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: On unsupported suffix, missing columns, or any invalid row.
    """
    rows = _read_rows(path, PERFORMANCE_REQUIRED_COLUMNS)
    records = _validate_rows(rows, PerformanceRecord, path)
    logger.info("Loaded %d performance record(s) from %s", len(records), path.name)
    return records


def load_action_log(path: Path) -> list[ActionLogEntry]:
    """Load an action-log snapshot.

    Args:
        path: ``.json`` or ``.csv`` file (must exist).

    Returns:
        Validated entries in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: On unsupported suffix, missing columns, or any invalid row.
    """
    rows = _read_rows(path, ACTION_REQUIRED_COLUMNS)
    entries = _validate_rows(rows, ActionLogEntry, path)
    logger.info("Loaded %d action-log entr(ies) from %s", len(entries), path.name)
    return entries


def load_leader_map(path: Path) -> dict[str, str]:
    """Load an agent → leader mapping.

    JSON files may be either an object (``{"agent@x": "lead@x"}``) or an array
    of ``{"agent_email", "leader_email"}`` rows; CSV files use the two columns.
    Later rows win when an agent appears twice.
    """
    if path.suffix.lower() == ".json" and path.exists():
        raw = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            return {str(k).strip(): str(v).strip() for k, v in raw.items() if v}

    rows = _read_rows(path, LEADER_MAP_REQUIRED_COLUMNS)
    mapping: dict[str, str] = {}
    for row in rows:
        agent = str(row.get("agent_email") or "").strip()
        leader = str(row.get("leader_email") or "").strip()
        if agent and leader:
            mapping[agent] = leader
    logger.info("Loaded %d leader mapping(s) from %s", len(mapping), path.name)
    return mapping


# ── Private helpers ────────────────────────────────────────────────────────────

def _read_rows(path: Path, required: frozenset[str]) -> list[dict[str, Any]]:
    """Read raw row dicts from a JSON or CSV file and check required columns."""
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        rows = _read_json_rows(path)
        columns: set[str] = set().union(*(r.keys() for r in rows)) if rows else set()
    elif suffix == ".csv":
        rows, columns = _read_csv_rows(path)
    else:
        raise ValueError(
            f"Unsupported snapshot format '{path.suffix}' for {path.name}. "
            "Expected .json or .csv."
        )

    if not rows:
        logger.warning("Snapshot is empty: %s", path)
        return []

    missing = required - columns
    if missing:
        raise ValueError(
            f"{path.name} missing required columns: {sorted(missing)}\n"
            f"Found columns: {sorted(columns)}"
        )
    return rows


def _read_json_rows(path: Path) -> list[dict[str, Any]]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path.name}: {exc}") from exc
    if not isinstance(raw, list) or not all(isinstance(r, dict) for r in raw):
        raise ValueError(f"{path.name} must contain a JSON array of objects.")
    return raw


def _read_csv_rows(path: Path) -> tuple[list[dict[str, Any]], set[str]]:
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")
        columns = {c.strip() for c in reader.fieldnames}
        # Empty cells drop out so model defaults apply.
        rows = [
            {k.strip(): v.strip() for k, v in row.items() if k and v and v.strip()}
            for row in reader
        ]
    return rows, columns


def _validate_rows(rows: list[dict[str, Any]], model: type[M], path: Path) -> list[M]:
    """Validate every row; raise one aggregated ``ValueError`` on any failure."""
    valid: list[M] = []
    errors: list[tuple[int, str]] = []

    for i, row in enumerate(rows):
        try:
            valid.append(model.model_validate(row))
        except (ValueError, ValidationError) as exc:
            errors.append((i + 1, str(exc)))

    if errors:
        detail = "\n".join(f"  Row {n}: {msg}" for n, msg in errors[:_MAX_ERRORS_SHOWN])
        suffix = (
            f"\n  … and {len(errors) - _MAX_ERRORS_SHOWN} more"
            if len(errors) > _MAX_ERRORS_SHOWN else ""
        )
        raise ValueError(
            f"{len(errors)} row(s) failed validation in {path.name}:\n{detail}{suffix}"
        )
    return valid
