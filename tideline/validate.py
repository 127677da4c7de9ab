"""Snapshot validation helpers (library-facing)."""

from __future__ import annotations

import datetime as dt
import re
from typing import Any, List


class SnapshotValidationError(ValueError):
    """Raised when an imported snapshot has the wrong structure."""


ERROR_PREFIX = "Invalid timeline payload"

_ISO_DAY = re.compile(r"\d{4}-\d{2}-\d{2}")


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _parseable_date(v: Any) -> bool:
    # exact calendar day only; date-times and trailing text are rejected
    if not isinstance(v, str) or not _ISO_DAY.fullmatch(v):
        return False
    try:
        dt.date.fromisoformat(v)
    except ValueError:
        return False
    return True


def validate_snapshot(payload: Any, *, label: str = "snapshot") -> List[str]:
    """Structural checks only; empty list means OK.

    Dangling lane/dependency references, reversed ranges and unknown
    zoom/density values are tolerated here on purpose (see schema.py).
    """
    if not isinstance(payload, dict):
        return [f"{label}: payload must be a JSON object"]

    errs: List[str] = []
    lanes = payload.get("lanes")
    tasks = payload.get("tasks")
    _require(isinstance(lanes, list), f"{label}: lanes must be list", errs)
    _require(isinstance(tasks, list), f"{label}: tasks must be list", errs)

    if isinstance(lanes, list):
        for i, lane in enumerate(lanes):
            if not isinstance(lane, dict):
                errs.append(f"{label}: lanes[{i}] must be object")
                continue
            lid = lane.get("id")
            _require(isinstance(lid, str) and bool(lid.strip()), f"{label}: lanes[{i}].id must be non-empty string", errs)

    if isinstance(tasks, list):
        for i, t in enumerate(tasks):
            if not isinstance(t, dict):
                errs.append(f"{label}: tasks[{i}] must be object")
                continue
            tid = t.get("id")
            _require(isinstance(tid, str) and bool(tid.strip()), f"{label}: tasks[{i}].id must be non-empty string", errs)
            _require(_parseable_date(t.get("start")), f"{label}: tasks[{i}].start must be YYYY-MM-DD", errs)
            _require(_parseable_date(t.get("end")), f"{label}: tasks[{i}].end must be YYYY-MM-DD", errs)
            deps = t.get("deps")
            if deps is not None:
                _require(isinstance(deps, list), f"{label}: tasks[{i}].deps must be list", errs)

    return errs


def assert_valid_snapshot(payload: Any) -> None:
    errs = validate_snapshot(payload)
    if errs:
        raise SnapshotValidationError(f"{ERROR_PREFIX}: {errs[0]}")


__all__ = [
    "ERROR_PREFIX",
    "SnapshotValidationError",
    "assert_valid_snapshot",
    "validate_snapshot",
]
