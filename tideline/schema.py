# tideline/schema.py
"""Snapshot schema (the JSON exchanged with persistence and import/export).

    {
      "lanes": [{"id", "name"}, ...],
      "tasks": [{"id", "name", "start", "end", "laneId", "assignee", "deps", "milestone"?}, ...],
      "zoom": "week"|"month"|"quarter"|"year",          (optional -> "month")
      "density": "compact"|"comfortable"|"spacious"    (optional -> "comfortable")
    }
"""
from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from tideline.model import (
    DEFAULT_DENSITY,
    DEFAULT_ZOOM,
    DENSITIES,
    ZOOM_LEVELS,
    Lane,
    Task,
    TimelineSnapshot,
)
from tideline.util.console import warn
from tideline.util.dates import parse_date
from tideline.validate import ERROR_PREFIX, SnapshotValidationError, assert_valid_snapshot


def normalize_zoom(value: Any) -> str:
    if isinstance(value, str) and value in ZOOM_LEVELS:
        return value
    return DEFAULT_ZOOM


def normalize_density(value: Any) -> str:
    if isinstance(value, str) and value in DENSITIES:
        return value
    return DEFAULT_DENSITY


def _report_anomalies(snapshot: TimelineSnapshot) -> None:
    lane_ids = {lane.id for lane in snapshot.lanes}
    task_ids = {t.id for t in snapshot.tasks}
    for t in snapshot.tasks:
        if t.lane_id not in lane_ids:
            warn("schema", f"task {t.id!r} references unknown lane {t.lane_id!r}")
        for dep in t.deps:
            if dep not in task_ids:
                warn("schema", f"task {t.id!r} depends on unknown task {dep!r}")
        if parse_date(t.start) > parse_date(t.end):
            warn("schema", f"task {t.id!r} has start > end ({t.start} > {t.end})")
        if t.milestone and t.start != t.end:
            warn("schema", f"milestone {t.id!r} spans {t.start}..{t.end}")


def snapshot_from_dict(payload: Any) -> TimelineSnapshot:
    """Build a snapshot from decoded JSON; raises SnapshotValidationError on bad structure."""
    assert_valid_snapshot(payload)
    snapshot = TimelineSnapshot(
        lanes=tuple(Lane.from_dict(x) for x in payload["lanes"]),
        tasks=tuple(Task.from_dict(x) for x in payload["tasks"]),
        zoom=normalize_zoom(payload.get("zoom")),
        density=normalize_density(payload.get("density")),
    )
    _report_anomalies(snapshot)
    return snapshot


def parse_imported_timeline(raw: Union[str, bytes]) -> TimelineSnapshot:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as ex:
        raise SnapshotValidationError(f"{ERROR_PREFIX}: {ex}") from ex
    return snapshot_from_dict(payload)


def snapshot_to_dict(snapshot: TimelineSnapshot) -> Dict[str, Any]:
    return snapshot.to_dict()


def serialize_timeline(snapshot: TimelineSnapshot) -> str:
    return json.dumps(snapshot_to_dict(snapshot), indent=2, ensure_ascii=False) + "\n"


def export_filename(zoom: str, now: Optional[dt.datetime] = None) -> str:
    ts = (now or dt.datetime.now(dt.timezone.utc)).strftime("%Y-%m-%dT%H%M%SZ")
    return f"timeline-{normalize_zoom(zoom)}-{ts}.json"


def export_timeline(
    snapshot: TimelineSnapshot,
    directory: Union[str, Path],
    *,
    now: Optional[dt.datetime] = None,
) -> Path:
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / export_filename(snapshot.zoom, now)
    out_path.write_text(serialize_timeline(snapshot), encoding="utf-8")
    return out_path


if __name__ == "__main__":
    raise SystemExit("tideline.schema is a library module")
