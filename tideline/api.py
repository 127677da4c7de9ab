"""tideline.api

Stable *library* entrypoint for tideline.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any, Dict, Optional, Union

from tideline.drag import DragController, day_shift, preview_geometry, propose_dates
from tideline.frame import ImmediateScheduler, NextTickScheduler
from tideline.geometry import (
    GeometryContext,
    TaskRect,
    TimelineDerived,
    build_geometry,
    derive_timeline,
    lane_height,
    scroll_target_left,
    task_rect,
    today_marker_left,
)
from tideline.model import (
    Conflict,
    DragContext,
    DragPreview,
    Lane,
    LaneLayout,
    PointerEvent,
    Task,
    TimelineSnapshot,
    TimeWindow,
)
from tideline.packing import max_overlap_depth, pack_lane, pack_lanes
from tideline.planner import (
    detect_conflicts,
    move_task_to_lane,
    resolve_dependencies,
    shift_task,
    tasks_overlap,
)
from tideline.schema import (
    export_filename,
    export_timeline,
    normalize_density,
    normalize_zoom,
    parse_imported_timeline,
    serialize_timeline,
    snapshot_from_dict,
)
from tideline.state import (
    Command,
    CommandKind,
    NoLanesError,
    TimelineState,
    TimelineStore,
    new_task_draft,
    reduce,
)
from tideline.storage import JsonFileStore, seed_snapshot
from tideline.util.dates import DateLike
from tideline.validate import SnapshotValidationError, validate_snapshot
from tideline.window import calculate_timeline_window

JsonPath = Union[str, Path]


def load_snapshot_from_json(path: JsonPath) -> TimelineSnapshot:
    """Load and validate a snapshot JSON file (raises SnapshotValidationError)."""
    p = Path(path)
    return parse_imported_timeline(p.read_text(encoding="utf-8"))


def layout_report(snapshot: TimelineSnapshot, *, today: Optional[DateLike] = None) -> Dict[str, Any]:
    """Everything a renderer needs for one frame, as plain JSON-able data."""
    derived = derive_timeline(snapshot.tasks, snapshot.lanes, snapshot.zoom, snapshot.density, today=today)
    ctx = derived.geometry
    lane_names = {lane.id: lane.name for lane in snapshot.lanes}

    lanes = []
    for lane_id, items in derived.lane_tasks.items():
        layout = derived.layouts[lane_id]
        lanes.append(
            {
                "id": lane_id,
                "name": lane_names.get(lane_id, ""),
                "rows": layout.rows,
                "height": derived.lane_heights[lane_id],
                "tasks": [
                    dict(
                        dataclasses.asdict(task_rect(t, ctx, layout.assignments.get(t.id, 0))),
                        row=layout.assignments.get(t.id, 0),
                    )
                    for t in items
                ],
            }
        )

    return {
        "zoom": snapshot.zoom,
        "density": snapshot.density,
        "window": {"start": derived.window.start, "end": derived.window.end, "days": len(derived.window.days)},
        "geometry": {
            "day_width": ctx.day_width,
            "content_width": ctx.content_width,
            "lane_label_width": ctx.lane_label_width,
        },
        "today_marker_left": today_marker_left(ctx, today),
        "lanes": lanes,
        "conflicts": [c.to_dict() for c in derived.conflicts],
    }


__all__ = [
    # model
    "Lane",
    "Task",
    "Conflict",
    "TimeWindow",
    "TimelineSnapshot",
    "DragContext",
    "DragPreview",
    "PointerEvent",
    "LaneLayout",
    # core
    "calculate_timeline_window",
    "detect_conflicts",
    "tasks_overlap",
    "pack_lane",
    "pack_lanes",
    "max_overlap_depth",
    "GeometryContext",
    "TaskRect",
    "TimelineDerived",
    "build_geometry",
    "derive_timeline",
    "task_rect",
    "lane_height",
    "today_marker_left",
    "scroll_target_left",
    "DragController",
    "day_shift",
    "propose_dates",
    "preview_geometry",
    "NextTickScheduler",
    "ImmediateScheduler",
    "shift_task",
    "move_task_to_lane",
    "resolve_dependencies",
    # state
    "Command",
    "CommandKind",
    "TimelineState",
    "TimelineStore",
    "reduce",
    "new_task_draft",
    "NoLanesError",
    # schema / io
    "SnapshotValidationError",
    "validate_snapshot",
    "snapshot_from_dict",
    "parse_imported_timeline",
    "serialize_timeline",
    "normalize_zoom",
    "normalize_density",
    "export_filename",
    "export_timeline",
    "JsonFileStore",
    "seed_snapshot",
    "load_snapshot_from_json",
    "layout_report",
]
