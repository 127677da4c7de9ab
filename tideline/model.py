# tideline/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .util.dates import to_iso_date

ZOOM_LEVELS: Tuple[str, ...] = ("week", "month", "quarter", "year")
DEFAULT_ZOOM = "month"

DENSITIES: Tuple[str, ...] = ("compact", "comfortable", "spacious")
DEFAULT_DENSITY = "comfortable"

INTERACTION_KINDS: Tuple[str, ...] = ("move", "resize-start", "resize-end")


@dataclass(frozen=True)
class Lane:
    id: str
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Lane":
        return cls(id=str(raw["id"]), name=str(raw.get("name") or ""))


@dataclass(frozen=True)
class Task:
    """A scheduled item on a lane.

    start/end are inclusive ISO calendar days. `deps` is an advisory list of
    task ids; nothing here validates it.
    """

    id: str
    name: str
    start: str
    end: str
    lane_id: str
    assignee: str = ""
    deps: Tuple[str, ...] = ()
    milestone: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start": self.start,
            "end": self.end,
            "laneId": self.lane_id,
            "assignee": self.assignee,
            "deps": list(self.deps),
            "milestone": self.milestone,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Task":
        deps = raw.get("deps") or []
        if not isinstance(deps, (list, tuple)):
            deps = []
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name") or ""),
            start=to_iso_date(raw["start"]),
            end=to_iso_date(raw["end"]),
            lane_id=str(raw.get("laneId") or ""),
            assignee=str(raw.get("assignee") or ""),
            deps=tuple(str(d) for d in deps if isinstance(d, str)),
            milestone=raw.get("milestone") is True,
        )


@dataclass(frozen=True)
class Conflict:
    lane_id: str
    task_ids: Tuple[str, str]

    def to_dict(self) -> Dict[str, Any]:
        return {"laneId": self.lane_id, "taskIds": list(self.task_ids)}


@dataclass(frozen=True)
class TimeWindow:
    start: str
    end: str
    days: Tuple[str, ...]


@dataclass(frozen=True)
class TimelineSnapshot:
    lanes: Tuple[Lane, ...] = ()
    tasks: Tuple[Task, ...] = ()
    zoom: str = DEFAULT_ZOOM
    density: str = DEFAULT_DENSITY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lanes": [lane.to_dict() for lane in self.lanes],
            "tasks": [task.to_dict() for task in self.tasks],
            "zoom": self.zoom,
            "density": self.density,
        }


@dataclass(frozen=True)
class DragContext:
    """Captured at drag start; the only source of truth for the running gesture."""

    task_id: str
    kind: str
    base_start: str
    base_end: str
    base_lane_id: str


@dataclass(frozen=True)
class DragPreview:
    task_id: str
    lane_id: str
    left: float
    width: float
    kind: str


@dataclass(frozen=True)
class PointerEvent:
    phase: str  # "start" | "move" | "end" | "cancel"
    task_id: Optional[str] = None
    kind: Optional[str] = None
    delta_x: float = 0.0
    over_lane_id: Optional[str] = None


@dataclass(frozen=True)
class LaneLayout:
    assignments: Dict[str, int] = field(default_factory=dict)
    rows: int = 1


__all__ = [
    "ZOOM_LEVELS",
    "DEFAULT_ZOOM",
    "DENSITIES",
    "DEFAULT_DENSITY",
    "INTERACTION_KINDS",
    "Lane",
    "Task",
    "Conflict",
    "TimeWindow",
    "TimelineSnapshot",
    "DragContext",
    "DragPreview",
    "PointerEvent",
    "LaneLayout",
]
