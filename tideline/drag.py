# tideline/drag.py
"""Drag / resize engine.

States: idle (no DragContext) -> dragging (DragContext captured at start) ->
idle again on end (commit) or cancel. The controller never edits tasks in
place; on commit it hands a complete replacement Task to `update_task` and the
owning state layer applies it.

Pointer deltas are accumulated pixel offsets since the gesture began; they are
quantized to whole days before touching any date.
"""
from __future__ import annotations

import dataclasses
import math
from typing import Callable, Mapping, Optional, Tuple, Union

from .frame import NextTickScheduler
from .geometry import GeometryContext, bar_height, row_top, task_left
from .model import INTERACTION_KINDS, DragContext, DragPreview, LaneLayout, PointerEvent, Task
from .util.dates import diff_in_days, parse_date, shift_date, to_iso_date

TaskLookup = Union[Mapping[str, Task], Callable[[str], Optional[Task]]]

_PREVIEW_PAINT_KEY = "drag-preview"


def day_shift(delta_x: float, day_width: float) -> int:
    """Whole days for a pixel delta; exact halves round up."""
    if not day_width:
        return 0
    return int(math.floor(float(delta_x) / float(day_width) + 0.5))


def propose_dates(kind: str, base_start: str, base_end: str, shift: int) -> Tuple[str, str]:
    """Candidate (start, end) for a gesture; resizes are clamped so start <= end."""
    if kind == "move":
        return shift_date(base_start, shift), shift_date(base_end, shift)

    if kind == "resize-start":
        start = parse_date(shift_date(base_start, shift))
        end = parse_date(base_end)
        if start > end:
            start = end
        return start.isoformat(), end.isoformat()

    if kind == "resize-end":
        start = parse_date(base_start)
        end = parse_date(shift_date(base_end, shift))
        if end < start:
            end = start
        return start.isoformat(), end.isoformat()

    return base_start, base_end


def preview_geometry(start: str, end: str, ctx: GeometryContext) -> Optional[Tuple[float, float]]:
    """(left, width) of a candidate range, or None once it falls past the content edge."""
    left = task_left(start, ctx)
    if left > ctx.content_width:
        return None
    width_days = max(diff_in_days(start, end) + 1, 1)
    raw_width = max(width_days * ctx.day_width, ctx.day_width)
    max_width = max(ctx.content_width - left, ctx.day_width)
    return left, min(raw_width, max_width)


def preview_rect(preview: Optional[DragPreview], layout: LaneLayout, ctx: GeometryContext) -> Optional[dict]:
    """Overlay rectangle for a resize preview inside its lane, on the task's own row."""
    if preview is None or preview.kind == "move":
        return None
    row = layout.assignments.get(preview.task_id)
    if row is None:
        return None
    return {
        "left": max(0.0, preview.left),
        "width": max(0.0, preview.width),
        "top": row_top(row, ctx),
        "height": bar_height(ctx),
    }


class DragController:
    def __init__(
        self,
        tasks: TaskLookup,
        geometry: GeometryContext,
        *,
        update_task: Callable[[Task], None],
        select_task: Optional[Callable[[Optional[str]], None]] = None,
        on_preview: Optional[Callable[[Optional[DragPreview]], None]] = None,
        scheduler: Optional[NextTickScheduler] = None,
    ) -> None:
        self._tasks = tasks
        self.geometry = geometry
        self._update_task = update_task
        self._select_task = select_task
        self._on_preview = on_preview
        self._scheduler = scheduler
        self._context: Optional[DragContext] = None
        self._preview: Optional[DragPreview] = None

    # -------------------- state --------------------
    @property
    def context(self) -> Optional[DragContext]:
        return self._context

    @property
    def preview(self) -> Optional[DragPreview]:
        return self._preview

    @property
    def dragging(self) -> bool:
        return self._context is not None

    def set_geometry(self, geometry: GeometryContext) -> None:
        self.geometry = geometry

    def _lookup(self, task_id: Optional[str]) -> Optional[Task]:
        if not task_id:
            return None
        if callable(self._tasks):
            return self._tasks(task_id)
        return self._tasks.get(task_id)

    def _set_preview(self, preview: Optional[DragPreview]) -> None:
        self._preview = preview
        if self._on_preview is None:
            return
        if self._scheduler is None:
            self._on_preview(preview)
        else:
            self._scheduler.request(_PREVIEW_PAINT_KEY, self._on_preview, preview)

    def _reset(self) -> None:
        self._context = None
        self._set_preview(None)

    def snap_delta(self, delta_x: float) -> float:
        """Pixel delta snapped to whole days (what the dragged element should visually show)."""
        return day_shift(delta_x, self.geometry.day_width) * self.geometry.day_width

    # -------------------- transitions --------------------
    def start(self, task_id: str, kind: str) -> Optional[DragContext]:
        if kind not in INTERACTION_KINDS:
            return None
        task = self._lookup(task_id)
        if task is None:
            return None
        if task.milestone and kind != "move":
            return None

        if self._select_task is not None:
            self._select_task(task.id)
        self._context = DragContext(
            task_id=task.id,
            kind=kind,
            base_start=task.start,
            base_end=task.end,
            base_lane_id=task.lane_id,
        )
        return self._context

    def move(self, delta_x: float, over_lane_id: Optional[str] = None) -> Optional[DragPreview]:
        ctx = self._context
        if ctx is None:
            return None
        if self._lookup(ctx.task_id) is None:
            self._set_preview(None)
            return None

        shift = day_shift(delta_x, self.geometry.day_width)
        lane_id = ctx.base_lane_id
        if ctx.kind == "move" and over_lane_id:
            lane_id = over_lane_id

        start, end = propose_dates(ctx.kind, ctx.base_start, ctx.base_end, shift)
        geom = preview_geometry(start, end, self.geometry)
        if geom is None:
            self._set_preview(None)
            return None

        left, width = geom
        preview = DragPreview(task_id=ctx.task_id, lane_id=lane_id, left=left, width=width, kind=ctx.kind)
        self._set_preview(preview)
        return preview

    def end(
        self,
        delta_x: float,
        over_lane_id: Optional[str] = None,
        *,
        task_id: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> Optional[Task]:
        """Commit the gesture. Returns the replacement task that was emitted, if any."""
        try:
            return self._commit(delta_x, over_lane_id, task_id=task_id, kind=kind)
        finally:
            self._reset()

    def _commit(
        self,
        delta_x: float,
        over_lane_id: Optional[str],
        *,
        task_id: Optional[str],
        kind: Optional[str],
    ) -> Optional[Task]:
        ctx = self._context
        if ctx is not None and (task_id is None or task_id == ctx.task_id):
            task_id = ctx.task_id
            kind = ctx.kind
        elif kind not in INTERACTION_KINDS:
            return None

        task = self._lookup(task_id)
        if task is None:
            return None
        if task.milestone and kind != "move":
            return None

        if ctx is not None and ctx.task_id == task.id:
            base_start, base_end, base_lane = ctx.base_start, ctx.base_end, ctx.base_lane_id
        else:
            base_start, base_end, base_lane = task.start, task.end, task.lane_id

        shift = day_shift(delta_x, self.geometry.day_width)
        cur_start, cur_end = to_iso_date(task.start), to_iso_date(task.end)

        if kind == "move":
            start, end = propose_dates(kind, base_start, base_end, shift)
            lane_id = over_lane_id or base_lane
            if start == cur_start and end == cur_end and lane_id == task.lane_id:
                return None
            updated = dataclasses.replace(task, start=start, end=end, lane_id=lane_id)
        else:
            if shift == 0:
                return None
            start, end = propose_dates(str(kind), base_start, base_end, shift)
            if kind == "resize-start":
                if start == cur_start:
                    return None
                updated = dataclasses.replace(task, start=start)
            else:
                if end == cur_end:
                    return None
                updated = dataclasses.replace(task, end=end)

        self._update_task(updated)
        return updated

    def cancel(self) -> None:
        """Drop the gesture without emitting anything; safe when idle."""
        self._reset()

    def handle(self, event: PointerEvent):
        if event.phase == "start":
            return self.start(str(event.task_id or ""), str(event.kind or ""))
        if event.phase == "move":
            return self.move(event.delta_x, event.over_lane_id)
        if event.phase == "end":
            return self.end(event.delta_x, event.over_lane_id, task_id=event.task_id, kind=event.kind)
        if event.phase == "cancel":
            return self.cancel()
        raise ValueError(f"Unknown pointer phase: {event.phase!r}")

    # -------------------- render read-outs --------------------
    @property
    def highlight_lane_id(self) -> Optional[str]:
        return self._preview.lane_id if self._preview else None

    @property
    def highlight_rect(self) -> Optional[dict]:
        p = self._preview
        if p is None or p.kind != "move":
            return None
        return {"left": p.left, "width": p.width}

    @property
    def resize_preview(self) -> Optional[dict]:
        p = self._preview
        if p is None or p.kind == "move":
            return None
        return {"task_id": p.task_id, "left": p.left, "width": p.width}

    @property
    def resize_preview_lane_id(self) -> Optional[str]:
        p = self._preview
        if p is None or p.kind == "move":
            return None
        return p.lane_id

    @property
    def active_lane_id(self) -> Optional[str]:
        if self._context is None:
            return None
        task = self._lookup(self._context.task_id)
        return task.lane_id if task else None
