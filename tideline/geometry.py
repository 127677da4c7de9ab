# tideline/geometry.py
"""Pixel geometry for the timeline canvas.

Everything here is a pure function of an immutable GeometryContext; the
context is built once per render from the window, zoom and density and then
passed explicitly to every consumer (task bars, lanes, markers, drag preview).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from .model import DEFAULT_DENSITY, DEFAULT_ZOOM, Conflict, Lane, LaneLayout, Task, TimeWindow
from .packing import group_tasks_by_lane, pack_lane
from .planner import detect_conflicts
from .util.dates import DateLike, diff_in_days, offset_from_start, parse_date, today_iso
from .window import calculate_timeline_window

MIN_BAR_WIDTH = 24
MIN_BAR_HEIGHT = 28
BAR_INSET = 6
MILESTONE_SIZE = 16


@dataclass(frozen=True)
class DensityPreset:
    day_width_week: int
    day_width_month: int
    day_width_quarter: int
    day_width_year: int
    lane_row_height: int
    lane_row_gap: int
    lane_base_padding: int
    lane_label_width: int
    min_content_width: int

    def day_width(self, zoom: str) -> int:
        if zoom == "week":
            return self.day_width_week
        if zoom == "quarter":
            return self.day_width_quarter
        if zoom == "year":
            return self.day_width_year
        return self.day_width_month


DENSITY_PRESETS: Dict[str, DensityPreset] = {
    "compact": DensityPreset(
        day_width_week=56,
        day_width_month=28,
        day_width_quarter=12,
        day_width_year=4,
        lane_row_height=36,
        lane_row_gap=6,
        lane_base_padding=10,
        lane_label_width=180,
        min_content_width=960,
    ),
    "comfortable": DensityPreset(
        day_width_week=72,
        day_width_month=36,
        day_width_quarter=16,
        day_width_year=5,
        lane_row_height=44,
        lane_row_gap=8,
        lane_base_padding=14,
        lane_label_width=200,
        min_content_width=1080,
    ),
    "spacious": DensityPreset(
        day_width_week=88,
        day_width_month=44,
        day_width_quarter=20,
        day_width_year=6,
        lane_row_height=52,
        lane_row_gap=10,
        lane_base_padding=18,
        lane_label_width=220,
        min_content_width=1200,
    ),
}


def density_preset(density: str) -> DensityPreset:
    return DENSITY_PRESETS.get(density) or DENSITY_PRESETS[DEFAULT_DENSITY]


@dataclass(frozen=True)
class GeometryContext:
    window_start: str
    window_end: str
    days: tuple
    day_width: float
    content_width: float
    lane_label_width: float = 0
    lane_base_padding: float = 0
    lane_row_height: float = 0
    lane_row_gap: float = 0


@dataclass(frozen=True)
class TaskRect:
    task_id: str
    left: float
    width: float
    top: float
    height: float
    milestone: bool = False


def build_geometry(window: TimeWindow, zoom: str = DEFAULT_ZOOM, density: str = DEFAULT_DENSITY) -> GeometryContext:
    preset = density_preset(density)
    day_width = preset.day_width(zoom)
    return GeometryContext(
        window_start=window.start,
        window_end=window.end,
        days=window.days,
        day_width=day_width,
        content_width=max(len(window.days) * day_width, preset.min_content_width),
        lane_label_width=preset.lane_label_width,
        lane_base_padding=preset.lane_base_padding,
        lane_row_height=preset.lane_row_height,
        lane_row_gap=preset.lane_row_gap,
    )


def row_top(row: int, ctx: GeometryContext) -> float:
    return ctx.lane_base_padding + row * (ctx.lane_row_height + ctx.lane_row_gap)


def bar_height(ctx: GeometryContext) -> float:
    return max(ctx.lane_row_height - BAR_INSET, MIN_BAR_HEIGHT)


def task_left(start: DateLike, ctx: GeometryContext) -> float:
    return max(offset_from_start(ctx.window_start, start), 0) * ctx.day_width


def task_width(start: DateLike, end: DateLike, ctx: GeometryContext, *, min_width: float = MIN_BAR_WIDTH) -> float:
    # reversed ranges collapse to one day instead of a negative width
    days = max(diff_in_days(start, end) + 1, 1)
    return max(days * ctx.day_width, min_width)


def task_rect(task: Task, ctx: GeometryContext, row: int = 0) -> TaskRect:
    left = task_left(task.start, ctx)
    top = row_top(row, ctx)
    if task.milestone:
        return TaskRect(
            task_id=task.id,
            left=left + ctx.day_width / 2 - MILESTONE_SIZE / 2,
            width=MILESTONE_SIZE,
            top=top,
            height=MILESTONE_SIZE,
            milestone=True,
        )
    return TaskRect(
        task_id=task.id,
        left=left,
        width=task_width(task.start, task.end, ctx),
        top=top,
        height=bar_height(ctx),
    )


def lane_height(rows: int, ctx: GeometryContext) -> float:
    base = ctx.lane_base_padding * 2 + ctx.lane_row_height
    rows = max(1, int(rows))
    stacked = ctx.lane_base_padding * 2 + rows * ctx.lane_row_height + (rows - 1) * ctx.lane_row_gap
    return max(base, stacked)


def today_marker_left(ctx: GeometryContext, today: Optional[DateLike] = None) -> Optional[float]:
    now = parse_date(today_iso(today))
    if now < parse_date(ctx.window_start) or now > parse_date(ctx.window_end):
        return None
    left = offset_from_start(ctx.window_start, now) * ctx.day_width + ctx.day_width / 2
    return min(max(left, 0), ctx.content_width)


def scroll_target_left(
    ctx: GeometryContext,
    *,
    viewport_width: float,
    scroll_width: float,
    anchor: Optional[DateLike] = None,
    today: Optional[DateLike] = None,
) -> Optional[float]:
    """Scroll offset centring the anchor day (or today) in the viewport."""
    lo = parse_date(ctx.window_start)
    hi = parse_date(ctx.window_end)

    target = None
    if anchor is not None:
        a = parse_date(anchor)
        if lo <= a <= hi:
            target = a
    if target is None:
        now = parse_date(today_iso(today))
        if lo <= now <= hi:
            target = now
    if target is None:
        return None

    offset_days = max(offset_from_start(lo, target), 0)
    left = offset_days * ctx.day_width + ctx.lane_label_width - viewport_width / 2 + ctx.day_width / 2
    max_left = max(scroll_width - viewport_width, 0)
    return min(max(left, 0), max_left)


@dataclass(frozen=True)
class TimelineDerived:
    window: TimeWindow
    geometry: GeometryContext
    lane_tasks: Dict[str, List[Task]]
    layouts: Dict[str, LaneLayout]
    lane_heights: Dict[str, float]
    tasks_by_id: Dict[str, Task]
    conflicts: List[Conflict]

    def rect_for(self, task_id: str) -> Optional[TaskRect]:
        task = self.tasks_by_id.get(task_id)
        if task is None:
            return None
        layout = self.layouts.get(task.lane_id)
        row = layout.assignments.get(task_id, 0) if layout else 0
        return task_rect(task, self.geometry, row)

    def rects(self) -> List[TaskRect]:
        out: List[TaskRect] = []
        for lane_id, items in self.lane_tasks.items():
            layout = self.layouts[lane_id]
            for t in items:
                out.append(task_rect(t, self.geometry, layout.assignments.get(t.id, 0)))
        return out


def derive_timeline(
    tasks: Iterable[Task],
    lanes: Sequence[Lane],
    zoom: str = DEFAULT_ZOOM,
    density: str = DEFAULT_DENSITY,
    *,
    today: Optional[DateLike] = None,
    conflicts: Optional[List[Conflict]] = None,
) -> TimelineDerived:
    items = list(tasks)
    window = calculate_timeline_window(items, zoom, today=today)
    ctx = build_geometry(window, zoom, density)
    lane_tasks = group_tasks_by_lane(lanes, items)
    layouts = {lane_id: pack_lane(group) for lane_id, group in lane_tasks.items()}
    heights = {lane_id: lane_height(layout.rows, ctx) for lane_id, layout in layouts.items()}
    return TimelineDerived(
        window=window,
        geometry=ctx,
        lane_tasks=lane_tasks,
        layouts=layouts,
        lane_heights=heights,
        tasks_by_id={t.id: t for t in items},
        conflicts=list(conflicts) if conflicts is not None else detect_conflicts(items),
    )
