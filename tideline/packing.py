# tideline/packing.py
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from .model import Lane, LaneLayout, Task
from .planner import tasks_overlap
from .util.dates import parse_date


def pack_lane(tasks: Iterable[Task]) -> LaneLayout:
    """Greedy first-fit row assignment for one lane.

    Tasks are visited by start day (stable, so ties keep input order) and each
    lands in the lowest row holding nothing it overlaps. Visiting intervals in
    start order makes first-fit optimal: rows == maximum overlap depth.
    """
    items = list(tasks)
    if not items:
        return LaneLayout(assignments={}, rows=1)

    rows: List[List[Task]] = []
    assignments: Dict[str, int] = {}
    for t in sorted(items, key=lambda x: parse_date(x.start)):
        row_index = -1
        for i, row in enumerate(rows):
            if all(not tasks_overlap(existing, t) for existing in row):
                row_index = i
                break
        if row_index < 0:
            row_index = len(rows)
            rows.append([])
        rows[row_index].append(t)
        assignments[t.id] = row_index

    return LaneLayout(assignments=assignments, rows=max(1, len(rows)))


def group_tasks_by_lane(lanes: Sequence[Lane], tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    """Lane id -> tasks, declared lanes first (in order), unknown lane ids after."""
    out: Dict[str, List[Task]] = {lane.id: [] for lane in lanes}
    for t in tasks:
        out.setdefault(t.lane_id, []).append(t)
    return out


def pack_lanes(lanes: Sequence[Lane], tasks: Iterable[Task]) -> Dict[str, LaneLayout]:
    return {lane_id: pack_lane(items) for lane_id, items in group_tasks_by_lane(lanes, tasks).items()}


def max_overlap_depth(tasks: Iterable[Task]) -> int:
    """Largest number of tasks sharing a single day."""
    pts: List[Tuple[int, int]] = []
    for t in tasks:
        s = parse_date(t.start).toordinal()
        e = parse_date(t.end).toordinal()
        if e < s:
            continue
        pts.append((s, +1))
        pts.append((e + 1, -1))
    # closes before opens on the same ordinal: back-to-back days do not stack
    pts.sort(key=lambda x: (x[0], x[1]))

    depth = 0
    best = 0
    for _ordinal, kind in pts:
        depth += kind
        best = max(best, depth)
    return best
