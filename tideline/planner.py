# tideline/planner.py
from __future__ import annotations

import dataclasses
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from .model import Conflict, Lane, Task
from .util.dates import parse_date, shift_date


def tasks_overlap(a: Task, b: Task) -> bool:
    """True when the inclusive day ranges share at least one day."""
    return parse_date(a.start) <= parse_date(b.end) and parse_date(b.start) <= parse_date(a.end)


def _group_by_lane(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    groups: Dict[str, List[Task]] = {}
    for t in tasks:
        groups.setdefault(t.lane_id, []).append(t)
    return groups


def detect_conflicts(tasks: Iterable[Task]) -> List[Conflict]:
    """Lane-scoped overlapping pairs.

    Lanes are reported in first-appearance order; within a lane the scan runs
    over tasks sorted by start, so each pair is (earlier, later).
    """
    conflicts: List[Conflict] = []

    for lane_id, lane_tasks in _group_by_lane(tasks).items():
        ordered = sorted(lane_tasks, key=lambda t: parse_date(t.start))
        for i, first in enumerate(ordered):
            first_end = parse_date(first.end)
            for second in ordered[i + 1:]:
                if not tasks_overlap(first, second):
                    # starts are non-decreasing: nothing later can reach back into `first`
                    if parse_date(second.start) > first_end:
                        break
                    continue
                conflicts.append(Conflict(lane_id=lane_id, task_ids=(first.id, second.id)))

    return conflicts


def conflicting_task_ids(conflicts: Iterable[Conflict]) -> Set[str]:
    out: Set[str] = set()
    for c in conflicts:
        out.update(c.task_ids)
    return out


def task_has_conflict(task_id: str, conflicts: Iterable[Conflict]) -> bool:
    return any(task_id in c.task_ids for c in conflicts)


# keyboard ops (arrow-key nudging); each returns a replacement task or None for a no-op
def op_nudge(task: Task, days: int) -> Optional[Task]:
    if not days:
        return None
    return dataclasses.replace(
        task,
        start=shift_date(task.start, days),
        end=shift_date(task.end, days),
    )


def op_move_lane(task: Task, lanes: Sequence[Lane], direction: str) -> Optional[Task]:
    """Move a task to the lane above ("up") or below ("down") its current one."""
    lane_ids = [lane.id for lane in lanes]
    if task.lane_id not in lane_ids:
        return None
    idx = lane_ids.index(task.lane_id)
    if direction == "up":
        target = idx - 1
    elif direction == "down":
        target = idx + 1
    else:
        raise ValueError(f"Unknown direction: {direction!r}")
    if target < 0 or target >= len(lane_ids):
        return None
    return dataclasses.replace(task, lane_id=lane_ids[target])


def resolve_dependencies(task: Task, tasks_by_id: Mapping[str, Task]) -> List[Task]:
    """Dependency tasks that exist; dangling ids and self-references are left out.

    `deps` is advisory only: no ordering, cycle or transitivity checks happen here.
    """
    out: List[Task] = []
    for dep_id in task.deps:
        if dep_id == task.id:
            continue
        dep = tasks_by_id.get(dep_id)
        if dep is not None:
            out.append(dep)
    return out


shift_task = op_nudge
move_task_to_lane = op_move_lane
