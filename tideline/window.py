# tideline/window.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .model import DEFAULT_ZOOM, Task, TimeWindow
from .util.dates import DateLike, day_span, diff_in_days, parse_date, today_date


@dataclass(frozen=True)
class WindowPolicy:
    padding: int
    min_days: int


WINDOW_POLICIES: Dict[str, WindowPolicy] = {
    "week": WindowPolicy(padding=7, min_days=14),
    "month": WindowPolicy(padding=14, min_days=35),
    "quarter": WindowPolicy(padding=21, min_days=90),
    "year": WindowPolicy(padding=30, min_days=365),
}


def window_policy(zoom: str) -> WindowPolicy:
    return WINDOW_POLICIES.get(zoom) or WINDOW_POLICIES[DEFAULT_ZOOM]


def _make_window(start: dt.date, end: dt.date) -> TimeWindow:
    s = start.isoformat()
    e = end.isoformat()
    return TimeWindow(start=s, end=e, days=tuple(day_span(s, e)))


def calculate_timeline_window(
    tasks: Iterable[Task],
    zoom: str,
    *,
    today: Optional[DateLike] = None,
) -> TimeWindow:
    """Visible date window for `tasks` at `zoom`.

    The window always contains today and every task (reversed ranges included:
    min/max are taken over starts and ends independently), padded on both sides,
    then widened symmetrically to the zoom's minimum span.
    """
    now = today_date(today)
    policy = window_policy(zoom)
    items = list(tasks)

    if not items:
        start = now - dt.timedelta(days=policy.min_days // 2)
        end = start + dt.timedelta(days=policy.min_days)
        return _make_window(start, end)

    lo = min(parse_date(t.start) for t in items)
    hi = max(parse_date(t.end) for t in items)
    lo = min(lo, now)
    hi = max(hi, now)

    start = lo - dt.timedelta(days=policy.padding)
    end = hi + dt.timedelta(days=policy.padding)

    span = diff_in_days(start, end)
    if span < policy.min_days:
        missing = policy.min_days - span
        expand_start = missing // 2
        expand_end = missing - expand_start
        start -= dt.timedelta(days=expand_start)
        end += dt.timedelta(days=expand_end)

    return _make_window(start, end)
