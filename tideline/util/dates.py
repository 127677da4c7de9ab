# tideline/util/dates.py
"""Calendar-day helpers.

All values are timezone-naive calendar days. Strings are ISO `yyyy-mm-dd`; the
functions accept `datetime.date`/`datetime.datetime` as well and never consult
the process timezone (aware datetimes keep their own wall-clock date).
"""
from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Union

DateLike = Union[str, dt.date, dt.datetime]


def parse_date(value: DateLike) -> dt.date:
    """Normalize a string/date/datetime to its calendar day."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Cannot parse date: {value!r}")

    s = value.strip()
    if not s:
        raise ValueError("Date is blank")
    try:
        return dt.date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(s).date()
    except ValueError as ex:
        raise ValueError(f"Cannot parse date: {value!r}. Expected YYYY-MM-DD") from ex


snap_to_day = parse_date


def to_iso_date(value: DateLike) -> str:
    return parse_date(value).isoformat()


def add_days(value: DateLike, days: int) -> str:
    return (parse_date(value) + dt.timedelta(days=int(days))).isoformat()


def shift_date(value: DateLike, offset: int) -> str:
    """ISO date shifted by `offset` whole days."""
    return add_days(value, offset)


def day_span(start: DateLike, end: DateLike) -> List[str]:
    """Inclusive list of ISO days; empty when start > end."""
    d = parse_date(start)
    end_d = parse_date(end)
    out: List[str] = []
    while d <= end_d:
        out.append(d.isoformat())
        d += dt.timedelta(days=1)
    return out


def diff_in_days(start: DateLike, end: DateLike) -> int:
    """`end - start` in whole calendar days (may be negative)."""
    return (parse_date(end) - parse_date(start)).days


def offset_from_start(window_start: DateLike, date: DateLike) -> int:
    return diff_in_days(window_start, date)


def is_milestone(start: DateLike, end: DateLike) -> bool:
    return parse_date(start) == parse_date(end)


def clamp_date(value: DateLike, min_value: DateLike, max_value: DateLike) -> str:
    d = parse_date(value)
    lo = parse_date(min_value)
    hi = parse_date(max_value)
    if d < lo:
        return lo.isoformat()
    if d > hi:
        return hi.isoformat()
    return d.isoformat()


def sort_by_date(values: Iterable[DateLike]) -> List[str]:
    return [d.isoformat() for d in sorted(parse_date(v) for v in values)]


def today_date(today: Optional[DateLike] = None) -> dt.date:
    if today is not None:
        return parse_date(today)
    return dt.date.today()


def today_iso(today: Optional[DateLike] = None) -> str:
    return today_date(today).isoformat()


def zoom_step(zoom: str) -> int:
    return 7 if zoom == "week" else 30


def expand_range_around(anchor: DateLike, zoom: str, padding: int = 1) -> dict[str, str]:
    total = zoom_step(zoom) * int(padding)
    return {
        "start": add_days(anchor, -total),
        "end": add_days(anchor, total),
    }
