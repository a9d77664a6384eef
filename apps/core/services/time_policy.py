# PATH: apps/core/services/time_policy.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Union


TimeLike = Union[str, time]

WEEKDAYS = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


def to_time(v: TimeLike) -> Optional[time]:
    if v is None:
        return None
    if isinstance(v, time):
        return v

    s = str(v or "").strip()
    if not s:
        return None

    # "HH:MM" or "HH:MM:SS"
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(s, fmt).time()
        except ValueError:
            continue
    return None


def duration_minutes(start: TimeLike, end: TimeLike) -> int:
    """
    Minutes between two wall-clock times on the same day.
    end <= start (overnight classes) is not a valid window and yields 0.
    """
    st = to_time(start)
    et = to_time(end)
    if not st or not et:
        return 0

    start_dt = datetime(2000, 1, 1, st.hour, st.minute, st.second)
    end_dt = datetime(2000, 1, 1, et.hour, et.minute, et.second)
    if end_dt <= start_dt:
        return 0
    return int((end_dt - start_dt).total_seconds() // 60)


def weekday_index(day_name: str) -> int:
    return WEEKDAYS.index(day_name)


def next_weekday_on_or_after(base: date, day_name: str) -> date:
    offset = (weekday_index(day_name) - base.weekday()) % 7
    return base + timedelta(days=offset)


def week_bounds(d: date) -> tuple[date, date]:
    start = d - timedelta(days=d.weekday())
    return start, start + timedelta(days=6)


def month_bounds(d: date) -> tuple[date, date]:
    start = d.replace(day=1)
    if start.month == 12:
        nxt = start.replace(year=start.year + 1, month=1)
    else:
        nxt = start.replace(month=start.month + 1)
    return start, nxt - timedelta(days=1)


def percentage(part, whole) -> int:
    if not whole:
        return 0
    return round(part / whole * 100)
