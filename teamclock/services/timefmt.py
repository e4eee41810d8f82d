"""Display helpers for durations and timestamps."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def is_known_timezone(name: str | None) -> bool:
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True


def seconds_to_hours(seconds: float) -> float:
    return seconds / 3600


def sunday_index(value: date) -> int:
    """Day of week with Sunday as 0 and Saturday as 6."""
    return value.isoweekday() % 7


def _split(seconds: int) -> tuple[int, int, int]:
    seconds = int(seconds)
    return seconds // 3600, (seconds % 3600) // 60, seconds % 60


def format_duration(seconds: int) -> str:
    """``MM:SS`` below an hour, ``HH:MM:SS`` otherwise."""
    hours, minutes, secs = _split(seconds)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_duration_human(seconds: int) -> str:
    hours, minutes, secs = _split(seconds)
    if hours > 0:
        return f"{hours} hr {minutes} min {secs} sec"
    if minutes > 0:
        return f"{minutes} min {secs} sec"
    return f"{secs} sec"


def format_duration_short(seconds: int) -> str:
    hours, minutes, _ = _split(seconds)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    return " ".join(parts) or "0m"


def format_date(value: date) -> str:
    return f"{value.month:02d}/{value.day:02d}/{value.year}"


def _clock(value: datetime, with_seconds: bool = False) -> str:
    hour12 = value.hour % 12 or 12
    am_pm = "PM" if value.hour >= 12 else "AM"
    if with_seconds:
        return f"{hour12}:{value.minute:02d}:{value.second:02d} {am_pm}"
    return f"{hour12}:{value.minute:02d} {am_pm}"


def format_time(value: datetime) -> str:
    return _clock(value)


def format_time_with_seconds(value: datetime) -> str:
    return _clock(value, with_seconds=True)


def format_time_24h(value: datetime) -> str:
    return f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"


def format_date_long(value: date) -> str:
    return f"{DAY_NAMES[sunday_index(value)]}, {MONTH_NAMES[value.month - 1]} {value.day}"


def format_datetime_range(start: datetime, end: datetime) -> str:
    # the end is rendered as a time only, even when it falls on another day
    return f"{MONTH_NAMES[start.month - 1]} {start.day} {_clock(start)} - {_clock(end)}"
