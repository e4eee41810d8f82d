"""Pure aggregation over work logs.

Only closed logs take part: ``end_time`` set and a non-zero ``duration``.
A zero duration is what the legacy "running" marker (``end_time ==
start_time``) looks like, so it is excluded together with open timers.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Sequence
from zoneinfo import ZoneInfo

from ..schemas.statistics import (
    DailyTotal,
    DayOfWeekStats,
    HeatmapBin,
    HeatmapWeek,
    ProjectStats,
    StatisticsSummary,
)
from .timefmt import seconds_to_hours, sunday_index

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
UNKNOWN_PROJECT = "Unknown Project"


@dataclass(frozen=True)
class LogEntry:
    ticket_id: int
    start_time: datetime
    end_time: datetime | None
    duration: int | None
    work_session_id: int | None = None
    project_id: int | None = None
    project_name: str | None = None
    ticket_title: str | None = None

    @property
    def is_closed(self) -> bool:
        return self.end_time is not None and bool(self.duration)

    @classmethod
    def from_work_log(cls, log) -> "LogEntry":
        ticket = getattr(log, "ticket", None)
        project = getattr(ticket, "project", None) if ticket is not None else None
        return cls(
            ticket_id=log.ticket_id,
            start_time=log.start_time,
            end_time=log.end_time,
            duration=log.duration,
            work_session_id=log.work_session_id,
            project_id=ticket.project_id if ticket is not None else None,
            project_name=project.name if project is not None else None,
            ticket_title=ticket.title if ticket is not None else None,
        )


def local_date(value: datetime | date, tz: str | ZoneInfo = "UTC") -> date:
    """Calendar day of ``value`` in ``tz``; naive datetimes are taken as UTC."""
    if not isinstance(value, datetime):
        return value
    zone = tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(zone).date()


def _closed(logs: Iterable[LogEntry]) -> list[LogEntry]:
    return [log for log in logs if log.is_closed]


def _days(start: date, end: date) -> list[date]:
    span = (end - start).days
    return [start + timedelta(days=offset) for offset in range(span + 1)]


def group_by_day(
    logs: Sequence[LogEntry],
    start_date: datetime | date,
    end_date: datetime | date,
    tz: str = "UTC",
) -> list[DailyTotal]:
    zone = ZoneInfo(tz)
    first = local_date(start_date, zone)
    last = local_date(end_date, zone)
    totals = {day.isoformat(): DailyTotal(date=day.isoformat()) for day in _days(first, last)}
    tickets_by_day: dict[str, set[int]] = defaultdict(set)

    for log in _closed(logs):
        key = local_date(log.start_time, zone).isoformat()
        entry = totals.get(key)
        if entry is None:
            continue
        entry.seconds += log.duration
        entry.hours = seconds_to_hours(entry.seconds)
        tickets_by_day[key].add(log.ticket_id)
        entry.ticket_count = len(tickets_by_day[key])
    return list(totals.values())


def get_day_of_week_stats(logs: Sequence[LogEntry], tz: str = "UTC") -> list[DayOfWeekStats]:
    zone = ZoneInfo(tz)
    stats = [DayOfWeekStats(day=label, day_index=index) for index, label in enumerate(WEEKDAY_LABELS)]
    for log in _closed(logs):
        entry = stats[sunday_index(local_date(log.start_time, zone))]
        entry.total_seconds += log.duration
        entry.day_count += 1
    for entry in stats:
        entry.total_hours = seconds_to_hours(entry.total_seconds)
        entry.average_hours = entry.total_hours / entry.day_count if entry.day_count else 0.0
    return stats


def get_top_projects(logs: Sequence[LogEntry], limit: int = 10) -> list[ProjectStats]:
    projects: dict[int, ProjectStats] = {}
    tickets: dict[int, set[int]] = defaultdict(set)
    for log in _closed(logs):
        if log.project_id is None:
            continue
        project = projects.get(log.project_id)
        if project is None:
            name = log.project_name or log.ticket_title or UNKNOWN_PROJECT
            project = projects[log.project_id] = ProjectStats(project_id=log.project_id, project_name=name)
        project.total_seconds += log.duration
        project.total_hours = seconds_to_hours(project.total_seconds)
        tickets[log.project_id].add(log.ticket_id)
        project.ticket_count = len(tickets[log.project_id])
    # ties keep a stable order by project id so input order never matters
    ranked = sorted(projects.values(), key=lambda p: (-p.total_seconds, p.project_id))
    return ranked[:limit]


def calculate_summary(logs: Sequence[LogEntry], daily_totals: Sequence[DailyTotal]) -> StatisticsSummary:
    closed = _closed(logs)
    total_seconds = sum(log.duration for log in closed)
    total_hours = seconds_to_hours(total_seconds)
    worked_days = sum(1 for day in daily_totals if day.seconds > 0)

    per_session: dict[int | None, int] = defaultdict(int)
    for log in closed:
        per_session[log.work_session_id] += log.duration
    average_session = sum(per_session.values()) / len(per_session) if per_session else 0.0

    longest = None
    for day in daily_totals:
        if longest is None or day.seconds > longest.seconds:
            longest = day

    return StatisticsSummary(
        total_hours=total_hours,
        total_seconds=total_seconds,
        average_hours_per_day=total_hours / worked_days if worked_days else 0.0,
        total_tickets_completed=len({log.ticket_id for log in closed}),
        average_session_duration=average_session,
        average_session_duration_hours=seconds_to_hours(average_session),
        longest_work_day=longest.date if longest else "",
        longest_work_day_hours=longest.hours if longest else 0.0,
    )


def prepare_heatmap_data(
    daily_totals: Sequence[DailyTotal],
    start_date: datetime | date,
    end_date: datetime | date,
    tz: str = "UTC",
) -> list[HeatmapWeek]:
    """Sunday-aligned weeks covering the range, seven day bins each."""
    zone = ZoneInfo(tz)
    first = local_date(start_date, zone)
    last = local_date(end_date, zone)
    week_start = first - timedelta(days=sunday_index(first))
    week_end = last + timedelta(days=6 - sunday_index(last))
    total_weeks = ((week_end - week_start).days + 1) // 7
    hours_by_day = {day.date: day.hours for day in daily_totals}

    weeks = []
    for week_index in range(total_weeks):
        sunday = week_start + timedelta(days=week_index * 7)
        bins = [
            HeatmapBin(bin=offset, count=hours_by_day.get((sunday + timedelta(days=offset)).isoformat(), 0.0))
            for offset in range(7)
        ]
        weeks.append(
            HeatmapWeek(
                date=sunday,
                value=sum(b.count for b in bins),
                bin=week_index,
                bins=bins,
            )
        )
    return weeks
