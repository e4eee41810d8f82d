from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..config import get_settings
from ..deps import AuthContext
from ..errors import InvalidInput, UpstreamFailure
from ..models import Ticket, WorkLog
from ..schemas.common import to_iso
from ..schemas.statistics import DateRange, StatisticsReport
from . import statistics as engine
from .work_sessions import utcnow

logger = logging.getLogger(__name__)
settings = get_settings()


def _parse_date(value: str | None, label: str) -> date | None:
    if not value:
        return None
    try:
        # accepts plain dates as well as full ISO timestamps
        return date.fromisoformat(value[:10])
    except ValueError as exc:
        raise InvalidInput(f"Invalid {label}", details=value) from exc


def _to_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def resolve_range(
    start_value: str | None,
    end_value: str | None,
    tz: str,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Local ``[start of start day, end of end day)`` as naive UTC bounds.

    Defaults to the trailing ``statistics_default_days`` ending today.
    """
    zone = ZoneInfo(tz)
    now = now or utcnow()
    today = now.replace(tzinfo=timezone.utc).astimezone(zone).date()
    end_day = _parse_date(end_value, "endDate") or today
    start_day = _parse_date(start_value, "startDate") or today - timedelta(days=settings.statistics_default_days)
    if start_day > end_day:
        start_day, end_day = end_day, start_day
    start = datetime.combine(start_day, time.min, tzinfo=zone)
    end = datetime.combine(end_day + timedelta(days=1), time.min, tzinfo=zone)
    return _to_utc(start), _to_utc(end)


def fetch_work_logs(db: Session, ctx: AuthContext, start: datetime | None, end: datetime | None) -> list[WorkLog]:
    """Logs of the caller with ``start <= start_time < end``, oldest first."""
    query = (
        db.query(WorkLog)
        .options(joinedload(WorkLog.ticket).joinedload(Ticket.project))
        .filter(WorkLog.user_id == ctx.user_id)
    )
    if start is not None:
        query = query.filter(WorkLog.start_time >= start)
    if end is not None:
        query = query.filter(WorkLog.start_time < end)
    try:
        return query.order_by(WorkLog.start_time.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception("Error fetching work logs for user %s", ctx.user_id)
        raise UpstreamFailure("Failed to fetch work logs", details=str(exc)) from exc


def build_statistics(db: Session, ctx: AuthContext, start: datetime, end: datetime) -> StatisticsReport:
    logs = [engine.LogEntry.from_work_log(log) for log in fetch_work_logs(db, ctx, start, end)]
    tz = ctx.tz
    # the last day shown is the one containing the final instant of the range
    last_instant = end - timedelta(microseconds=1)
    daily_totals = engine.group_by_day(logs, start, last_instant, tz)
    return StatisticsReport(
        summary=engine.calculate_summary(logs, daily_totals),
        daily_totals=daily_totals,
        day_of_week_stats=engine.get_day_of_week_stats(logs, tz),
        top_projects=engine.get_top_projects(logs, settings.top_projects_limit),
        heatmap_data=engine.prepare_heatmap_data(daily_totals, start, last_instant, tz),
        date_range=DateRange(start=to_iso(start), end=to_iso(last_instant)),
    )


def list_work_logs(
    db: Session,
    ctx: AuthContext,
    start_value: str | None = None,
    end_value: str | None = None,
) -> list[WorkLog]:
    """Timeline feed; the end date is inclusive, so one day is added to it."""
    zone = ZoneInfo(ctx.tz)
    start_day = _parse_date(start_value, "startDate")
    end_day = _parse_date(end_value, "endDate")
    start = _to_utc(datetime.combine(start_day, time.min, tzinfo=zone)) if start_day else None
    end = _to_utc(datetime.combine(end_day + timedelta(days=1), time.min, tzinfo=zone)) if end_day else None
    return fetch_work_logs(db, ctx, start, end)
