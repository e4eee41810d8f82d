"""Start/pause of per-ticket timers.

A (ticket, user) pair is running while it owns a work log with
``end_time IS NULL``. The partial unique index on ``work_logs`` keeps that to
at most one row; every write here is a single transaction so ticket status
and work logs never diverge.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from sqlalchemy import case, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..deps import AuthContext
from ..errors import MustClockInFirst, NoActiveWorkLog, TicketClosed, TicketNotFound, TimerAlreadyRunning
from ..models import Ticket, WorkLog, WorkSession
from .timefmt import format_duration_human
from .work_sessions import ONE_SECOND, get_active_session, utcnow

logger = logging.getLogger(__name__)
settings = get_settings()

ONE_MILLISECOND = timedelta(milliseconds=1)


def compute_log_duration(start: datetime, end: datetime) -> tuple[datetime, int]:
    """Return the end time to store and the duration in whole seconds.

    The end is pushed to ``start + 1s`` when it does not come after the start,
    so a closed log always has a positive duration. Seconds are truncated
    toward zero, matching an integer cast of the epoch difference.
    """
    if end <= start:
        end = start + ONE_SECOND
    elapsed_ms = (end - start) // ONE_MILLISECOND
    return end, math.trunc(elapsed_ms / 1000)


def _get_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).one_or_none()
    if ticket is None:
        raise TicketNotFound()
    return ticket


def ensure_startable(db: Session, ctx: AuthContext, ticket_id: int) -> tuple[WorkSession, Ticket]:
    """Check the start preconditions in order: clocked in, ticket exists, ticket not closed."""
    session = get_active_session(db, ctx)
    if session is None:
        raise MustClockInFirst()
    ticket = _get_ticket(db, ticket_id)
    if ticket.status == "close":
        raise TicketClosed()
    return session, ticket


def _has_open_work_log(db: Session, ctx: AuthContext, ticket_id: int) -> bool:
    return (
        db.query(WorkLog.id)
        .filter(WorkLog.ticket_id == ticket_id, WorkLog.user_id == ctx.user_id, WorkLog.end_time.is_(None))
        .first()
        is not None
    )


def start_ticket(db: Session, ctx: AuthContext, ticket_id: int, now: datetime | None = None) -> tuple[WorkLog, Ticket]:
    """Open a work log on ``ticket_id`` and mark the ticket active.

    Other running tickets are left alone. Writes already pending in ``db``
    (such as ``pause_other_timers(..., commit=False)``) commit with the new
    log or roll back with it.
    """
    session, ticket = ensure_startable(db, ctx, ticket_id)
    now = now or utcnow()
    work_log = WorkLog(
        ticket_id=ticket.id,
        user_id=ctx.user_id,
        work_session_id=session.id,
        start_time=now,
        end_time=None,
        duration=None,
    )
    db.add(work_log)
    ticket.status = "active"
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # only a timer opened concurrently on the same ticket is a conflict
        if _has_open_work_log(db, ctx, ticket.id):
            raise TimerAlreadyRunning() from exc
        raise
    logger.info("User %s started ticket %s (work log %s)", ctx.user_id, ticket.id, work_log.id)
    return work_log, ticket


def find_open_work_log(db: Session, ctx: AuthContext, ticket_id: int) -> WorkLog | None:
    work_log = (
        db.query(WorkLog)
        .filter(
            WorkLog.ticket_id == ticket_id,
            WorkLog.user_id == ctx.user_id,
            WorkLog.end_time.is_(None),
        )
        .order_by(WorkLog.start_time.desc())
        .first()
    )
    if work_log is not None:
        return work_log
    return _find_legacy_open_work_log(db, ctx, ticket_id)


def _find_legacy_open_work_log(db: Session, ctx: AuthContext, ticket_id: int) -> WorkLog | None:
    # Compatibility: older rows marked a running timer with end_time == start_time.
    # New rows never take this branch; a one-off data migration should retire it.
    recent = (
        db.query(WorkLog)
        .filter(WorkLog.ticket_id == ticket_id, WorkLog.user_id == ctx.user_id)
        .order_by(WorkLog.start_time.desc())
        .limit(settings.legacy_log_scan_limit)
        .all()
    )
    for log in recent:
        if log.end_time is not None and log.end_time == log.start_time:
            logger.warning("Pausing legacy work log %s (end_time == start_time)", log.id)
            return log
    return None


def _close_open_work_log(
    db: Session,
    ctx: AuthContext,
    ticket_id: int,
    description: str | None,
    now: datetime,
) -> tuple[WorkLog, int]:
    """Close the running log and fold it into the ticket, without committing."""
    work_log = find_open_work_log(db, ctx, ticket_id)
    if work_log is None:
        raise NoActiveWorkLog()

    end_time, duration = compute_log_duration(work_log.start_time, now)
    note = description.strip() if description else None
    closed = (
        db.query(WorkLog)
        .filter(
            WorkLog.id == work_log.id,
            or_(WorkLog.end_time.is_(None), WorkLog.end_time == WorkLog.start_time),
        )
        .update(
            {"end_time": end_time, "duration": duration, "description": note or None},
            synchronize_session=False,
        )
    )
    if closed != 1:
        # paused by a concurrent request
        raise NoActiveWorkLog()

    touched = (
        db.query(Ticket)
        .filter(Ticket.id == ticket_id)
        .update(
            {
                "status": "open",
                "total_duration": func.coalesce(Ticket.total_duration, 0) + duration,
                "last_worked_on": case(
                    (or_(Ticket.last_worked_on.is_(None), Ticket.last_worked_on < end_time), end_time),
                    else_=Ticket.last_worked_on,
                ),
            },
            synchronize_session=False,
        )
    )
    if touched != 1:
        raise TicketNotFound()
    return work_log, duration


def pause_ticket(
    db: Session,
    ctx: AuthContext,
    ticket_id: int,
    description: str | None = None,
    now: datetime | None = None,
) -> tuple[WorkLog, Ticket]:
    try:
        work_log, duration = _close_open_work_log(db, ctx, ticket_id, description, now or utcnow())
    except (NoActiveWorkLog, TicketNotFound):
        db.rollback()
        raise
    db.commit()
    ticket = _get_ticket(db, ticket_id)
    db.refresh(work_log)
    db.refresh(ticket)
    logger.info(
        "User %s paused ticket %s after %s",
        ctx.user_id,
        ticket.id,
        format_duration_human(duration),
    )
    return work_log, ticket


def pause_other_timers(
    db: Session,
    ctx: AuthContext,
    keep_ticket_id: int,
    now: datetime | None = None,
    commit: bool = True,
) -> list[int]:
    """Pause every running ticket of the caller except ``keep_ticket_id``.

    With ``commit=False`` the pauses stay in the caller's transaction.
    """
    now = now or utcnow()
    running = (
        db.query(WorkLog.ticket_id)
        .filter(
            WorkLog.user_id == ctx.user_id,
            WorkLog.end_time.is_(None),
            WorkLog.ticket_id != keep_ticket_id,
        )
        .distinct()
        .all()
    )
    paused = []
    for (ticket_id,) in running:
        try:
            _close_open_work_log(db, ctx, ticket_id, None, now)
        except NoActiveWorkLog:
            continue
        paused.append(ticket_id)
    if commit and paused:
        db.commit()
    return paused


def ticket_work_logs(db: Session, ticket_id: int) -> list[WorkLog]:
    return (
        db.query(WorkLog)
        .filter(WorkLog.ticket_id == ticket_id)
        .order_by(WorkLog.start_time.desc())
        .all()
    )
