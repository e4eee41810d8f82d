from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..deps import AuthContext
from ..errors import NoActiveSession, ProjectNotFound, SessionAlreadyActive
from ..models import Project, WorkLog, WorkSession

logger = logging.getLogger(__name__)

ONE_SECOND = timedelta(seconds=1)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def elapsed_seconds(session: WorkSession, now: datetime | None = None) -> int:
    now = now or utcnow()
    return max(0, (now - session.clock_in_time) // ONE_SECOND)


def get_active_session(db: Session, ctx: AuthContext) -> WorkSession | None:
    return (
        db.query(WorkSession)
        .filter(WorkSession.user_id == ctx.user_id, WorkSession.is_active.is_(True))
        .one_or_none()
    )


def clock_in(db: Session, ctx: AuthContext, project_id: int | None = None, now: datetime | None = None) -> WorkSession:
    if get_active_session(db, ctx) is not None:
        raise SessionAlreadyActive()
    if project_id is not None and db.query(Project.id).filter(Project.id == project_id).first() is None:
        raise ProjectNotFound()

    session = WorkSession(
        user_id=ctx.user_id,
        project_id=project_id,
        clock_in_time=now or utcnow(),
        clock_out_time=None,
        total_duration=None,
        is_active=True,
    )
    db.add(session)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # only a concurrent clock-in winning the partial unique index is a conflict
        if get_active_session(db, ctx) is not None:
            raise SessionAlreadyActive() from exc
        raise
    logger.info("User %s clocked in (session %s)", ctx.user_id, session.id)
    return session


def clock_out(db: Session, ctx: AuthContext, now: datetime | None = None) -> WorkSession:
    session = get_active_session(db, ctx)
    if session is None:
        raise NoActiveSession()

    now = now or utcnow()
    total = elapsed_seconds(session, now)
    updated = (
        db.query(WorkSession)
        .filter(WorkSession.id == session.id, WorkSession.is_active.is_(True))
        .update(
            {"clock_out_time": now, "total_duration": total, "is_active": False},
            synchronize_session=False,
        )
    )
    if updated != 1:
        db.rollback()
        raise NoActiveSession()
    db.commit()
    db.refresh(session)
    logger.info("User %s clocked out (session %s, %ss)", ctx.user_id, session.id, total)
    return session


def list_sessions(db: Session, ctx: AuthContext) -> list[tuple[WorkSession, list[WorkLog]]]:
    sessions = (
        db.query(WorkSession)
        .filter(WorkSession.user_id == ctx.user_id)
        .order_by(WorkSession.clock_in_time.desc())
        .all()
    )
    if not sessions:
        return []
    logs = (
        db.query(WorkLog)
        .options(joinedload(WorkLog.ticket))
        .filter(WorkLog.work_session_id.in_([s.id for s in sessions]))
        .order_by(WorkLog.start_time.desc())
        .all()
    )
    by_session: dict[int, list[WorkLog]] = defaultdict(list)
    for log in logs:
        by_session[log.work_session_id].append(log)
    return [(session, by_session.get(session.id, [])) for session in sessions]
