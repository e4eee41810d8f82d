from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from teamclock.errors import MustClockInFirst, NoActiveWorkLog, TicketClosed, TicketNotFound, TimerAlreadyRunning
from teamclock.models import Ticket, WorkLog
from teamclock.services import ticket_timer, work_sessions

T0 = datetime(2026, 1, 22, 9, 0, 0)


@pytest.fixture
def clocked_in(db_session, ctx):
    return work_sessions.clock_in(db_session, ctx, now=T0)


def test_start_then_pause_accumulates_duration(db_session, ctx, ticket, clocked_in):
    work_log, started = ticket_timer.start_ticket(db_session, ctx, ticket.id, now=T0 + timedelta(minutes=1))
    assert started.status == "active"
    assert work_log.end_time is None
    assert work_log.work_session_id == clocked_in.id

    pause_at = work_log.start_time + timedelta(seconds=65)
    closed, paused = ticket_timer.pause_ticket(db_session, ctx, ticket.id, now=pause_at)
    assert closed.end_time == pause_at
    assert closed.duration == 65
    assert paused.status == "open"
    assert paused.total_duration == 65
    assert paused.last_worked_on == pause_at


def test_second_session_adds_to_total(db_session, ctx, ticket, clocked_in):
    for offset in (0, 600):
        start = T0 + timedelta(seconds=offset)
        ticket_timer.start_ticket(db_session, ctx, ticket.id, now=start)
        _, paused = ticket_timer.pause_ticket(db_session, ctx, ticket.id, now=start + timedelta(seconds=100))
    assert paused.total_duration == 200
    assert paused.last_worked_on == T0 + timedelta(seconds=700)


def test_start_requires_clock_in(db_session, ctx, ticket):
    with pytest.raises(MustClockInFirst):
        ticket_timer.start_ticket(db_session, ctx, ticket.id, now=T0)
    assert db_session.query(WorkLog).count() == 0
    db_session.refresh(ticket)
    assert ticket.status == "open"


def test_start_unknown_ticket(db_session, ctx, clocked_in):
    with pytest.raises(TicketNotFound):
        ticket_timer.start_ticket(db_session, ctx, 9999, now=T0)


def test_start_closed_ticket(db_session, ctx, make_ticket, clocked_in):
    closed = make_ticket("Done already", status="close")
    with pytest.raises(TicketClosed):
        ticket_timer.start_ticket(db_session, ctx, closed.id, now=T0)
    assert db_session.query(WorkLog).count() == 0


def test_double_start_conflicts(db_session, ctx, ticket, clocked_in):
    ticket_timer.start_ticket(db_session, ctx, ticket.id, now=T0)
    with pytest.raises(TimerAlreadyRunning):
        ticket_timer.start_ticket(db_session, ctx, ticket.id, now=T0 + timedelta(seconds=2))
    assert db_session.query(WorkLog).filter(WorkLog.end_time.is_(None)).count() == 1


def test_pause_without_running_timer(db_session, ctx, ticket, clocked_in):
    with pytest.raises(NoActiveWorkLog):
        ticket_timer.pause_ticket(db_session, ctx, ticket.id, now=T0)
    db_session.refresh(ticket)
    assert ticket.status == "open"
    assert ticket.total_duration == 0
    assert ticket.last_worked_on is None


def test_pause_at_same_instant_records_one_second(db_session, ctx, ticket, clocked_in):
    ticket_timer.start_ticket(db_session, ctx, ticket.id, now=T0)
    closed, paused = ticket_timer.pause_ticket(db_session, ctx, ticket.id, now=T0)
    assert closed.duration == 1
    assert closed.end_time == T0 + timedelta(seconds=1)
    assert paused.total_duration == 1


def test_pause_with_clock_skew_records_one_second(db_session, ctx, ticket, clocked_in):
    ticket_timer.start_ticket(db_session, ctx, ticket.id, now=T0)
    closed, _ = ticket_timer.pause_ticket(db_session, ctx, ticket.id, now=T0 - timedelta(seconds=30))
    assert closed.duration == 1
    assert closed.end_time > closed.start_time


def test_pause_keeps_description(db_session, ctx, ticket, clocked_in):
    ticket_timer.start_ticket(db_session, ctx, ticket.id, now=T0)
    closed, _ = ticket_timer.pause_ticket(db_session, ctx, ticket.id, "  wired the form  ", now=T0 + timedelta(minutes=5))
    assert closed.description == "wired the form"


def test_compute_log_duration_truncates():
    start = datetime(2026, 1, 22, 9, 0, 0)
    assert ticket_timer.compute_log_duration(start, start + timedelta(milliseconds=65999)) == (
        start + timedelta(milliseconds=65999),
        65,
    )
    assert ticket_timer.compute_log_duration(start, start + timedelta(microseconds=999_999))[1] == 0
    assert ticket_timer.compute_log_duration(start, start) == (start + timedelta(seconds=1), 1)


def test_pause_legacy_running_marker(db_session, ctx, ticket, clocked_in):
    legacy = WorkLog(
        ticket_id=ticket.id,
        user_id=ctx.user_id,
        work_session_id=clocked_in.id,
        start_time=T0,
        end_time=T0,
        duration=0,
    )
    ticket.status = "active"
    db_session.add(legacy)
    db_session.commit()

    closed, paused = ticket_timer.pause_ticket(db_session, ctx, ticket.id, now=T0 + timedelta(seconds=42))
    assert closed.id == legacy.id
    assert closed.duration == 42
    assert paused.status == "open"
    assert paused.total_duration == 42


def test_pause_other_timers(db_session, ctx, make_ticket, clocked_in):
    first = make_ticket("First")
    second = make_ticket("Second")
    ticket_timer.start_ticket(db_session, ctx, first.id, now=T0)

    paused = ticket_timer.pause_other_timers(db_session, ctx, second.id, now=T0 + timedelta(seconds=30))
    assert paused == [first.id]
    db_session.refresh(first)
    assert first.status == "open"
    assert first.total_duration == 30
    assert ticket_timer.pause_other_timers(db_session, ctx, second.id, now=T0 + timedelta(seconds=60)) == []


def test_ticket_work_logs_newest_first(db_session, ctx, ticket, clocked_in):
    for offset in (0, 300):
        start = T0 + timedelta(seconds=offset)
        ticket_timer.start_ticket(db_session, ctx, ticket.id, now=start)
        ticket_timer.pause_ticket(db_session, ctx, ticket.id, now=start + timedelta(seconds=10))
    logs = ticket_timer.ticket_work_logs(db_session, ticket.id)
    assert [log.start_time for log in logs] == [T0 + timedelta(seconds=300), T0]


def test_start_does_not_pause_other_tickets(db_session, ctx, make_ticket, clocked_in):
    first = make_ticket("First")
    second = make_ticket("Second")
    ticket_timer.start_ticket(db_session, ctx, first.id, now=T0)
    ticket_timer.start_ticket(db_session, ctx, second.id, now=T0 + timedelta(seconds=5))
    open_logs = db_session.query(WorkLog).filter(WorkLog.end_time.is_(None)).count()
    assert open_logs == 2


def test_pause_others_then_start_commit_together(db_session, ctx, make_ticket, clocked_in):
    first = make_ticket("First")
    second = make_ticket("Second")
    ticket_timer.start_ticket(db_session, ctx, first.id, now=T0)

    later = T0 + timedelta(seconds=40)
    assert ticket_timer.pause_other_timers(db_session, ctx, second.id, now=later, commit=False) == [first.id]
    _, started = ticket_timer.start_ticket(db_session, ctx, second.id, now=later)
    assert started.status == "active"
    db_session.refresh(first)
    assert first.status == "open"
    assert first.total_duration == 40
    open_logs = db_session.query(WorkLog).filter(WorkLog.end_time.is_(None)).all()
    assert [log.ticket_id for log in open_logs] == [second.id]


def test_failed_start_leaves_other_timers_running(db_session, ctx, make_ticket, clocked_in):
    first = make_ticket("First")
    second = make_ticket("Second")
    ticket_timer.start_ticket(db_session, ctx, first.id, now=T0)
    # a timer on the second ticket opened by another request
    db_session.add(WorkLog(ticket_id=second.id, user_id=ctx.user_id, work_session_id=clocked_in.id, start_time=T0))
    db_session.commit()

    later = T0 + timedelta(seconds=40)
    ticket_timer.pause_other_timers(db_session, ctx, second.id, now=later, commit=False)
    with pytest.raises(TimerAlreadyRunning):
        ticket_timer.start_ticket(db_session, ctx, second.id, now=later)

    db_session.refresh(first)
    assert first.status == "active"
    assert first.total_duration == 0
    still_open = db_session.query(WorkLog).filter(WorkLog.ticket_id == first.id, WorkLog.end_time.is_(None)).count()
    assert still_open == 1


def test_start_other_integrity_errors_are_not_conflicts(db_session, ctx, clocked_in, monkeypatch):
    missing = Ticket(id=9999, project_id=1, title="Gone", status="open")
    monkeypatch.setattr(ticket_timer, "ensure_startable", lambda db, ctx, ticket_id: (clocked_in, missing))
    with pytest.raises(IntegrityError):
        ticket_timer.start_ticket(db_session, ctx, missing.id, now=T0)
    assert db_session.query(WorkLog).count() == 0
