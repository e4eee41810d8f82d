from datetime import datetime, timedelta

import pytest

from teamclock.deps import AuthContext
from teamclock.errors import InvalidInput
from teamclock.models import WorkLog
from teamclock.services import reporting

NOW = datetime(2026, 1, 23, 15, 0, 0)


def test_resolve_range_utc_bounds():
    start, end = reporting.resolve_range("2026-01-22", "2026-01-23", "UTC", now=NOW)
    assert start == datetime(2026, 1, 22)
    assert end == datetime(2026, 1, 24)


def test_resolve_range_accepts_timestamps_and_swaps():
    start, end = reporting.resolve_range("2026-01-23T18:30:00Z", "2026-01-22", "UTC", now=NOW)
    assert (start, end) == (datetime(2026, 1, 22), datetime(2026, 1, 24))


def test_resolve_range_local_day():
    start, end = reporting.resolve_range("2026-01-22", "2026-01-22", "America/New_York", now=NOW)
    assert start == datetime(2026, 1, 22, 5, 0)
    assert end == datetime(2026, 1, 23, 5, 0)


def test_resolve_range_defaults_to_trailing_window():
    start, end = reporting.resolve_range(None, None, "UTC", now=NOW)
    assert end == datetime(2026, 1, 24)
    assert start == datetime(2025, 12, 24)


def test_resolve_range_bad_date():
    with pytest.raises(InvalidInput):
        reporting.resolve_range("yesterday", None, "UTC", now=NOW)


def _add_log(db_session, ctx, ticket, start, duration):
    db_session.add(
        WorkLog(
            ticket_id=ticket.id,
            user_id=ctx.user_id,
            start_time=start,
            end_time=start + timedelta(seconds=duration),
            duration=duration,
        )
    )
    db_session.commit()


def test_build_statistics_report(db_session, ctx, ticket):
    _add_log(db_session, ctx, ticket, datetime(2026, 1, 22, 9, 0), 3600)
    _add_log(db_session, ctx, ticket, datetime(2026, 1, 23, 10, 0), 1800)
    _add_log(db_session, ctx, ticket, datetime(2026, 1, 24, 0, 0), 999)

    start, end = reporting.resolve_range("2026-01-22", "2026-01-23", "UTC", now=NOW)
    report = reporting.build_statistics(db_session, ctx, start, end).model_dump(mode="json", by_alias=True)

    assert report["summary"]["totalHours"] == 1.5
    assert report["summary"]["averageHoursPerDay"] == 0.75
    assert report["summary"]["totalTicketsCompleted"] == 1
    assert [d["date"] for d in report["dailyTotals"]] == ["2026-01-22", "2026-01-23"]
    assert report["topProjects"][0]["projectName"] == "Backend"
    assert report["topProjects"][0]["totalSeconds"] == 5400
    assert report["heatmapData"][0]["date"] == "2026-01-18"
    assert report["dateRange"] == {"start": "2026-01-22T00:00:00Z", "end": "2026-01-23T23:59:59.999999Z"}


def test_list_work_logs_end_date_is_inclusive(db_session, ctx, ticket):
    _add_log(db_session, ctx, ticket, datetime(2026, 1, 21, 23, 0), 60)
    _add_log(db_session, ctx, ticket, datetime(2026, 1, 22, 23, 59), 60)
    _add_log(db_session, ctx, ticket, datetime(2026, 1, 23, 0, 0), 60)

    logs = reporting.list_work_logs(db_session, ctx, "2026-01-22", "2026-01-22")
    assert [log.start_time for log in logs] == [datetime(2026, 1, 22, 23, 59)]
    assert len(reporting.list_work_logs(db_session, ctx)) == 3


def test_work_logs_are_scoped_to_caller(db_session, ctx, ticket):
    _add_log(db_session, ctx, ticket, datetime(2026, 1, 22, 9, 0), 60)
    stranger = AuthContext(user_id=ctx.user_id + 100, email="x@example.com")
    assert reporting.list_work_logs(db_session, stranger) == []
