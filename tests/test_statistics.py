from datetime import date, datetime, timedelta

from teamclock.services.statistics import (
    LogEntry,
    calculate_summary,
    get_day_of_week_stats,
    get_top_projects,
    group_by_day,
    prepare_heatmap_data,
)


def _log(start, duration, ticket_id=1, session_id=10, project_id=100, project_name="Backend", closed=True):
    return LogEntry(
        ticket_id=ticket_id,
        start_time=start,
        end_time=start + timedelta(seconds=duration) if closed else None,
        duration=duration if closed else None,
        work_session_id=session_id,
        project_id=project_id,
        project_name=project_name,
        ticket_title=f"Ticket {ticket_id}",
    )


def _two_day_logs():
    return [
        _log(datetime(2026, 1, 22, 9, 0), 3600, ticket_id=1, session_id=10),
        _log(datetime(2026, 1, 23, 10, 0), 1800, ticket_id=2, session_id=11, project_id=200, project_name="Web"),
    ]


def test_group_by_day_two_days():
    totals = group_by_day(_two_day_logs(), date(2026, 1, 22), date(2026, 1, 23))
    assert [(t.date, t.hours, t.seconds, t.ticket_count) for t in totals] == [
        ("2026-01-22", 1.0, 3600, 1),
        ("2026-01-23", 0.5, 1800, 1),
    ]


def test_summary_two_days():
    logs = _two_day_logs()
    totals = group_by_day(logs, date(2026, 1, 22), date(2026, 1, 23))
    summary = calculate_summary(logs, totals)
    assert summary.total_hours == 1.5
    assert summary.total_seconds == 5400
    assert summary.average_hours_per_day == 0.75
    assert summary.total_tickets_completed == 2
    assert summary.average_session_duration == 2700
    assert summary.average_session_duration_hours == 0.75
    assert summary.longest_work_day == "2026-01-22"
    assert summary.longest_work_day_hours == 1.0


def test_ticket_count_is_distinct_per_day():
    start = datetime(2026, 1, 22, 9, 0)
    logs = [
        _log(start, 600, ticket_id=1),
        _log(start + timedelta(hours=1), 600, ticket_id=1),
        _log(start + timedelta(hours=2), 600, ticket_id=2),
    ]
    (day,) = group_by_day(logs, date(2026, 1, 22), date(2026, 1, 22))
    assert day.seconds == 1800
    assert day.ticket_count == 2


def test_open_and_out_of_range_logs_are_ignored():
    logs = [
        _log(datetime(2026, 1, 22, 9, 0), 600),
        _log(datetime(2026, 1, 22, 11, 0), 0, closed=False),
        _log(datetime(2026, 2, 1, 9, 0), 600),
    ]
    totals = group_by_day(logs, date(2026, 1, 22), date(2026, 1, 23))
    assert [t.seconds for t in totals] == [600, 0]


def test_zero_duration_legacy_marker_is_not_counted():
    start = datetime(2026, 1, 22, 9, 0)
    marker = LogEntry(ticket_id=9, start_time=start, end_time=start, duration=0, work_session_id=1, project_id=100)
    summary = calculate_summary([marker], group_by_day([marker], start, start))
    assert summary.total_tickets_completed == 0
    assert summary.total_seconds == 0


def test_group_by_day_uses_local_calendar_day():
    # 02:00 UTC on the 23rd is still the evening of the 22nd in New York
    logs = [_log(datetime(2026, 1, 23, 2, 0), 1200)]
    totals = group_by_day(logs, date(2026, 1, 22), date(2026, 1, 23), tz="America/New_York")
    assert [t.seconds for t in totals] == [1200, 0]


def test_aggregation_is_idempotent_and_order_independent():
    logs = _two_day_logs() + [_log(datetime(2026, 1, 22, 15, 0), 900, ticket_id=3, project_id=200, project_name="Web")]
    first = group_by_day(logs, date(2026, 1, 20), date(2026, 1, 24))
    second = group_by_day(logs, date(2026, 1, 20), date(2026, 1, 24))
    reordered = group_by_day(list(reversed(logs)), date(2026, 1, 20), date(2026, 1, 24))
    assert first == second == reordered
    assert get_top_projects(logs) == get_top_projects(list(reversed(logs)))
    assert get_day_of_week_stats(logs) == get_day_of_week_stats(list(reversed(logs)))


def test_day_of_week_stats():
    logs = _two_day_logs() + [_log(datetime(2026, 1, 29, 9, 0), 7200, ticket_id=4)]
    stats = get_day_of_week_stats(logs)
    assert [s.day for s in stats] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    thursday = stats[4]
    assert thursday.day_count == 2
    assert thursday.total_seconds == 10800
    assert thursday.total_hours == 3.0
    assert thursday.average_hours == 1.5
    assert stats[5].total_hours == 0.5
    assert stats[0].average_hours == 0


def test_top_projects_rank_and_limit():
    logs = [
        _log(datetime(2026, 1, 22, 9, 0), 600, ticket_id=1, project_id=1, project_name="Small"),
        _log(datetime(2026, 1, 22, 10, 0), 3600, ticket_id=2, project_id=2, project_name="Big"),
        _log(datetime(2026, 1, 22, 11, 0), 1200, ticket_id=3, project_id=2, project_name="Big"),
        _log(datetime(2026, 1, 22, 12, 0), 1800, ticket_id=4, project_id=3, project_name=None),
    ]
    ranked = get_top_projects(logs, limit=2)
    assert [(p.project_name, p.total_seconds, p.ticket_count) for p in ranked] == [
        ("Big", 4800, 2),
        ("Ticket 4", 1800, 1),
    ]


def test_empty_logs_yield_zeros():
    totals = group_by_day([], date(2026, 1, 22), date(2026, 1, 24))
    summary = calculate_summary([], totals)
    assert [t.seconds for t in totals] == [0, 0, 0]
    assert summary.total_hours == 0
    assert summary.average_hours_per_day == 0
    assert summary.average_session_duration == 0
    assert summary.longest_work_day == "2026-01-22"
    assert get_top_projects([]) == []
    assert all(s.day_count == 0 for s in get_day_of_week_stats([]))


def test_heatmap_weeks_start_on_sunday():
    logs = _two_day_logs()
    totals = group_by_day(logs, date(2026, 1, 22), date(2026, 1, 23))
    weeks = prepare_heatmap_data(totals, date(2026, 1, 22), date(2026, 1, 23))
    assert len(weeks) == 1
    week = weeks[0]
    assert week.date == date(2026, 1, 18)
    assert [b.count for b in week.bins] == [0, 0, 0, 0, 1.0, 0.5, 0]
    assert week.value == 1.5


def test_heatmap_spans_every_touched_week():
    weeks = prepare_heatmap_data([], date(2026, 1, 24), date(2026, 2, 1))
    assert [w.date for w in weeks] == [date(2026, 1, 18), date(2026, 1, 25), date(2026, 2, 1)]
    assert [w.bin for w in weeks] == [0, 1, 2]
    assert all(len(w.bins) == 7 for w in weeks)


def test_camel_case_payload():
    (day,) = group_by_day([], date(2026, 1, 22), date(2026, 1, 22))
    assert day.model_dump(by_alias=True) == {"date": "2026-01-22", "hours": 0.0, "seconds": 0, "ticketCount": 0}
