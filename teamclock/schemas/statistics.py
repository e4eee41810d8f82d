from datetime import date

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DailyTotal(CamelModel):
    date: str
    hours: float = 0.0
    seconds: int = 0
    ticket_count: int = 0


class DayOfWeekStats(CamelModel):
    day: str
    day_index: int
    average_hours: float = 0.0
    total_hours: float = 0.0
    total_seconds: int = 0
    day_count: int = 0


class ProjectStats(CamelModel):
    project_id: int
    project_name: str
    total_hours: float = 0.0
    total_seconds: int = 0
    ticket_count: int = 0


class StatisticsSummary(CamelModel):
    total_hours: float = 0.0
    total_seconds: int = 0
    average_hours_per_day: float = 0.0
    total_tickets_completed: int = 0
    average_session_duration: float = 0.0
    average_session_duration_hours: float = 0.0
    longest_work_day: str = ""
    longest_work_day_hours: float = 0.0


class HeatmapBin(CamelModel):
    bin: int
    count: float = 0.0


class HeatmapWeek(CamelModel):
    date: date
    value: float = 0.0
    bin: int
    bins: list[HeatmapBin]


class DateRange(CamelModel):
    start: str
    end: str


class StatisticsReport(CamelModel):
    summary: StatisticsSummary
    daily_totals: list[DailyTotal]
    day_of_week_stats: list[DayOfWeekStats]
    top_projects: list[ProjectStats]
    heatmap_data: list[HeatmapWeek]
    date_range: DateRange
