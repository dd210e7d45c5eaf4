import asyncio
from datetime import date, timedelta
import enum

from app.schemas.analytics import (
    DashboardCharts,
    DashboardKpis,
    DashboardOverview,
    Kpi,
    ResponseTimePoint,
    StaffRow,
    TagCount,
    VolumePoint,
)
from app.schemas.reports import (
    DateRange,
    ResponseTimeReport,
    StaffReport,
    TagsReport,
    VolumeReport,
)
from app.services.aggregation import round_half_up
from app.services.reports import ReportAggregator

TOP_TAGS = 5


class RangePreset(str, enum.Enum):
    last_7_days = "7d"
    last_30_days = "30d"
    this_month = "month"


def resolve_range(preset: RangePreset, today: date | None = None) -> DateRange:
    today = today or date.today()
    if preset == RangePreset.last_7_days:
        start = today - timedelta(days=7)
    elif preset == RangePreset.last_30_days:
        start = today - timedelta(days=30)
    else:
        start = today.replace(day=1)
    return DateRange(start_date=start, end_date=today)


def previous_range(window: DateRange) -> DateRange:
    """Same-length window ending the day before ``window`` starts."""
    span = window.end_date - window.start_date
    end = window.start_date - timedelta(days=1)
    return DateRange(start_date=end - span, end_date=end)


def percent_change(current: float | None, previous: float | None) -> float | None:
    if current is None or previous is None or previous == 0:
        return None
    return round_half_up((current - previous) / previous * 100, 1)


def _kpi(current: float | None, previous: float | None) -> Kpi:
    return Kpi(value=current, previous=previous, change_pct=percent_change(current, previous))


def total_tickets(report: VolumeReport) -> int:
    return sum(report.conversation_counts.values())


def volume_series(report: VolumeReport) -> list[VolumePoint]:
    return [VolumePoint(date=day, count=count) for day, count in sorted(report.conversation_counts.items())]


def response_time_series(report: ResponseTimeReport) -> list[ResponseTimePoint]:
    return [
        ResponseTimePoint(date=day, minutes=round_half_up(seconds / 60))
        for day, seconds in sorted(report.response_times.items())
    ]


def top_tags(report: TagsReport, limit: int = TOP_TAGS) -> list[TagCount]:
    ranked = sorted(report.tags.items(), key=lambda item: item[1], reverse=True)
    return [TagCount(name=name, count=count) for name, count in ranked[:limit]]


def staff_rows(report: StaffReport) -> list[StaffRow]:
    rows = [
        StaffRow(
            name=name,
            response_count=stats.response_count,
            response_time_minutes=round_half_up(stats.response_time_seconds / 60),
            appreciations=stats.appreciations_count,
        )
        for name, stats in report.report.items()
    ]
    return sorted(rows, key=lambda row: row.response_count, reverse=True)


async def get_dashboard_overview(
    aggregator: ReportAggregator,
    preset: RangePreset = RangePreset.last_7_days,
    today: date | None = None,
) -> DashboardOverview:
    current = resolve_range(preset, today)
    previous = previous_range(current)

    (
        channels,
        tags,
        staff,
        response_time,
        volume,
        prev_channels,
        prev_response_time,
        prev_volume,
    ) = await asyncio.gather(
        aggregator.channel_summary(current),
        aggregator.tags(current),
        aggregator.staff(current),
        aggregator.response_time(current),
        aggregator.volume(current),
        aggregator.channel_summary(previous),
        aggregator.response_time(previous),
        aggregator.volume(previous),
    )

    kpis = DashboardKpis(
        avg_response_time_seconds=_kpi(
            response_time.summary.averages.in_range,
            prev_response_time.summary.averages.in_range,
        ),
        total_tickets=_kpi(total_tickets(volume), total_tickets(prev_volume)),
        csat=_kpi(
            channels.aggregated.average_satisfaction_rating,
            prev_channels.aggregated.average_satisfaction_rating,
        ),
        active_tickets=_kpi(
            channels.aggregated.active_conversations,
            prev_channels.aggregated.active_conversations,
        ),
    )

    failed: list[str] = []
    for report in (channels, tags, staff, response_time, volume):
        for result in report.brands:
            if not result.ok and result.brand not in failed:
                failed.append(result.brand)

    return DashboardOverview(
        range=preset.value,
        start_date=current.start_date,
        end_date=current.end_date,
        previous_start_date=previous.start_date,
        previous_end_date=previous.end_date,
        kpis=kpis,
        charts=DashboardCharts(
            volume=volume_series(volume),
            response_time=response_time_series(response_time),
            top_tags=top_tags(tags),
            staff=staff_rows(staff),
        ),
        failed_brands=failed,
    )
