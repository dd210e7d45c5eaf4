from fastapi import APIRouter, Depends

from app.core.deps import get_current_admin, get_date_range, get_report_aggregator
from app.schemas.reports import (
    ChannelSummaryReport,
    DateRange,
    ResponseTimeReport,
    StaffReport,
    TagsReport,
    VolumeReport,
)
from app.services.reports import ReportAggregator

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(get_current_admin)])


@router.get("/channel-summary", response_model=ChannelSummaryReport)
async def channel_summary_report(
    window: DateRange = Depends(get_date_range),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
):
    return await aggregator.channel_summary(window)


@router.get("/tags", response_model=TagsReport)
async def tags_report(
    window: DateRange = Depends(get_date_range),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
):
    return await aggregator.tags(window)


@router.get("/staff", response_model=StaffReport)
async def staff_report(
    window: DateRange = Depends(get_date_range),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
):
    return await aggregator.staff(window)


@router.get("/response-time", response_model=ResponseTimeReport)
async def response_time_report(
    window: DateRange = Depends(get_date_range),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
):
    return await aggregator.response_time(window)


@router.get("/volume", response_model=VolumeReport)
async def volume_report(
    window: DateRange = Depends(get_date_range),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
):
    return await aggregator.volume(window)
