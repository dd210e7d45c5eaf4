from fastapi import APIRouter, Depends, Query

from app.core.deps import get_current_admin, get_report_aggregator
from app.schemas.analytics import DashboardOverview
from app.services.analytics import RangePreset, get_dashboard_overview
from app.services.reports import ReportAggregator

router = APIRouter(prefix="/analytics", tags=["analytics"], dependencies=[Depends(get_current_admin)])


@router.get("/dashboard", response_model=DashboardOverview)
async def dashboard_overview(
    preset: RangePreset = Query(default=RangePreset.last_7_days, alias="range"),
    aggregator: ReportAggregator = Depends(get_report_aggregator),
):
    return await get_dashboard_overview(aggregator, preset)
