from datetime import date

from pydantic import BaseModel, Field


class Kpi(BaseModel):
    value: float | None
    previous: float | None = None
    change_pct: float | None = None


class DashboardKpis(BaseModel):
    avg_response_time_seconds: Kpi
    total_tickets: Kpi
    csat: Kpi
    active_tickets: Kpi


class VolumePoint(BaseModel):
    date: str
    count: int


class ResponseTimePoint(BaseModel):
    date: str
    minutes: int


class TagCount(BaseModel):
    name: str
    count: int


class StaffRow(BaseModel):
    name: str
    response_count: int
    response_time_minutes: int
    appreciations: int


class DashboardCharts(BaseModel):
    volume: list[VolumePoint] = Field(default_factory=list)
    response_time: list[ResponseTimePoint] = Field(default_factory=list)
    top_tags: list[TagCount] = Field(default_factory=list)
    staff: list[StaffRow] = Field(default_factory=list)


class DashboardOverview(BaseModel):
    range: str
    start_date: date
    end_date: date
    previous_start_date: date
    previous_end_date: date
    kpis: DashboardKpis
    charts: DashboardCharts
    # Brands whose data is missing from at least one current-period report.
    failed_brands: list[str] = Field(default_factory=list)
