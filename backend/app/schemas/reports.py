from datetime import date
from typing import Any

from pydantic import BaseModel, Field, SerializerFunctionWrapHandler, model_serializer


class DateRange(BaseModel):
    """Optional inclusive reporting window; only applied when both bounds are set."""

    start_date: date | None = None
    end_date: date | None = None

    @property
    def bounded(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def as_params(self) -> dict[str, str]:
        if not self.bounded:
            return {}
        return {"start_date": self.start_date.isoformat(), "end_date": self.end_date.isoformat()}

    def contains(self, day_key: str) -> bool:
        """True if a ``YYYY-MM-DD...`` key falls inside the window.

        Unbounded windows accept everything; unparseable keys are rejected
        from bounded windows.
        """
        if not self.bounded:
            return True
        try:
            day = date.fromisoformat(str(day_key)[:10])
        except ValueError:
            return False
        return self.start_date <= day <= self.end_date


class BrandReport(BaseModel):
    """Outcome of one brand's fetch: either ``data`` or ``error``, never both."""

    brand: str
    data: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, brand: str, data: dict[str, Any]) -> "BrandReport":
        return cls(brand=brand, data=data)

    @classmethod
    def failure(cls, brand: str, error: str) -> "BrandReport":
        return cls(brand=brand, error=error)

    @model_serializer(mode="wrap")
    def _serialize_one_branch(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        out = handler(self)
        out.pop("data" if self.error is not None else "error", None)
        return out


class ReportBase(BaseModel):
    brands: list[BrandReport] = Field(default_factory=list)
    start_date: date | None = None
    end_date: date | None = None


class ChannelStats(BaseModel):
    active_conversations: int = 0
    # None when no brand reported a positive rating.
    average_satisfaction_rating: float | None = None
    total_satisfaction_ratings: int = 0


class ChannelSummaryReport(ReportBase):
    channels: dict[str, ChannelStats] = Field(default_factory=dict)
    aggregated: ChannelStats = Field(default_factory=ChannelStats)


class TagsReport(ReportBase):
    tags: dict[str, int] = Field(default_factory=dict)


class StaffStats(BaseModel):
    response_count: int = 0
    response_time_seconds: int = 0
    appreciations_count: int = 0


class StaffReport(ReportBase):
    report: dict[str, StaffStats] = Field(default_factory=dict)


class ResponseTimeAverages(BaseModel):
    in_range: int = 0


class ResponseTimeSummary(BaseModel):
    averages: ResponseTimeAverages = Field(default_factory=ResponseTimeAverages)


class ResponseTimeReport(ReportBase):
    response_times: dict[str, int | float] = Field(default_factory=dict)
    summary: ResponseTimeSummary = Field(default_factory=ResponseTimeSummary)


class VolumeReport(ReportBase):
    conversation_counts: dict[str, int] = Field(default_factory=dict)
