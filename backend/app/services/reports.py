import asyncio
from typing import Any, Callable, Sequence

from loguru import logger

from app.models.brand import Brand
from app.schemas.reports import (
    BrandReport,
    ChannelSummaryReport,
    DateRange,
    ReportBase,
    ResponseTimeReport,
    StaffReport,
    TagsReport,
    VolumeReport,
)
from app.services.aggregation import (
    merge_channel_summary,
    merge_response_time,
    merge_staff,
    merge_tags,
    merge_volume,
)
from app.services.reamaze import ReamazeClient, ReportMetric

MERGERS: dict[ReportMetric, Callable[[list[BrandReport], DateRange], ReportBase]] = {
    ReportMetric.channel_summary: merge_channel_summary,
    ReportMetric.tags: merge_tags,
    ReportMetric.staff: merge_staff,
    ReportMetric.response_time: merge_response_time,
    ReportMetric.volume: merge_volume,
}


class ReportAggregationError(Exception):
    """The combined report could not be produced at all."""


class ReportAggregator:
    """Fetches one metric from every configured brand and folds the results.

    Brands are fetched concurrently and each failure is recorded against its
    brand instead of failing the batch. Only a failure to load the brand list,
    or a bug while folding, aborts the whole call.
    """

    def __init__(self, client: ReamazeClient, load_brands: Callable[[], Sequence[Brand]]):
        self.client = client
        self.load_brands = load_brands

    async def _fetch_one(self, brand: Brand, metric: ReportMetric, window: DateRange) -> BrandReport:
        try:
            data = await self.client.fetch_report(brand, metric, window)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.warning(f"{metric.value} fetch failed for brand {brand.name!r}: {message}")
            return BrandReport.failure(brand.name, message)
        return BrandReport.success(brand.name, data)

    async def fetch_all(self, brands: Sequence[Brand], metric: ReportMetric, window: DateRange) -> list[BrandReport]:
        # Join-all in brand order; a slow brand delays the batch but never drops it.
        return list(await asyncio.gather(*(self._fetch_one(brand, metric, window) for brand in brands)))

    async def aggregate(self, metric: ReportMetric, window: DateRange | None = None) -> ReportBase:
        window = window or DateRange()
        merge = MERGERS[metric]

        try:
            brands = list(self.load_brands())
        except Exception as exc:
            logger.exception(f"Could not load brands for {metric.value} report")
            raise ReportAggregationError("Could not load brands") from exc

        if not brands:
            logger.info(f"No brands configured; returning empty {metric.value} report")
            return merge([], window)

        results = await self.fetch_all(brands, metric, window)

        try:
            report = merge(results, window)
        except Exception as exc:
            logger.exception(f"Failed to aggregate {metric.value} across {len(results)} brands")
            raise ReportAggregationError(f"Could not aggregate {metric.value}") from exc

        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Aggregated {metric.value} for {len(results) - failed}/{len(results)} brands")
        return report

    async def channel_summary(self, window: DateRange | None = None) -> ChannelSummaryReport:
        return await self.aggregate(ReportMetric.channel_summary, window)

    async def tags(self, window: DateRange | None = None) -> TagsReport:
        return await self.aggregate(ReportMetric.tags, window)

    async def staff(self, window: DateRange | None = None) -> StaffReport:
        return await self.aggregate(ReportMetric.staff, window)

    async def response_time(self, window: DateRange | None = None) -> ResponseTimeReport:
        return await self.aggregate(ReportMetric.response_time, window)

    async def volume(self, window: DateRange | None = None) -> VolumeReport:
        return await self.aggregate(ReportMetric.volume, window)

    async def brand_report(self, brand: Brand, metric: ReportMetric, window: DateRange | None = None) -> dict[str, Any]:
        return await self.client.fetch_report(brand, metric, window)
