"""
Cross-brand folding rules for the Re:amaze reports.

Every function takes the per-brand outcomes of one fan-out and returns the
combined report. Errored brands are listed in ``brands`` but contribute
nothing to the numbers. Keys (channels, tags, staff, days) are the union of
the keys seen in successful payloads.
"""

import math
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Iterator

from app.schemas.reports import (
    BrandReport,
    ChannelStats,
    ChannelSummaryReport,
    DateRange,
    ResponseTimeAverages,
    ResponseTimeReport,
    ResponseTimeSummary,
    StaffReport,
    StaffStats,
    TagsReport,
    VolumeReport,
)


def round_half_up(value: float, places: int = 0) -> float | int:
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def parse_number(value: Any) -> int | float | None:
    """Read an upstream count or average, or ``None`` if it is not a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    if isinstance(value, float):
        return number
    return int(number) if number.is_integer() else number


def as_number(value: Any) -> int | float:
    number = parse_number(value)
    return 0 if number is None else number


def _payloads(results: Iterable[BrandReport]) -> Iterator[dict[str, Any]]:
    for result in results:
        if result.ok and isinstance(result.data, dict):
            yield result.data


def _mapping(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


class _RatingMean:
    """Running mean that ignores the upstream ``0``/missing "not rated" sentinel.

    Re:amaze reports unrated channels as 0, which is indistinguishable from a
    real zero score; only strictly positive ratings are counted.
    """

    def __init__(self):
        self.total = 0.0
        self.count = 0

    def add(self, rating: Any) -> None:
        value = as_number(rating)
        if value > 0:
            self.total += value
            self.count += 1

    @property
    def mean(self) -> float | None:
        if not self.count:
            return None
        return round_half_up(self.total / self.count, 2)


def _channel_name(channel_id: str, entry: dict[str, Any]) -> str:
    channel = entry.get("channel")
    if isinstance(channel, dict) and channel.get("name"):
        return str(channel["name"])
    return str(channel_id)


def merge_channel_summary(results: list[BrandReport], window: DateRange) -> ChannelSummaryReport:
    active: dict[str, int] = {}
    ratings: dict[str, _RatingMean] = defaultdict(_RatingMean)
    overall = _RatingMean()
    total_active = 0

    for payload in _payloads(results):
        for channel_id, entry in _mapping(payload, "channels").items():
            if not isinstance(entry, dict):
                continue
            name = _channel_name(channel_id, entry)
            conversations = int(as_number(entry.get("active_conversations")))
            active[name] = active.get(name, 0) + conversations
            total_active += conversations

            rating = entry.get("average_satisfaction_rating")
            ratings[name].add(rating)
            overall.add(rating)

    channels = {
        name: ChannelStats(
            active_conversations=count,
            average_satisfaction_rating=ratings[name].mean,
            total_satisfaction_ratings=ratings[name].count,
        )
        for name, count in active.items()
    }
    return ChannelSummaryReport(
        channels=channels,
        aggregated=ChannelStats(
            active_conversations=total_active,
            average_satisfaction_rating=overall.mean,
            total_satisfaction_ratings=overall.count,
        ),
        brands=results,
        start_date=window.start_date,
        end_date=window.end_date,
    )


def merge_tags(results: list[BrandReport], window: DateRange) -> TagsReport:
    tags: dict[str, int] = {}
    for payload in _payloads(results):
        for name, count in _mapping(payload, "tags").items():
            tags[name] = tags.get(name, 0) + int(as_number(count))
    return TagsReport(tags=tags, brands=results, start_date=window.start_date, end_date=window.end_date)


def merge_staff(results: list[BrandReport], window: DateRange) -> StaffReport:
    responses: dict[str, int] = {}
    appreciations: dict[str, int] = {}
    weighted_seconds: dict[str, float] = defaultdict(float)

    for payload in _payloads(results):
        for name, stats in _mapping(payload, "report").items():
            if not isinstance(stats, dict):
                continue
            count = int(as_number(stats.get("response_count")))
            responses[name] = responses.get(name, 0) + count
            appreciations[name] = appreciations.get(name, 0) + int(as_number(stats.get("appreciations_count")))
            # Brands with more responses weigh more in the merged average.
            weighted_seconds[name] += as_number(stats.get("response_time_seconds")) * count

    report = {
        name: StaffStats(
            response_count=count,
            response_time_seconds=int(weighted_seconds[name] / count) if count else 0,
            appreciations_count=appreciations[name],
        )
        for name, count in responses.items()
    }
    return StaffReport(report=report, brands=results, start_date=window.start_date, end_date=window.end_date)


def _sum_daily(results: list[BrandReport], key: str, window: DateRange) -> dict[str, int | float]:
    series: dict[str, int | float] = {}
    for payload in _payloads(results):
        for day, value in _mapping(payload, key).items():
            # Upstream already filters by date; re-check so stray days never leak in.
            if not window.contains(day):
                continue
            series[day] = series.get(day, 0) + as_number(value)
    return series


def _in_range_average(payload: dict[str, Any]) -> Any:
    averages = _mapping(_mapping(payload, "summary"), "averages")
    return averages.get("in_range")


def merge_response_time(results: list[BrandReport], window: DateRange) -> ResponseTimeReport:
    parsed = (parse_number(_in_range_average(payload)) for payload in _payloads(results))
    reported = [value for value in parsed if value is not None]
    in_range = round_half_up(sum(reported) / len(reported)) if reported else 0

    return ResponseTimeReport(
        response_times=_sum_daily(results, "response_times", window),
        summary=ResponseTimeSummary(averages=ResponseTimeAverages(in_range=in_range)),
        brands=results,
        start_date=window.start_date,
        end_date=window.end_date,
    )


def merge_volume(results: list[BrandReport], window: DateRange) -> VolumeReport:
    counts = {day: int(value) for day, value in _sum_daily(results, "conversation_counts", window).items()}
    return VolumeReport(
        conversation_counts=counts,
        brands=results,
        start_date=window.start_date,
        end_date=window.end_date,
    )
