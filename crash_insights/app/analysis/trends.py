from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Sequence, Union

from crash_insights.app.models import (
    AnalyzeCrashTrendsParams,
    CrashSummary,
    CrashTrend,
    DeviceBreakdown,
    GroupBy,
    TimeRange,
    TrendAnalysis,
    TrendSummary,
)
from crash_insights.app.utils import prefixed_logger

from .impact import ImpactAnalyzer

if TYPE_CHECKING:
    from crash_insights.app.settings import AppSettings


def _field(row: Any, name: str, default: Any = None) -> Any:

    """Reads value from a mapping or attribute, None counts as missing"""

    if isinstance(row, Mapping):
        value = row.get(name)
    else:
        value = getattr(row, name, None)

    return default if value is None else value


class TrendAggregator:

    """
    Combines per-day crash-free statistics, grouped crash counts
    and already ranked crash summaries into one trend report.
    """

    def __init__(self, top_n: int = 10):
        self._top_n = top_n
        self._logger = prefixed_logger(logging.getLogger("analysis.trends"), self)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> TrendAggregator:
        return cls(top_n=settings.analyzer.top_n)

    def process_trend_analysis(
        self,
        crash_stats: Sequence[Any],
        crash_free_counts: Sequence[Any],
        top_crashes: Sequence[CrashSummary],
        params: Union[AnalyzeCrashTrendsParams, TimeRange, str],
    ) -> TrendAnalysis:

        # Bare time range is accepted for convenience, still validated
        if not isinstance(params, AnalyzeCrashTrendsParams):
            params = AnalyzeCrashTrendsParams(time_range=params)

        trends = [
            CrashTrend(
                date=str(_field(row, "date", "")),
                crash_count=_field(row, "crash_count", _field(row, "crashed_users", 0)),
                affected_users=_field(row, "crashed_users", 0),
                crash_free_rate=_field(row, "crash_free_rate", 100),
            )
            for row in crash_free_counts
        ]

        if trends:
            total_rate = sum(trend.crash_free_rate for trend in trends)
            crash_free_percentage = total_rate / len(trends)
        else:
            crash_free_percentage = 100

        devices = self.aggregate_device_stats(crash_stats)

        self._logger.debug(
            "Built trend report: %d buckets, %d devices", len(trends), len(devices)
        )

        return TrendAnalysis(
            time_range=params.time_range.value,
            group_by=(params.group_by or GroupBy.version).value,
            trends=trends,
            top_crashes=list(top_crashes[: self._top_n]),
            most_affected_devices=devices,
            crash_free_percentage=round(crash_free_percentage, 2),
        )

    def aggregate_device_stats(self, crash_stats: Sequence[Any]) -> List[DeviceBreakdown]:

        device_counts: Dict[str, int] = {}
        total_crashes = 0

        for stat in crash_stats:
            device = str(_field(stat, "group_key", "Unknown"))
            count = _field(stat, "crash_count", 0)
            device_counts[device] = device_counts.get(device, 0) + count
            total_crashes += count

        # Percentages are taken from the full total before truncation
        devices = [
            DeviceBreakdown(
                device=device,
                crash_count=count,
                percentage=self._percentage(count, total_crashes),
            )
            for device, count in device_counts.items()
        ]

        devices.sort(key=lambda item: -item.crash_count)
        return devices[: self._top_n]

    @staticmethod
    def _percentage(count: int, total: int) -> float:
        if total <= 0:
            return 0
        return round(count / total * 100, 2)

    @staticmethod
    def summarize_trend(trends: Sequence[CrashTrend]) -> TrendSummary:
        return ImpactAnalyzer.identify_trends([trend.crash_count for trend in trends])
