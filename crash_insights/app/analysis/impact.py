from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from crash_insights.app.models import (
    CrashSummary,
    ImpactFilter,
    ImpactLevel,
    StackFrame,
    TrendDirection,
    TrendSummary,
)
from crash_insights.app.utils import prefixed_logger

IMPACT_WEIGHT: Dict[ImpactLevel, int] = {
    ImpactLevel.high: 3,
    ImpactLevel.medium: 2,
    ImpactLevel.low: 1,
}

# Order matters: first matching key wins
COMMON_EXCEPTION_ADVICE: Dict[str, str] = {
    "NullPointerException": "Check for null values before accessing object methods or properties",
    "IndexOutOfBoundsException": "Verify array/list bounds before accessing elements",
    "IllegalArgumentException": "Validate method parameters before use",
    "ClassCastException": "Verify object types before casting",
    "ConcurrentModificationException": "Use thread-safe collections or synchronization when modifying collections across threads",
    "OutOfMemoryError": "Review memory usage, optimize data structures, or increase heap size",
    "StackOverflowError": "Check for infinite recursion or deeply nested method calls",
}

GENERIC_ADVICE = "Review the stack trace to identify the root cause"

STABLE_CHANGE_RATE = 10


def classify_impact(
    affected_users: int,
    occurrences: int,
    is_fatal: bool,
    total_users: int,
) -> ImpactLevel:

    """
    Maps crash reach and frequency to severity.
    Fatal crashes escalate at lower thresholds than non-fatal ones.
    """

    if total_users > 0:
        user_pct = affected_users / total_users * 100
    else:
        user_pct = 0

    if is_fatal:
        if affected_users > 100 or user_pct > 5:
            return ImpactLevel.high
        elif affected_users >= 10 or user_pct >= 1:
            return ImpactLevel.medium
        else:
            return ImpactLevel.low

    if affected_users > 500 or user_pct > 10 or occurrences > 1000:
        return ImpactLevel.high
    elif affected_users >= 50 or user_pct >= 2 or occurrences >= 100:
        return ImpactLevel.medium
    else:
        return ImpactLevel.low


def get_exception_advice(exception_type: str) -> str:
    for key, advice in COMMON_EXCEPTION_ADVICE.items():
        if key in exception_type:
            return advice

    return GENERIC_ADVICE


class ImpactAnalyzer:

    _total_users: int

    def __init__(self, total_users: int = 10000):
        self._total_users = total_users
        self._logger = prefixed_logger(logging.getLogger("analysis.impact"), self)

        if total_users <= 0:
            msg = "Non-positive user baseline %d, user percentage is ignored"
            self._logger.warning(msg, total_users)

    @property
    def total_users(self) -> int:
        return self._total_users

    def calculate_impact_level(
        self,
        affected_users: int,
        occurrences: int,
        is_fatal: bool,
    ) -> ImpactLevel:
        return classify_impact(affected_users, occurrences, is_fatal, self._total_users)

    @staticmethod
    def filter_by_impact(
        crashes: Sequence[CrashSummary],
        impact_filter: ImpactFilter,
    ) -> List[CrashSummary]:

        if impact_filter == ImpactFilter.all:
            return list(crashes)

        return [crash for crash in crashes if crash.impact.value == impact_filter.value]

    @staticmethod
    def sort_by_impact_and_frequency(
        crashes: Sequence[CrashSummary],
    ) -> List[CrashSummary]:
        # sorted() is stable: full ties keep input order
        return sorted(
            crashes,
            key=lambda crash: (-IMPACT_WEIGHT[crash.impact], -crash.occurrences),
        )

    @staticmethod
    def generate_fix_suggestion_context(
        exception_type: str,
        frames: Sequence[StackFrame],
        crash_message: str,
        app_version: str,
    ) -> str:

        top_frame = frames[0] if frames else None
        context = []

        class_name = top_frame.class_name if top_frame else None
        context.append(f"The crash occurs in {class_name or 'unknown class'}")

        if top_frame and top_frame.method:
            context.append(f"in the {top_frame.method} method")

        if top_frame and top_frame.file and top_frame.line:
            context.append(f"at {top_frame.file}:{top_frame.line}")

        context.append(f"when a {exception_type} is thrown")

        if crash_message:
            context.append(f'with the message: "{crash_message}"')

        context.append(get_exception_advice(exception_type or ""))

        if app_version:
            context.append(f"This occurs in app version {app_version}")

        return ". ".join(context) + "."

    @staticmethod
    def calculate_crash_free_rate(total_users: int, crashed_users: int) -> float:
        if total_users == 0:
            return 100
        return (total_users - crashed_users) / total_users * 100

    @staticmethod
    def identify_trends(crash_counts: Sequence[int]) -> TrendSummary:

        """
        Compare average of last 3 buckets against 3 buckets before them.
        Change below 10% in either direction is considered stable.
        """

        if len(crash_counts) < 2:
            return TrendSummary(trend=TrendDirection.stable, change_rate=0)

        recent = crash_counts[-3:]
        older = crash_counts[-6:-3]

        recent_avg = sum(recent) / len(recent)
        older_avg = sum(older) / len(older) if older else recent_avg

        if older_avg > 0:
            change_rate = (recent_avg - older_avg) / older_avg * 100
        else:
            change_rate = 0

        if abs(change_rate) < STABLE_CHANGE_RATE:
            trend = TrendDirection.stable
        elif change_rate > 0:
            trend = TrendDirection.increasing
        else:
            trend = TrendDirection.decreasing

        return TrendSummary(trend=trend, change_rate=change_rate)
