from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Set, Tuple

from crash_insights.app.errors import CrashNotFoundError
from crash_insights.app.models import (
    AppSummary,
    CrashContext,
    CrashDetails,
    CrashSummary,
    DeviceInfo,
    EventKind,
    FetchCrashesParams,
    GetCrashDetailsParams,
    ImpactFilter,
    Platform,
    RawCrashRow,
    TimeRange,
)
from crash_insights.app.utils import (
    datetime_utcnow,
    format_memory,
    json_loads,
    parse_timestamp,
    prefixed_logger,
)

from .impact import ImpactAnalyzer
from .stack_trace import StackTraceParser

if TYPE_CHECKING:
    from crash_insights.app.settings import AppSettings

CrashGroupKey = Tuple[Optional[str], Optional[str], Optional[str]]

TITLE_MAX_LENGTH = 50
TITLE_CUT_LENGTH = 47

TIME_RANGE_WINDOWS = {
    TimeRange.last_day: timedelta(days=1),
    TimeRange.last_week: timedelta(days=7),
    TimeRange.last_month: timedelta(days=30),
}


class _CrashGroup:

    """Counters of one deduplicated crash group"""

    def __init__(self, row: RawCrashRow):
        self.row = row
        self.count = 0
        self.users: Set[str] = set()

    def add(self, row: RawCrashRow):
        self.count += 1
        if row.user_id:
            self.users.add(row.user_id)


def generate_crash_title(exception_type: Optional[str], message: Optional[str]) -> str:

    short_type = (exception_type or "").split(".")[-1] or "Unknown"

    if not message:
        return short_type

    if len(message) > TITLE_MAX_LENGTH:
        message = message[:TITLE_CUT_LENGTH] + "..."

    return f"{short_type}: {message}"


class CrashProcessor:

    """
    Turns raw crash rows into ranked crash groups and detail records.
    Holds no state between calls except the impact baseline.
    """

    def __init__(
        self,
        total_users: int = 10000,
        default_crash_limit: int = 10,
    ):
        self._impact_analyzer = ImpactAnalyzer(total_users)
        self._stack_trace_parser = StackTraceParser()
        self._default_crash_limit = default_crash_limit
        self._logger = prefixed_logger(logging.getLogger("analysis"), self)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> CrashProcessor:
        return cls(
            total_users=settings.analyzer.total_users,
            default_crash_limit=settings.analyzer.default_crash_limit,
        )

    @property
    def impact_analyzer(self) -> ImpactAnalyzer:
        return self._impact_analyzer

    ########################################
    # Crash groups
    ########################################

    def process_crash_rows(self, rows: Iterable[RawCrashRow]) -> List[CrashSummary]:

        # dict keeps insertion order: first row of group is representative
        groups: Dict[CrashGroupKey, _CrashGroup] = {}

        for row in rows:
            key = (row.exception_type, row.exception_message, row.app_version)
            group = groups.get(key)
            if group is None:
                group = groups[key] = _CrashGroup(row)
            group.add(row)

        summaries = [
            self._make_summary(group.row, len(group.users), group.count)
            for group in groups.values()
        ]

        self._logger.debug("Grouped %d crash groups", len(summaries))
        return self._impact_analyzer.sort_by_impact_and_frequency(summaries)

    def _make_summary(
        self,
        row: RawCrashRow,
        affected_users: int,
        occurrences: int,
    ) -> CrashSummary:

        impact = self._impact_analyzer.calculate_impact_level(
            affected_users, occurrences, row.is_fatal
        )

        return CrashSummary(
            id=row.crash_id,
            timestamp=row.timestamp,
            impact=impact,
            affected_users=affected_users,
            occurrences=occurrences,
            app_version=row.app_version,
            platform=row.platform,
            crash_message=row.exception_message or "Unknown error",
            is_fatal=row.is_fatal,
            title=generate_crash_title(row.exception_type, row.exception_message),
        )

    def fetch_crashes(
        self,
        rows: Iterable[RawCrashRow],
        params: Optional[FetchCrashesParams] = None,
        now: Optional[datetime] = None,
    ) -> List[CrashSummary]:

        """
        Ranked crash groups, narrowed down by request parameters.
        Time range is counted back from `now`, current UTC time by default.
        """

        if params is None:
            params = FetchCrashesParams()

        rows = [row for row in rows if self._row_matches(row, params)]

        window = TIME_RANGE_WINDOWS.get(params.time_range)
        if window is not None:
            since = (now or datetime_utcnow()) - window
            rows = [row for row in rows if self._is_newer(row, since)]

        summaries = self.process_crash_rows(rows)

        impact_filter = params.impact_filter or ImpactFilter.all
        summaries = self._impact_analyzer.filter_by_impact(summaries, impact_filter)

        return summaries[: params.limit or self._default_crash_limit]

    def fetch_fatal_crashes(
        self,
        rows: Iterable[RawCrashRow],
        app_package: str,
        limit: Optional[int] = None,
    ) -> List[CrashSummary]:
        params = FetchCrashesParams(
            app_package=app_package,
            event_kind=EventKind.fatal,
            limit=limit,
        )
        return self.fetch_crashes(rows, params)

    def fetch_anr_issues(
        self,
        rows: Iterable[RawCrashRow],
        app_package: str,
        limit: Optional[int] = None,
    ) -> List[CrashSummary]:
        params = FetchCrashesParams(
            app_package=app_package,
            event_kind=EventKind.anr,
            limit=limit,
        )
        return self.fetch_crashes(rows, params)

    @staticmethod
    def _row_matches(row: RawCrashRow, params: FetchCrashesParams) -> bool:

        if params.app_package and row.bundle_id != params.app_package:
            return False

        if params.app_version and row.app_version != params.app_version:
            return False

        if params.platform and params.platform != Platform.all:
            if (row.platform or "").lower() != params.platform.value:
                return False

        event_kind = params.event_kind or EventKind.all

        if event_kind == EventKind.fatal:
            return row.is_fatal

        if event_kind == EventKind.non_fatal:
            return not row.is_fatal

        if event_kind == EventKind.anr:
            return (row.event_name or "").lower() == "anr"

        return True

    def _is_newer(self, row: RawCrashRow, since: datetime) -> bool:

        timestamp = parse_timestamp(row.timestamp)
        if timestamp is None:
            self._logger.debug("No valid timestamp in crash '%s'", row.crash_id)
            return False

        return timestamp >= since

    def summarize_apps(self, rows: Iterable[RawCrashRow]) -> List[AppSummary]:

        counters: Dict[Tuple[str, str], List[int]] = {}

        for row in rows:
            key = (row.bundle_id or "Unknown", row.platform or "Unknown")
            total_fatal = counters.setdefault(key, [0, 0])
            total_fatal[0] += 1
            if row.is_fatal:
                total_fatal[1] += 1

        apps = [
            AppSummary(
                app_package=app_package,
                platform=platform,
                total_crashes=total,
                fatal_crashes=fatal,
                non_fatal_crashes=total - fatal,
            )
            for (app_package, platform), (total, fatal) in counters.items()
        ]

        return sorted(apps, key=lambda app: -app.total_crashes)

    ########################################
    # Crash details
    ########################################

    def process_crash_details(self, row: RawCrashRow) -> CrashDetails:

        stack_trace = self._stack_trace_parser.parse(row.stack_trace)

        fix_context = self._impact_analyzer.generate_fix_suggestion_context(
            row.exception_type or "Unknown",
            stack_trace.frames,
            row.exception_message or "",
            row.app_version or "",
        )

        return CrashDetails(
            crash_summary=self._make_summary(row, affected_users=1, occurrences=1),
            stack_trace=stack_trace,
            context=self._extract_crash_context(row),
            device_info=self._extract_device_info(row),
            suggested_fix_context=fix_context,
        )

    def find_crash_details(
        self,
        rows: Iterable[RawCrashRow],
        crash_id: str,
    ) -> CrashDetails:

        params = GetCrashDetailsParams(crash_id=crash_id)

        for row in rows:
            if row.crash_id == params.crash_id:
                return self.process_crash_details(row)

        raise CrashNotFoundError(params.crash_id)

    @staticmethod
    def _extract_device_info(row: RawCrashRow) -> DeviceInfo:
        return DeviceInfo(
            model=row.device_model or "Unknown",
            os_version=row.os_version or "Unknown",
            memory_available=format_memory(row.memory_available),
            storage_available=format_memory(row.storage_available),
            orientation="Unknown",
            battery_level=None,
        )

    def _extract_crash_context(self, row: RawCrashRow) -> CrashContext:
        return CrashContext(
            app_version=row.app_version or "Unknown",
            os_version=row.os_version or "Unknown",
            device=row.device_model or "Unknown",
            memory_available=format_memory(row.memory_available),
            breadcrumbs=self._decode_breadcrumbs(row),
            custom_keys=self._decode_custom_keys(row),
            session_id=row.session_id or "Unknown",
            user_id=row.user_id,
        )

    def _decode_breadcrumbs(self, row: RawCrashRow) -> List[Any]:

        if not row.breadcrumbs:
            return []

        try:
            breadcrumbs = json_loads(row.breadcrumbs)
        except ValueError:
            breadcrumbs = None

        if not isinstance(breadcrumbs, list):
            msg = "Malformed breadcrumbs for crash '%s', keeping raw text"
            self._logger.warning(msg, row.crash_id)
            return [row.breadcrumbs]

        return breadcrumbs

    def _decode_custom_keys(self, row: RawCrashRow) -> Dict[str, Any]:

        if not row.custom_keys:
            return {}

        try:
            custom_keys = json_loads(row.custom_keys)
        except ValueError:
            custom_keys = None

        if not isinstance(custom_keys, dict):
            msg = "Malformed custom keys for crash '%s', ignoring them"
            self._logger.warning(msg, row.crash_id)
            return {}

        return custom_keys
