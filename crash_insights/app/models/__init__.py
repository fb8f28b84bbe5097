from .crashes import (
    AppSummary,
    CrashContext,
    CrashDetails,
    CrashSummary,
    DeviceInfo,
    ImpactLevel,
    RawCrashRow,
    StackFrame,
    StackTrace,
)
from .params import (
    AnalyzeCrashTrendsParams,
    EventKind,
    FetchCrashesParams,
    GetCrashDetailsParams,
    GroupBy,
    ImpactFilter,
    Platform,
    TimeRange,
)
from .trends import (
    CrashTrend,
    DeviceBreakdown,
    TrendAnalysis,
    TrendDirection,
    TrendSummary,
)

__all__ = [
    "AnalyzeCrashTrendsParams",
    "AppSummary",
    "CrashContext",
    "CrashDetails",
    "CrashSummary",
    "CrashTrend",
    "DeviceBreakdown",
    "DeviceInfo",
    "EventKind",
    "FetchCrashesParams",
    "GetCrashDetailsParams",
    "GroupBy",
    "ImpactFilter",
    "ImpactLevel",
    "Platform",
    "RawCrashRow",
    "StackFrame",
    "StackTrace",
    "TimeRange",
    "TrendAnalysis",
    "TrendDirection",
    "TrendSummary",
]
