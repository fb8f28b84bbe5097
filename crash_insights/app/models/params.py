from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ImpactFilter(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"
    all = "all"


class Platform(str, Enum):
    ios = "ios"
    android = "android"
    all = "all"


class TimeRange(str, Enum):
    last_day = "24h"
    last_week = "7d"
    last_month = "30d"
    all = "all"


class GroupBy(str, Enum):
    version = "version"
    device = "device"
    os = "os"
    issue_type = "issue_type"


class EventKind(str, Enum):
    all = "all"
    fatal = "fatal"
    non_fatal = "non_fatal"
    anr = "anr"


class FetchCrashesParams(BaseModel):
    limit: Optional[int] = Field(default=None, gt=0)
    impact_filter: Optional[ImpactFilter] = None

    time_range: Optional[TimeRange] = None
    """ Keep only crashes newer than the range, counting back from now """

    app_package: Optional[str] = Field(default=None, min_length=1)
    """ Bundle id of the app, e.g. com.example.myapp """

    app_version: Optional[str] = None
    platform: Optional[Platform] = None

    event_kind: Optional[EventKind] = None
    """ Fatal crashes, non-fatal events or ANR issues only """


class GetCrashDetailsParams(BaseModel):
    crash_id: str = Field(min_length=1)


class AnalyzeCrashTrendsParams(BaseModel):
    time_range: TimeRange
    group_by: Optional[GroupBy] = None
