from enum import Enum
from typing import List

from pydantic import BaseModel

from .crashes import CrashSummary


class CrashTrend(BaseModel):

    date: str
    """ Date period """

    crash_count: int
    """ Count of crashes during period """

    affected_users: int
    """ Count of users who crashed during period """

    crash_free_rate: float
    """ Percentage of users without crashes (0-100) """


class DeviceBreakdown(BaseModel):
    device: str
    crash_count: int
    percentage: float
    """ Share of all crashes, not only of the returned top """


class TrendAnalysis(BaseModel):
    time_range: str

    group_by: str = "version"
    """ Dimension crash statistics were grouped by """

    trends: List[CrashTrend]
    top_crashes: List[CrashSummary]
    most_affected_devices: List[DeviceBreakdown]
    crash_free_percentage: float


class TrendDirection(str, Enum):
    increasing = "increasing"
    decreasing = "decreasing"
    stable = "stable"


class TrendSummary(BaseModel):
    trend: TrendDirection
    change_rate: float
    """ Change of recent average against older one, percent """
