from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ImpactLevel(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class RawCrashRow(BaseModel):

    """One crash/ANR event as delivered by the query layer"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    crash_id: str
    """ Unique event id """

    timestamp: Optional[str] = None
    """ Event time """

    event_name: Optional[str] = None
    """ Type of event: crash, anr, etc.. """

    platform: Optional[str] = None
    app_version: Optional[str] = None
    bundle_id: Optional[str] = None

    exception_type: Optional[str] = None
    exception_message: Optional[str] = None

    stack_trace: Optional[str] = None
    """ Raw stack trace (long multiline text) """

    is_fatal: bool = False
    """ True if crash terminated the app """

    device_model: Optional[str] = None
    os_version: Optional[str] = None

    memory_available: Optional[int] = None
    """ Free memory in bytes """

    storage_available: Optional[int] = None
    """ Free storage in bytes """

    user_id: Optional[str] = None
    session_id: Optional[str] = None

    custom_keys: Optional[str] = None
    """ JSON-encoded mapping of developer keys """

    breadcrumbs: Optional[str] = None
    """ JSON-encoded list of breadcrumb entries """

    @field_validator("is_fatal", mode="before")
    def validate_is_fatal(cls, value: Any):
        # Null means not fatal, anything else goes through bool parsing
        return False if value is None else value


class CrashSummary(BaseModel):

    model_config = ConfigDict(frozen=True)

    id: str
    """ Id of representative crash """

    timestamp: Optional[str] = None
    """ Time of representative crash """

    impact: ImpactLevel
    """ Severity of crash group """

    affected_users: int
    """ Count of unique users hit by crash """

    occurrences: int
    """ Count of crash events in group """

    app_version: Optional[str] = None
    platform: Optional[str] = None

    crash_message: str
    """ Exception message, 'Unknown error' if missing """

    is_fatal: bool
    title: str


class StackFrame(BaseModel):

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: str
    class_name: str = Field(alias="class")
    file: str
    line: int
    column: Optional[int] = None
    library: Optional[str] = None
    """ Well-known library the frame belongs to """


class StackTrace(BaseModel):
    exception_type: str
    message: str
    frames: List[StackFrame] = []
    """ Frames in source order, first one is the throw site """


class DeviceInfo(BaseModel):
    model: str
    os_version: str
    memory_available: str
    storage_available: str
    orientation: str = "Unknown"
    battery_level: Optional[float] = None


class CrashContext(BaseModel):
    app_version: str
    os_version: str
    device: str
    memory_available: str
    breadcrumbs: List[Any] = []
    custom_keys: Dict[str, Any] = {}
    session_id: str
    user_id: Optional[str] = None


class CrashDetails(BaseModel):
    crash_summary: CrashSummary
    stack_trace: StackTrace
    context: CrashContext
    device_info: DeviceInfo
    suggested_fix_context: str


class AppSummary(BaseModel):

    """Crash counters of one app found in the rows"""

    app_package: str
    platform: str
    total_crashes: int
    fatal_crashes: int
    non_fatal_crashes: int
