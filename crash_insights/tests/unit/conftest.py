from typing import Any

import pytest

from crash_insights.app.analysis import CrashProcessor, TrendAggregator
from crash_insights.app.models import RawCrashRow

SAMPLE_STACK_TRACE = """java.lang.NullPointerException: Attempt to invoke virtual method on a null object
    at com.example.app.MainActivity.onCreate(MainActivity.java:42)
    at android.app.Activity.performCreate(Activity.java:7136:12)
    at java.lang.reflect.Method.invoke(Native Method)
    #00 pc 000000000001e8c4  /system/lib64/libc.so (abort+164)
    com.example.Util.helper (Util.kt:7)
    ... 12 more
"""


def make_row(**kwargs: Any) -> RawCrashRow:
    data = dict(
        crash_id="crash-1",
        timestamp="2024-01-01T10:00:00Z",
        event_name="crash",
        platform="android",
        app_version="1.2.3",
        bundle_id="com.example.app",
        exception_type="java.lang.NullPointerException",
        exception_message="x",
        stack_trace=SAMPLE_STACK_TRACE,
        is_fatal=True,
        device_model="Pixel 7",
        os_version="14",
        memory_available=1073741824,
        storage_available=524288000,
        user_id="user-1",
        session_id="session-1",
        custom_keys='{"screen": "main", "retries": 3}',
        breadcrumbs='["app_open", "button_click"]',
    )
    data.update(kwargs)
    return RawCrashRow(**data)


@pytest.fixture()
def processor():
    return CrashProcessor()


@pytest.fixture()
def aggregator():
    return TrendAggregator()
