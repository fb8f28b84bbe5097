from datetime import datetime, timezone
from logging import LoggerAdapter
from typing import Any, Optional

import orjson
from pydantic import BaseModel

GIB = 1024 * 1024 * 1024
MIB = 1024 * 1024


class PrefixedLogger(LoggerAdapter):
    def process(self, msg, kwargs):
        return f"{self.extra['prefix']} {msg}", kwargs


def prefixed_logger(logger, owner: object) -> PrefixedLogger:
    extra = {"prefix": f"[{owner.__class__.__name__}]"}
    return PrefixedLogger(logger, extra)


def _default(obj):
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True)
    raise TypeError()


json_dumps = lambda x: orjson.dumps(x, _default).decode()
json_loads = lambda x: orjson.loads(x)


def datetime_utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:

    """RFC 3339 time as aware datetime, naive values are taken as UTC"""

    if not value:
        return None

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    try:
        date = datetime.fromisoformat(value)
    except ValueError:
        return None

    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)

    return date


def format_memory(num_bytes: Optional[Any]) -> str:

    """Human readable size: '<x.x>GB' from 1 GiB, '<x>MB' below"""

    if not num_bytes:
        return "Unknown"

    num_bytes = int(num_bytes)
    gb = num_bytes / GIB

    if gb >= 1:
        return f"{gb:.1f}GB"

    return f"{num_bytes / MIB:.0f}MB"
