from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from crash_insights.app.models import StackFrame, StackTrace
from crash_insights.app.utils import prefixed_logger

EXCEPTION_HEADER = re.compile(r"^(\w+(?:\.\w+)*(?:Exception|Error)?)(?::\s*(.*))?$")

LIBRARY_PREFIXES = [
    "android.",
    "androidx.",
    "com.google.",
    "java.",
    "kotlin.",
    "swift.",
    "foundation.",
    "uikit.",
]


@dataclass(frozen=True)
class FramePattern:

    """
    One supported shape of stack trace line.

    Named groups: 'qualified', 'method', 'file', 'line', 'column'.
    Missing 'method' means it is the last dot-segment of 'qualified'.
    """

    name: str
    regex: Pattern
    split_class: bool = True


# Tried in order, first match wins
FRAME_PATTERNS: List[FramePattern] = [
    FramePattern(
        name="managed",
        regex=re.compile(
            r"^(?:at\s+)?(?P<qualified>.+)\.(?P<method>[\w$<>]+)"
            r"\((?P<file>[^():]+):(?P<line>\d+)(?::(?P<column>\d+))?\)$"
        ),
    ),
    FramePattern(
        name="managed-opaque",
        regex=re.compile(
            r"^(?:at\s+)?(?P<qualified>.+)\.(?P<method>[\w$<>]+)\((?P<file>[^()]+)\)$"
        ),
    ),
    FramePattern(
        name="native",
        regex=re.compile(
            r"^#\d+\s+pc\s+[0-9a-fA-F]+\s+(?P<qualified>\S+)"
            r"\s+\((?P<method>.+?)\+(?P<line>\d+)\)(?:\s+.*)?$"
        ),
        split_class=False,
    ),
    FramePattern(
        name="generic",
        regex=re.compile(
            r"^(?:at\s+)?(?P<qualified>\S.*?)\s+\((?P<file>[^():]+):(?P<line>\d+)\)$"
        ),
    ),
]


def _parse_int(value: Optional[str]) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def detect_library(qualified_name: str) -> Optional[str]:
    name = qualified_name.lower()
    for prefix in LIBRARY_PREFIXES:
        if name.startswith(prefix):
            return prefix[:-1]

    return None


class StackTraceParser:

    """Turns raw stack trace text into exception header and frames"""

    def __init__(self):
        self._logger = prefixed_logger(logging.getLogger("analysis.stack_trace"), self)

    def parse(self, text: Optional[str]) -> StackTrace:

        if not text:
            return StackTrace(
                exception_type="Unknown",
                message="No stack trace available",
                frames=[],
            )

        lines = [line.strip() for line in text.splitlines()]
        lines = [line for line in lines if line]

        exception_type = "Unknown"
        message = "Unknown error"

        if lines:
            match = EXCEPTION_HEADER.match(lines[0])
            if match:
                exception_type = match.group(1)
                message = match.group(2) or "No message"

        frames = []
        for line in lines[1:]:
            frame = self.parse_frame(line)
            if frame is None:
                self._logger.debug("Skipping unrecognized line: '%s'", line)
                continue
            frames.append(frame)

        return StackTrace(
            exception_type=exception_type,
            message=message,
            frames=frames,
        )

    def parse_frame(self, line: str) -> Optional[StackFrame]:
        for pattern in FRAME_PATTERNS:
            match = pattern.regex.match(line)
            if match:
                return self._create_frame(pattern, match)

        return None

    @staticmethod
    def _create_frame(pattern: FramePattern, match: re.Match) -> StackFrame:

        groups = match.groupdict()
        qualified = groups["qualified"]
        method = groups.get("method")
        file = groups.get("file")

        # Generic shape: 'pkg.Class.method (File.kt:10)'
        if method is None:
            if "." in qualified:
                qualified, method = qualified.rsplit(".", 1)
            else:
                method = qualified

        if pattern.split_class:
            class_name = qualified.split(".")[-1]
        else:
            class_name = qualified.split("/")[-1]

        column = groups.get("column")

        return StackFrame(
            method=method,
            class_name=class_name,
            file=file or qualified,
            line=_parse_int(groups.get("line")),
            column=int(column) if column else None,
            library=detect_library(qualified),
        )
