from .impact import ImpactAnalyzer, classify_impact
from .processor import CrashProcessor, generate_crash_title
from .stack_trace import StackTraceParser
from .trends import TrendAggregator

__all__ = [
    "CrashProcessor",
    "ImpactAnalyzer",
    "StackTraceParser",
    "TrendAggregator",
    "classify_impact",
    "generate_crash_title",
]
