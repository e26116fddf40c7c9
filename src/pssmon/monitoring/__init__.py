"""
Profiler scheduling and snapshot reports.
"""

from .scheduler import Clock, MonotonicClock, SampleScheduler, SchedulerState
from .snapshot import AGGREGATE_TITLE, build_report, describe_process, take_snapshot

__all__ = [
    "Clock",
    "MonotonicClock",
    "SampleScheduler",
    "SchedulerState",
    "AGGREGATE_TITLE",
    "build_report",
    "describe_process",
    "take_snapshot",
]
