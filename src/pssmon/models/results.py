"""
Result models produced by the profiler and the snapshot report.

- Sample: one profiler tick, covering all matched processes.
- RankedEntry / RankedTable: the sorted, percentage-annotated rows of a
  snapshot report.
- SnapshotReport: per-process tables plus the aggregate table.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from .memory import FaultCounts, MemoryBreakdown
from .process import ProcessFailure, ProcessUsage

SMALL_CATEGORIES_LABEL = "small categories"


@dataclass(frozen=True)
class Sample:
    """
    A single profiler tick.

    The interval bounds are seconds since the profiler started. ``interval_start``
    is the end of the previous tick (0.0 for the first one) and ``interval_end``
    is when this tick's collection completed.
    """

    interval_start: float
    interval_end: float
    aggregate: MemoryBreakdown
    processes: Tuple[ProcessUsage, ...] = ()
    faults: FaultCounts = field(default_factory=FaultCounts)

    @property
    def duration(self) -> float:
        return self.interval_end - self.interval_start


@dataclass(frozen=True)
class RankedEntry:
    """A labelled byte count with its share of the table total."""

    label: str
    nbytes: int
    percent: float

    @property
    def rounded_percent(self) -> int:
        return int(round(self.percent))


@dataclass(frozen=True)
class RankedTable:
    """
    Rows of a snapshot report, sorted by bytes descending then label.

    ``folded`` lists the entries below the visibility threshold whose bytes
    were summed into the small-categories entry.
    """

    title: str
    entries: Tuple[RankedEntry, ...]
    folded: Tuple[RankedEntry, ...] = ()
    total: int = 0


@dataclass
class SnapshotReport:
    """Snapshot tables for each selected process and for the whole selection."""

    processes: List[Tuple[ProcessUsage, RankedTable]]
    aggregate: RankedTable
    failures: List[ProcessFailure] = field(default_factory=list)
