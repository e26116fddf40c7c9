"""
Tab-separated profiler output.

A header row is written before the first sample. Each sample then produces
one row per process, in pid order, followed by an ``ALL`` row with the
aggregate over every process of the sample. Byte counts are PSS bytes.
"""

import csv
import logging
from typing import List, TextIO

from ..models.memory import FaultCounts, MemoryBreakdown, MemoryCategory
from ..models.results import Sample
from .base import AbstractSampleWriter
from .table import printable

logger = logging.getLogger(__name__)

AGGREGATE_PID = "ALL"

CATEGORY_COLUMNS: List[str] = [f"{category.label.upper()}_PSS" for category in MemoryCategory]
HEADER: List[str] = ["START", "END", "PID", *CATEGORY_COLUMNS, "OTHER_PSS", "MINFLT", "MAJFLT", "CMD"]


def _format_seconds(seconds: float) -> str:
    return f"{seconds:.3f}"


def breakdown_columns(breakdown: MemoryBreakdown) -> List[str]:
    """Per-category byte columns of a breakdown, in header order."""
    values = [str(breakdown.categories.get(category, 0)) for category in MemoryCategory]
    values.append(str(breakdown.other_total()))
    return values


class TsvSampleWriter(AbstractSampleWriter):
    """Writes samples as tab-separated rows."""

    def __init__(self, stream: TextIO):
        super().__init__(stream)
        self._writer = csv.writer(stream, delimiter="\t", lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
        self._header_written = False

    def write_header(self) -> None:
        if not self._header_written:
            self._writer.writerow(HEADER)
            self._header_written = True

    def _row(self, sample: Sample, pid: str, breakdown: MemoryBreakdown, faults: FaultCounts, cmd: str) -> List[str]:
        return [
            _format_seconds(sample.interval_start),
            _format_seconds(sample.interval_end),
            pid,
            *breakdown_columns(breakdown),
            str(faults.minor),
            str(faults.major),
            cmd,
        ]

    def write_sample(self, sample: Sample) -> None:
        self.write_header()
        for usage in sample.processes:
            self._writer.writerow(
                self._row(sample, str(usage.pid), usage.breakdown, usage.faults, printable(usage.identity.cmdline))
            )
        self._writer.writerow(self._row(sample, AGGREGATE_PID, sample.aggregate, sample.faults, ""))
