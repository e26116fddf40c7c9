"""
Per-process and cross-process aggregation of PSS bytes.

Each process's PSS already reflects its fractional ownership of shared
pages, so summing per-process breakdowns never double counts a page that
several processes map.
"""

import logging
from typing import Iterable, Optional, Sequence

from ..classification import DEFAULT_GROUPING, GroupingKey, classify_mapping
from ..models.memory import FaultCounts, MappingRecord, MemoryBreakdown
from ..models.process import ProcessUsage
from ..models.results import Sample

logger = logging.getLogger(__name__)


def _pss_or_warn(record: MappingRecord, context: str) -> int:
    if "Pss" in record.fields:
        return record.pss
    if record.rss:
        logger.warning(
            f"PSS field not defined on map {record.path or '[anon]'} "
            f"({record.start:x}-{record.end:x}) but RSS is {record.rss} bytes. "
            f"Counting it as 0. {context}"
        )
    return 0


def aggregate_mappings(
    records: Iterable[MappingRecord],
    exe_path: Optional[str],
    grouping: GroupingKey = DEFAULT_GROUPING,
    context: str = "",
) -> MemoryBreakdown:
    """
    Sum the PSS of every mapping into its category.

    File-backed mappings are additionally indexed by (path, permissions) in
    ``MemoryBreakdown.files`` for per-file reports.

    Args:
        records: Parsed mappings of one process.
        exe_path: The process's main executable, None if unresolved.
        grouping: Grouping key used for catch-all category keys.
        context: Process description used in log messages.

    Returns:
        The process's MemoryBreakdown.
    """
    breakdown = MemoryBreakdown()
    for record in records:
        category = classify_mapping(record, exe_path, grouping)
        file_key = (record.path, str(record.permissions)) if record.is_file_backed else None
        breakdown.add(category, _pss_or_warn(record, context), file_key)
    return breakdown


def merge_breakdowns(breakdowns: Iterable[MemoryBreakdown]) -> MemoryBreakdown:
    """Elementwise sum of breakdowns; missing keys count as zero."""
    merged = MemoryBreakdown()
    for breakdown in breakdowns:
        merged = merged + breakdown
    return merged


def merge_faults(faults: Iterable[FaultCounts]) -> FaultCounts:
    """Sum fault counters across processes."""
    merged = FaultCounts()
    for fault_counts in faults:
        merged = merged + fault_counts
    return merged


def assemble_sample(
    interval_start: float,
    interval_end: float,
    usages: Sequence[ProcessUsage],
) -> Sample:
    """
    Build an immutable Sample from one collection pass.

    Processes are ordered by pid so that the result does not depend on the
    order in which details were read.
    """
    ordered = tuple(sorted(usages, key=lambda usage: usage.pid))
    return Sample(
        interval_start=interval_start,
        interval_end=interval_end,
        aggregate=merge_breakdowns(usage.breakdown for usage in ordered),
        processes=ordered,
        faults=merge_faults(usage.faults for usage in ordered),
    )
