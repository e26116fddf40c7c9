"""
One-shot snapshot report.
"""

import logging
from typing import Optional

from ..aggregation import merge_breakdowns, rank_breakdown
from ..classification import GroupingKey
from ..collectors import UsageCollector
from ..models.config import MonitorConfig
from ..models.process import ProcessUsage
from ..models.results import SnapshotReport

logger = logging.getLogger(__name__)

AGGREGATE_TITLE = "all selected processes"


def describe_process(usage: ProcessUsage) -> str:
    """Title used for a process's table, e.g. ``1234 /usr/bin/python3 app.py``."""
    return f"{usage.pid} {usage.identity.cmdline}".rstrip()


def build_report(collector: UsageCollector, grouping: Optional[GroupingKey] = None) -> SnapshotReport:
    """
    Run one collection pass and rank its breakdowns.

    Args:
        collector: Collector configured with the process selection.
        grouping: How file-backed memory is split into rows. Defaults to the
            collector's grouping.

    Returns:
        A SnapshotReport with one table per process, in pid order, plus the
        aggregate table over every selected process.
    """
    grouping = grouping or collector.grouping
    result = collector.collect()

    tables = [
        (usage, rank_breakdown(usage.breakdown, grouping, title=describe_process(usage)))
        for usage in result.usages
    ]
    aggregate = rank_breakdown(
        merge_breakdowns(usage.breakdown for usage in result.usages),
        grouping,
        title=AGGREGATE_TITLE,
    )
    if not result.usages:
        logger.warning("No processes selected for the snapshot")
    return SnapshotReport(processes=tables, aggregate=aggregate, failures=result.failures)


def take_snapshot(config: MonitorConfig, self_pid: Optional[int] = None) -> SnapshotReport:
    """
    Build a snapshot report for the processes selected by ``config``.

    Raises:
        InvalidPatternError: If the selection pattern does not compile.
        ValidationError: If the grouping mask is invalid.
        ProcessPermissionError: On a permission failure when escalation is on.
    """
    return build_report(UsageCollector(config, self_pid=self_pid))
