"""
Aggregation of classified mappings into per-process, per-set and per-file totals.
"""

from .file_groups import (
    SMALL_CATEGORY_THRESHOLD_PERCENT,
    group_rows,
    rank_breakdown,
)
from .usage import (
    aggregate_mappings,
    assemble_sample,
    merge_breakdowns,
    merge_faults,
)

__all__ = [
    "SMALL_CATEGORY_THRESHOLD_PERCENT",
    "group_rows",
    "rank_breakdown",
    "aggregate_mappings",
    "assemble_sample",
    "merge_breakdowns",
    "merge_faults",
]
