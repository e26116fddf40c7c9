"""
Ranked, per-file breakdown tables for snapshot reports.

File-backed memory is regrouped by a configurable grouping key instead of
the binary/external text/data categories, so a report shows which files
(and which of their permission groups) hold memory. Everything else keeps
its named category.
"""

import logging
from typing import Dict, List, Tuple

from ..classification import DEFAULT_GROUPING, GroupingKey
from ..models.memory import MemoryBreakdown, MemoryCategory, Permissions
from ..models.results import SMALL_CATEGORIES_LABEL, RankedEntry, RankedTable

logger = logging.getLogger(__name__)

# Entries whose share of the total is below this many percent are folded
# into the small-categories entry.
SMALL_CATEGORY_THRESHOLD_PERCENT = 1.0

FILE_CATEGORIES = frozenset(
    [
        MemoryCategory.BINARY_TEXT,
        MemoryCategory.BINARY_DATA,
        MemoryCategory.EXTERNAL_TEXT,
        MemoryCategory.EXTERNAL_DATA,
    ]
)


def group_rows(breakdown: MemoryBreakdown, grouping: GroupingKey = DEFAULT_GROUPING) -> Dict[str, int]:
    """
    Compute the unsorted report rows of a breakdown.

    Returns:
        Row label to bytes. Rows with zero bytes are omitted. The values sum
        to ``breakdown.total()``.
    """
    rows: Dict[str, int] = {}

    def add(label: str, nbytes: int) -> None:
        rows[label] = rows.get(label, 0) + nbytes

    for category, nbytes in breakdown.categories.items():
        if category not in FILE_CATEGORIES:
            add(category.label, nbytes)
    for other_key, nbytes in breakdown.other.items():
        if not other_key.is_file_backed:
            add(other_key.label, nbytes)
    for (path, perms), nbytes in breakdown.files.items():
        add(grouping.file_label(path, Permissions.parse(perms)), nbytes)

    return {label: nbytes for label, nbytes in rows.items() if nbytes > 0}


def _sort_key(entry: RankedEntry) -> Tuple[int, str]:
    return (-entry.nbytes, entry.label)


def rank_breakdown(
    breakdown: MemoryBreakdown,
    grouping: GroupingKey = DEFAULT_GROUPING,
    title: str = "",
    threshold: float = SMALL_CATEGORY_THRESHOLD_PERCENT,
) -> RankedTable:
    """
    Rank the rows of a breakdown by size and fold the small ones.

    Args:
        breakdown: The breakdown to report on.
        grouping: How file-backed memory is split into rows.
        title: Table title, e.g. the process description.
        threshold: Entries below this percentage are folded together.

    Returns:
        A RankedTable. The small-categories entry, when present, sits at its
        sorted position among the other entries.
    """
    rows = group_rows(breakdown, grouping)
    total = sum(rows.values())
    if total == 0:
        return RankedTable(title=title, entries=(), folded=(), total=0)

    shown: List[RankedEntry] = []
    folded: List[RankedEntry] = []
    for label, nbytes in rows.items():
        entry = RankedEntry(label=label, nbytes=nbytes, percent=nbytes * 100.0 / total)
        if entry.percent < threshold:
            folded.append(entry)
        else:
            shown.append(entry)

    if folded:
        folded_bytes = sum(entry.nbytes for entry in folded)
        shown.append(
            RankedEntry(
                label=SMALL_CATEGORIES_LABEL,
                nbytes=folded_bytes,
                percent=folded_bytes * 100.0 / total,
            )
        )
        logger.debug(f"Folded {len(folded)} entries ({folded_bytes} bytes) into '{SMALL_CATEGORIES_LABEL}'")

    return RankedTable(
        title=title,
        entries=tuple(sorted(shown, key=_sort_key)),
        folded=tuple(sorted(folded, key=_sort_key)),
        total=total,
    )
