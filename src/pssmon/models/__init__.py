"""
Data models and structures for the monitoring system.

Configuration Models:
- Selection, profiler, snapshot and logging settings

Memory Models:
- Parsed smaps mapping records and their permission bits
- The closed memory category taxonomy
- Per-category PSS breakdowns and page fault counters

Process Models:
- Enumeration-time process identities
- Per-process usage and skipped-process failures

Result Models:
- Profiler samples
- Ranked, percentage-annotated snapshot tables
"""

# Configuration models
from .config import AppConfig, MonitorConfig

# Memory models
from .memory import (
    Category,
    FaultCounts,
    FileKey,
    MappingRecord,
    MemoryBreakdown,
    MemoryCategory,
    OtherCategory,
    Permissions,
)

# Process models
from .process import ProcessFailure, ProcessIdentity, ProcessUsage

# Result models
from .results import (
    SMALL_CATEGORIES_LABEL,
    RankedEntry,
    RankedTable,
    Sample,
    SnapshotReport,
)

__all__ = [
    # Configuration
    "AppConfig",
    "MonitorConfig",
    # Memory
    "Category",
    "FaultCounts",
    "FileKey",
    "MappingRecord",
    "MemoryBreakdown",
    "MemoryCategory",
    "OtherCategory",
    "Permissions",
    # Process
    "ProcessFailure",
    "ProcessIdentity",
    "ProcessUsage",
    # Results
    "SMALL_CATEGORIES_LABEL",
    "RankedEntry",
    "RankedTable",
    "Sample",
    "SnapshotReport",
]
