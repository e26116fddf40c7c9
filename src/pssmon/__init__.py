"""
pssmon: per-category PSS memory monitor for Linux processes.

This package reports where processes keep their memory (stack, heap, binary
and library text/data, anonymous maps, kernel-provided pages) using the
proportional set size from each process's smaps descriptor.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- system: Process enumeration and per-process kernel readers
- parsing: smaps descriptor parser
- classification: Mapping categorization and grouping keys
- aggregation: Per-process, cross-process and per-file totals
- collectors: Collection passes over the selected processes
- monitoring: Profiler scheduling and snapshot reports
- output: TSV, NDJSON and text table writers
- plotter: Graphs of profiling runs
- cli: Command-line interface

Usage:
    From command line:
        pssmon profile [regex] [options]
        pssmon snapshot [regex] [options]

    Programmatically:
        from pssmon import MonitorConfig, take_snapshot
        report = take_snapshot(MonitorConfig(pattern="python"))
"""

__version__ = "0.1.0"

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .cli import main_cli
from .collectors import UsageCollector
from .monitoring import SampleScheduler, take_snapshot

# Model classes for external use
from .models import (
    AppConfig,
    MonitorConfig,
    MemoryBreakdown,
    MemoryCategory,
    OtherCategory,
    ProcessUsage,
    Sample,
    SnapshotReport,
)

# Core operations
from .parsing import parse_smaps
from .classification import GroupingKey, classify_mapping
from .aggregation import aggregate_mappings, merge_breakdowns, rank_breakdown
from .system import enumerate_processes

# Validation utilities
from .validation import (
    ValidationError,
    InvalidPatternError,
    ProcessPermissionError,
    ProcessVanishedError,
)

__all__ = [
    "__version__",
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "main_cli",
    "UsageCollector",
    "SampleScheduler",
    "take_snapshot",
    # Models
    "AppConfig",
    "MonitorConfig",
    "MemoryBreakdown",
    "MemoryCategory",
    "OtherCategory",
    "ProcessUsage",
    "Sample",
    "SnapshotReport",
    # Core operations
    "parse_smaps",
    "GroupingKey",
    "classify_mapping",
    "aggregate_mappings",
    "merge_breakdowns",
    "rank_breakdown",
    "enumerate_processes",
    # Validation
    "ValidationError",
    "InvalidPatternError",
    "ProcessPermissionError",
    "ProcessVanishedError",
]
