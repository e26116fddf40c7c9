"""
System interaction utilities for process monitoring.

This package provides:

- Process enumeration and regex/children/self selection
- Readers for the per-process smaps descriptor, stat counters and
  executable link, with uniform vanished/permission error reporting
"""

# Process enumeration and selection
from .processes import (
    EnumerationResult,
    build_children_index,
    compile_pattern,
    enumerate_processes,
    read_process_table,
    select_pids,
)

# Per-process kernel interfaces
from .procfs import (
    parse_stat_faults,
    read_fault_counts,
    read_smaps,
    resolve_exe,
)

__all__ = [
    # Processes
    "EnumerationResult",
    "build_children_index",
    "compile_pattern",
    "enumerate_processes",
    "read_process_table",
    "select_pids",
    # procfs
    "parse_stat_faults",
    "read_fault_counts",
    "read_smaps",
    "resolve_exe",
]
