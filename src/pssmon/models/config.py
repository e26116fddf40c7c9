"""
Configuration data models.

This module contains the configuration structure loaded from `config.toml`
and overridden by command-line flags.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MonitorConfig:
    """
    Configuration for process selection, profiling and snapshot reports.
    """

    # [selection]
    # Regex matched against each process command line. None selects everything.
    pattern: Optional[str] = None
    # Include all descendants of matched processes.
    match_children: bool = False
    # Always include the monitor's own process.
    match_self: bool = False
    # Abort the run instead of skipping processes we may not read.
    fail_on_permission_error: bool = False

    # [profiler]
    interval_seconds: float = 1.0
    output_format: str = "tsv"  # "tsv" or "json"
    # Where to write the graph when profiling stops. None disables graphing.
    graph_path: Optional[str] = None
    # Number of threads used to read per-process details. 1 reads sequentially.
    max_workers: int = 1

    # [snapshot]
    grouping_mask: str = "frwxsp"
    show_small: bool = False

    # [logging]
    log_level: str = "ERROR"


@dataclass(frozen=True)
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig
