"""
Readers for per-process kernel interfaces.

Every reader turns the usual races and permission problems into
``ProcessVanishedError`` / ``ProcessPermissionError`` so callers can apply
their skip-or-fail policy in one place.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import psutil

from ..models.memory import FaultCounts
from ..validation import ProcessPermissionError, ProcessVanishedError

logger = logging.getLogger(__name__)

PROC_ROOT = Path("/proc")

# Indices into /proc/<pid>/stat after the ")" that closes the command name.
_STAT_MINFLT = 7
_STAT_MAJFLT = 9


def _read_proc_file(pid: int, name: str) -> str:
    path = PROC_ROOT / str(pid) / name
    try:
        # Decoded like psutil decodes exe(), so mapping paths compare equal.
        with open(path, "rb") as f:
            return os.fsdecode(f.read())
    except (FileNotFoundError, ProcessLookupError) as e:
        raise ProcessVanishedError(pid, f"{path} not found; the process may have exited") from e
    except PermissionError as e:
        raise ProcessPermissionError(pid, f"permission denied reading {path}") from e


def read_smaps(pid: int) -> str:
    """
    Read the raw smaps descriptor of a process.

    Raises:
        ProcessVanishedError: If the process no longer exists.
        ProcessPermissionError: If we may not read the descriptor.
    """
    return _read_proc_file(pid, "smaps")


def parse_stat_faults(stat_text: str) -> FaultCounts:
    """
    Extract the minor and major fault counters from /proc/<pid>/stat text.

    The command name may itself contain spaces and parentheses, so fields are
    counted from the last closing parenthesis.

    Raises:
        ValueError: If the text is not a valid stat line.
    """
    _, sep, rest = stat_text.rpartition(")")
    if not sep:
        raise ValueError("stat line has no command name")
    fields = rest.split()
    try:
        return FaultCounts(
            minor=int(fields[_STAT_MINFLT]),
            major=int(fields[_STAT_MAJFLT]),
        )
    except IndexError as e:
        raise ValueError(f"stat line has only {len(fields)} fields after the command name") from e


def read_fault_counts(pid: int) -> FaultCounts:
    """
    Read the page fault counters of a process.

    A stat line that cannot be parsed yields zero counters and a warning.

    Raises:
        ProcessVanishedError: If the process no longer exists.
        ProcessPermissionError: If we may not read the stat file.
    """
    stat_text = _read_proc_file(pid, "stat")
    try:
        return parse_stat_faults(stat_text)
    except ValueError as e:
        logger.warning(f"Could not parse /proc/{pid}/stat: {e}. Assuming no faults.")
        return FaultCounts()


def resolve_exe(pid: int) -> Optional[str]:
    """
    Resolve the main executable of a process.

    Returns:
        The executable path, or None if it cannot be resolved (kernel threads,
        permission denied).

    Raises:
        ProcessVanishedError: If the process no longer exists.
    """
    try:
        exe = psutil.Process(pid).exe()
    except psutil.AccessDenied:
        logger.debug(f"Permission denied resolving the executable of PID {pid}")
        return None
    except psutil.NoSuchProcess as e:
        raise ProcessVanishedError(pid, f"process {pid} exited before its executable was resolved") from e
    return exe or None
