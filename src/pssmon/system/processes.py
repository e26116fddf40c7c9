"""
Process enumeration and selection.

Processes are listed with psutil, their identities are collected into a flat
table keyed by pid, and selection is resolved over that table:

- without a pattern every process is selected;
- with a pattern a process is selected when its command line matches;
- with ``match_children`` every descendant of a selected process is selected
  as well, whatever the order in which psutil listed them.

The monitor's own process is left out unless ``match_self`` is set, in
which case it is always included.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Union

import psutil

from ..models.process import ProcessFailure, ProcessIdentity
from ..validation import ProcessPermissionError, validate_regex_pattern

logger = logging.getLogger(__name__)

PatternLike = Union[str, "re.Pattern[str]", None]


@dataclass
class EnumerationResult:
    """Selected process identities, sorted by pid, and the processes that were skipped."""

    processes: List[ProcessIdentity] = field(default_factory=list)
    failures: List[ProcessFailure] = field(default_factory=list)


def compile_pattern(pattern: PatternLike) -> Optional["re.Pattern[str]"]:
    """
    Compile a selection pattern, passing through None and compiled patterns.

    Raises:
        InvalidPatternError: If the pattern does not compile.
    """
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    return validate_regex_pattern(pattern, field_name="process pattern")


def build_children_index(table: Dict[int, ProcessIdentity]) -> Dict[int, List[int]]:
    """
    Map each pid to the pids of its children.

    Processes whose parent is not in the table (pid 1, kernel threads under
    pid 2 when it is hidden, or a parent that just exited) are roots and do
    not appear as anyone's child.
    """
    children: Dict[int, List[int]] = {}
    for pid, identity in table.items():
        if identity.ppid in table and identity.ppid != pid:
            children.setdefault(identity.ppid, []).append(pid)
    return children


def select_pids(
    table: Dict[int, ProcessIdentity],
    pattern: Optional["re.Pattern[str]"],
    match_children: bool = False,
) -> Set[int]:
    """
    Resolve which pids of the table are selected.

    Args:
        table: Every visible process, keyed by pid.
        pattern: Compiled pattern searched in each command line, or None.
        match_children: Also select all descendants of matched processes.

    Returns:
        The set of selected pids.
    """
    if pattern is None:
        return set(table)

    selected = {pid for pid, identity in table.items() if pattern.search(identity.cmdline)}
    if not match_children:
        return selected

    children = build_children_index(table)
    pending = list(selected)
    while pending:
        pid = pending.pop()
        for child_pid in children.get(pid, ()):
            if child_pid not in selected:
                selected.add(child_pid)
                pending.append(child_pid)
    return selected


def _read_identity(proc: psutil.Process) -> ProcessIdentity:
    with proc.oneshot():
        return ProcessIdentity(
            pid=proc.pid,
            ppid=proc.ppid(),
            cmdline=" ".join(proc.cmdline()),
        )


def read_process_table(
    processes: Iterable[psutil.Process],
    fail_on_permission_error: bool = False,
) -> EnumerationResult:
    """
    Read the identity of every listed process.

    Processes that exit while being read are dropped silently. Processes we
    may not read are recorded as failures, or abort the run when
    ``fail_on_permission_error`` is set.

    Raises:
        ProcessPermissionError: On a permission failure when escalation is on.
    """
    result = EnumerationResult()
    for proc in processes:
        try:
            result.processes.append(_read_identity(proc))
        except (psutil.NoSuchProcess, psutil.ZombieProcess):
            logger.debug(f"PID {proc.pid} exited before its details could be read. Ignoring.")
        except psutil.AccessDenied as e:
            if fail_on_permission_error:
                raise ProcessPermissionError(proc.pid, f"permission denied reading process {proc.pid}") from e
            logger.warning(f"Permission denied reading process {proc.pid}. Skipping it.")
            result.failures.append(ProcessFailure(pid=proc.pid, reason="permission_denied", message=str(e)))
    return result


def enumerate_processes(
    pattern: PatternLike = None,
    match_children: bool = False,
    match_self: bool = False,
    fail_on_permission_error: bool = False,
    self_pid: Optional[int] = None,
) -> EnumerationResult:
    """
    List the processes selected for monitoring.

    Args:
        pattern: Regex searched in each command line. None selects all processes.
        match_children: Include descendants of matched processes.
        match_self: Always include the monitor's own process.
        fail_on_permission_error: Raise instead of skipping unreadable processes.
        self_pid: The monitor's pid, defaults to ``os.getpid()``.

    Returns:
        The selected identities sorted by pid, plus any per-process failures.

    Raises:
        InvalidPatternError: If the pattern does not compile. Raised before
            any process is read.
        ProcessPermissionError: On a permission failure when escalation is on.
    """
    compiled = compile_pattern(pattern)
    me = os.getpid() if self_pid is None else self_pid

    listing = read_process_table(psutil.process_iter(), fail_on_permission_error)
    table = {identity.pid: identity for identity in listing.processes}

    selected = select_pids(table, compiled, match_children)
    if match_self and me in table:
        selected.add(me)
    elif not match_self:
        selected.discard(me)

    logger.debug(f"Selected {len(selected)} of {len(table)} processes")
    return EnumerationResult(
        processes=[table[pid] for pid in sorted(selected)],
        failures=listing.failures,
    )
