"""
Per-process usage collection.

One collection pass enumerates the selected processes, then reads the smaps
descriptor, executable link and fault counters of each one, and reduces them
to a ``ProcessUsage``. Processes that exit mid-pass are dropped; processes we
may not read are recorded as failures, or abort the pass when configured to.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..aggregation import aggregate_mappings
from ..classification import GroupingKey
from ..models.config import MonitorConfig
from ..models.process import ProcessFailure, ProcessIdentity, ProcessUsage
from ..parsing import parse_smaps
from ..system import compile_pattern, enumerate_processes, read_fault_counts, read_smaps, resolve_exe
from ..validation import ProcessPermissionError, ProcessVanishedError

logger = logging.getLogger(__name__)


@dataclass
class CollectionResult:
    """Usages of one pass, sorted by pid, and the processes that were skipped."""

    usages: List[ProcessUsage] = field(default_factory=list)
    failures: List[ProcessFailure] = field(default_factory=list)


class UsageCollector:
    """
    Collects the memory usage of every selected process.

    The selection pattern is compiled once at construction so that an invalid
    pattern fails before any process is read.

    Attributes:
        config: Selection and collection settings.
        grouping: Grouping key used for catch-all category keys.
    """

    def __init__(self, config: MonitorConfig, self_pid: Optional[int] = None):
        self.config = config
        self.grouping = GroupingKey.parse(config.grouping_mask)
        self.self_pid = self_pid
        self._pattern = compile_pattern(config.pattern)

    def read_usage(self, identity: ProcessIdentity) -> ProcessUsage:
        """
        Read and aggregate the memory maps of one process.

        Raises:
            ProcessVanishedError: If the process exited during the read.
            ProcessPermissionError: If its descriptors may not be read.
        """
        smaps_text = read_smaps(identity.pid)
        exe_path = resolve_exe(identity.pid)
        faults = read_fault_counts(identity.pid)
        context = f"(pid {identity.pid}: {identity.cmdline})"
        if exe_path is None:
            logger.debug(f"No executable path for PID {identity.pid}; file maps go to other {context}")
        breakdown = aggregate_mappings(parse_smaps(smaps_text), exe_path, self.grouping, context)
        return ProcessUsage(identity=identity, breakdown=breakdown, faults=faults, exe_path=exe_path)

    def _try_read(self, identity: ProcessIdentity) -> Tuple[Optional[ProcessUsage], Optional[ProcessFailure]]:
        try:
            return self.read_usage(identity), None
        except ProcessVanishedError:
            logger.debug(f"PID {identity.pid} exited during collection. Ignoring.")
            return None, None
        except ProcessPermissionError as e:
            if self.config.fail_on_permission_error:
                raise
            logger.warning(f"Cannot read memory maps of PID {identity.pid} ({identity.cmdline}): {e}")
            return None, ProcessFailure(pid=identity.pid, reason="permission_denied", message=str(e))

    def collect(self) -> CollectionResult:
        """
        Run one collection pass.

        Returns:
            A CollectionResult with usages sorted by pid.

        Raises:
            ProcessPermissionError: On a permission failure when
                ``fail_on_permission_error`` is set.
        """
        enumeration = enumerate_processes(
            pattern=self._pattern,
            match_children=self.config.match_children,
            match_self=self.config.match_self,
            fail_on_permission_error=self.config.fail_on_permission_error,
            self_pid=self.self_pid,
        )
        identities = enumeration.processes

        if self.config.max_workers > 1 and len(identities) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers, thread_name_prefix="pssmon") as pool:
                outcomes = list(pool.map(self._try_read, identities))
        else:
            outcomes = [self._try_read(identity) for identity in identities]

        result = CollectionResult(failures=list(enumeration.failures))
        for usage, failure in outcomes:
            if usage is not None:
                result.usages.append(usage)
            if failure is not None:
                result.failures.append(failure)
        result.usages.sort(key=lambda usage: usage.pid)

        logger.debug(f"Collected {len(result.usages)} processes, {len(result.failures)} failures")
        return result

    def collect_usages(self) -> List[ProcessUsage]:
        """Run one pass and return only the usages, for the profiler."""
        return self.collect().usages
