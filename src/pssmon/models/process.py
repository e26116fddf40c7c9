"""
Process identity and per-process usage models.

These are immutable snapshots of enumeration-time state. Nothing here is
kept across sampling cycles; every tick re-reads identities from scratch.
"""

from dataclasses import dataclass, field
from typing import Optional

from .memory import FaultCounts, MemoryBreakdown


@dataclass(frozen=True, order=True)
class ProcessIdentity:
    """Identity of a process as seen at enumeration time."""

    pid: int
    ppid: int
    cmdline: str


@dataclass(frozen=True)
class ProcessUsage:
    """
    Memory usage of a single process.

    Attributes:
        identity: The process identity the usage was collected for.
        breakdown: PSS bytes per category.
        faults: Page fault counters read in the same pass.
        exe_path: Resolved main executable, None when it could not be resolved.
    """

    identity: ProcessIdentity
    breakdown: MemoryBreakdown = field(default_factory=MemoryBreakdown)
    faults: FaultCounts = field(default_factory=FaultCounts)
    exe_path: Optional[str] = None

    @property
    def pid(self) -> int:
        return self.identity.pid


@dataclass(frozen=True)
class ProcessFailure:
    """A process that was skipped because its details could not be read."""

    pid: int
    reason: str
    message: str = ""
