"""
Newline-delimited JSON profiler output.

Each sample is serialized as one JSON object per line. Byte counts are kept
exact so that ``read_samples_jsonl`` restores samples equal to the ones
written.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, TextIO, Union

from ..models.memory import FaultCounts, MemoryBreakdown, MemoryCategory, OtherCategory
from ..models.process import ProcessIdentity, ProcessUsage
from ..models.results import Sample
from .base import AbstractSampleWriter

logger = logging.getLogger(__name__)


def breakdown_to_dict(breakdown: MemoryBreakdown) -> Dict[str, Any]:
    return {
        "categories": {
            category.label: breakdown.categories[category]
            for category in MemoryCategory
            if category in breakdown.categories
        },
        "other": [
            {"path": key.path, "perms": key.perms, "bytes": nbytes}
            for key, nbytes in sorted(breakdown.other.items())
        ],
        "files": [
            {"path": path, "perms": perms, "bytes": nbytes}
            for (path, perms), nbytes in sorted(breakdown.files.items())
        ],
    }


def breakdown_from_dict(data: Dict[str, Any]) -> MemoryBreakdown:
    breakdown = MemoryBreakdown()
    for label, nbytes in data.get("categories", {}).items():
        breakdown.categories[MemoryCategory(label)] = int(nbytes)
    for entry in data.get("other", []):
        breakdown.other[OtherCategory(entry["path"], entry.get("perms", ""))] = int(entry["bytes"])
    for entry in data.get("files", []):
        breakdown.files[(entry["path"], entry["perms"])] = int(entry["bytes"])
    return breakdown


def _faults_to_dict(faults: FaultCounts) -> Dict[str, int]:
    return {"minor": faults.minor, "major": faults.major}


def _faults_from_dict(data: Dict[str, Any]) -> FaultCounts:
    return FaultCounts(minor=int(data.get("minor", 0)), major=int(data.get("major", 0)))


def sample_to_dict(sample: Sample) -> Dict[str, Any]:
    """Convert a sample into a JSON-serializable dictionary."""
    return {
        "interval_start": sample.interval_start,
        "interval_end": sample.interval_end,
        "aggregate": breakdown_to_dict(sample.aggregate),
        "faults": _faults_to_dict(sample.faults),
        "processes": [
            {
                "pid": usage.pid,
                "ppid": usage.identity.ppid,
                "cmdline": usage.identity.cmdline,
                "exe_path": usage.exe_path,
                "breakdown": breakdown_to_dict(usage.breakdown),
                "faults": _faults_to_dict(usage.faults),
            }
            for usage in sample.processes
        ],
    }


def sample_from_dict(data: Dict[str, Any]) -> Sample:
    """
    Rebuild a sample from its dictionary form.

    Raises:
        KeyError: If a required key is missing.
        ValueError: If a category label is unknown.
    """
    processes = tuple(
        ProcessUsage(
            identity=ProcessIdentity(pid=int(entry["pid"]), ppid=int(entry["ppid"]), cmdline=entry["cmdline"]),
            breakdown=breakdown_from_dict(entry["breakdown"]),
            faults=_faults_from_dict(entry.get("faults", {})),
            exe_path=entry.get("exe_path"),
        )
        for entry in data.get("processes", [])
    )
    return Sample(
        interval_start=float(data["interval_start"]),
        interval_end=float(data["interval_end"]),
        aggregate=breakdown_from_dict(data["aggregate"]),
        processes=processes,
        faults=_faults_from_dict(data.get("faults", {})),
    )


class JsonLinesSampleWriter(AbstractSampleWriter):
    """Writes one JSON object per sample."""

    def write_sample(self, sample: Sample) -> None:
        self.stream.write(json.dumps(sample_to_dict(sample), separators=(",", ":")))
        self.stream.write("\n")


def read_samples_jsonl(source: Union[str, Path, TextIO]) -> List[Sample]:
    """
    Read samples written by ``JsonLinesSampleWriter``.

    Args:
        source: A file path or an open text stream.

    Returns:
        The samples in file order. Blank lines are ignored.

    Raises:
        ValueError: If a line is not valid JSON or not a sample object.
    """
    if isinstance(source, (str, Path)):
        with open(source, "r", encoding="utf-8") as f:
            return read_samples_jsonl(f)

    samples = []
    for line_number, line in enumerate(source, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            samples.append(sample_from_dict(json.loads(line)))
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ValueError(f"Invalid sample on line {line_number}: {e}") from e
    logger.debug(f"Read {len(samples)} samples")
    return samples
