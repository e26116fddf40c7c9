"""
Parser for the per-process smaps memory map descriptor.

The descriptor is a sequence of blocks. Each block starts with a header line
and is followed by ``Key: value kB`` field lines::

    00400000-004b8000 r-xp 00000000 fd:00 11143998     /usr/bin/app
    Size:                736 kB
    Rss:                 592 kB
    Pss:                  87 kB
    ...
    VmFlags: rd ex mr mw me dw

Parsing never fails: malformed lines are skipped and text without any
header produces an empty list.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..models.memory import MappingRecord, Permissions

logger = logging.getLogger(__name__)

# The kernel documents the unit as "kB" but means KiB.
KIB = 1024

# kB-valued smaps fields, see Documentation/filesystems/proc.rst.
KNOWN_FIELDS = frozenset(
    [
        "Size",
        "KernelPageSize",
        "MMUPageSize",
        "Rss",
        "Pss",
        "Pss_Dirty",
        "Pss_Anon",
        "Pss_File",
        "Pss_Shmem",
        "Shared_Clean",
        "Shared_Dirty",
        "Private_Clean",
        "Private_Dirty",
        "Referenced",
        "Anonymous",
        "KSM",
        "LazyFree",
        "AnonHugePages",
        "ShmemPmdMapped",
        "FilePmdMapped",
        "Shared_Hugetlb",
        "Private_Hugetlb",
        "Swap",
        "SwapPss",
        "Locked",
    ]
)

ADDRESS_RANGE_PATTERN = re.compile(r"^[0-9a-fA-F]+-[0-9a-fA-F]+(\s|$)")
HEADER_PATTERN = re.compile(
    r"^(?P<start>[0-9a-fA-F]+)-(?P<end>[0-9a-fA-F]+)\s+"
    r"(?P<perms>[r-][w-][x-][spSP])\s+"
    r"(?P<offset>[0-9a-fA-F]+)\s+"
    r"(?P<device>[0-9a-fA-F]+:[0-9a-fA-F]+)\s+"
    r"(?P<inode>\d+)"
    r"(?:\s+(?P<path>.*?))?\s*$"
)
FIELD_PATTERN = re.compile(r"^(?P<key>[A-Za-z_]+):\s+(?P<value>\S+)\s+kB\s*$")


def _parse_header(line: str) -> Optional[Tuple[int, int, Permissions, int, str, int, str]]:
    match = HEADER_PATTERN.match(line)
    if not match:
        return None
    return (
        int(match.group("start"), 16),
        int(match.group("end"), 16),
        Permissions.parse(match.group("perms").lower()),
        int(match.group("offset"), 16),
        match.group("device"),
        int(match.group("inode")),
        match.group("path") or "",
    )


def _parse_field(line: str) -> Optional[Tuple[str, int]]:
    match = FIELD_PATTERN.match(line.strip())
    if not match:
        return None
    key = match.group("key")
    if key not in KNOWN_FIELDS:
        return None
    try:
        value = int(match.group("value"))
    except ValueError:
        return None
    if value < 0:
        return None
    return key, value * KIB


def parse_smaps(text: Union[str, Iterable[str]]) -> List[MappingRecord]:
    """
    Parse smaps text into an ordered list of mapping records.

    Args:
        text: The whole descriptor as a string, or an iterable of lines.

    Returns:
        One MappingRecord per valid header, in input order.
    """
    lines = text.splitlines() if isinstance(text, str) else text

    records: List[MappingRecord] = []
    header: Optional[Tuple[int, int, Permissions, int, str, int, str]] = None
    fields: Dict[str, int] = {}

    def flush() -> None:
        if header is not None:
            start, end, perms, offset, device, inode, path = header
            records.append(
                MappingRecord(
                    start=start,
                    end=end,
                    permissions=perms,
                    offset=offset,
                    device=device,
                    inode=inode,
                    path=path,
                    fields=fields,
                )
            )

    for lineno, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\n")
        if not line.strip():
            continue

        if ADDRESS_RANGE_PATTERN.match(line):
            flush()
            header = _parse_header(line)
            fields = {}
            if header is None:
                # Field lines up to the next valid header have no owner.
                logger.debug(f"Skipping malformed smaps header at line {lineno}: {line!r}")
            continue

        if header is None:
            continue

        parsed = _parse_field(line)
        if parsed is None:
            continue
        key, nbytes = parsed
        fields[key] = nbytes

    flush()
    return records
