"""
Memory map and memory breakdown data models.

This module defines the value types that flow through the parsing,
classification and aggregation pipeline:

- Permissions: the four permission/sharing bits of a mapping.
- MappingRecord: one parsed entry of a process's smaps descriptor.
- MemoryCategory / OtherCategory: the closed category taxonomy.
- MemoryBreakdown: PSS bytes per category for one process or a process set.
- FaultCounts: minor and major page fault counters.

All byte counts are plain integers in bytes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple, Union

SYSV_PREFIX = "/SYSV"


def is_file_path(path: str) -> bool:
    """
    Tell whether a mapping path names a file.

    Anything that is not empty, not a bracketed pseudo-name such as
    ``[heap]`` or ``[anon:x]`` and not a SysV segment counts, including
    ``anon_inode:`` and ``memfd:`` paths.
    """
    return bool(path) and not path.startswith("[") and not path.startswith(SYSV_PREFIX)


@dataclass(frozen=True)
class Permissions:
    """Permission bits of a mapping as reported in the smaps header."""

    read: bool
    write: bool
    execute: bool
    shared: bool

    @property
    def private(self) -> bool:
        return not self.shared

    @classmethod
    def parse(cls, perms: str) -> "Permissions":
        """
        Parse a kernel permission string such as ``r-xp``.

        Raises:
            ValueError: If the string is not exactly four characters.
        """
        if len(perms) != 4:
            raise ValueError(f"Invalid permission string: {perms!r}")
        return cls(
            read=perms[0] == "r",
            write=perms[1] == "w",
            execute=perms[2] == "x",
            shared=perms[3] == "s",
        )

    def __str__(self) -> str:
        return "".join(
            (
                "r" if self.read else "-",
                "w" if self.write else "-",
                "x" if self.execute else "-",
                "s" if self.shared else "p",
            )
        )


@dataclass(frozen=True)
class MappingRecord:
    """
    A single virtual memory area parsed from a smaps descriptor.

    Attributes:
        start: First address of the mapping.
        end: Address one past the end of the mapping.
        permissions: Parsed permission bits.
        offset: File offset of the mapping.
        device: Device string as printed by the kernel (e.g. "fd:01").
        inode: Inode number of the backing file, 0 for anonymous maps.
        path: Backing path, verbatim. Empty for anonymous mappings.
        fields: Field name to byte count, e.g. {"Pss": 40960}.
    """

    start: int
    end: int
    permissions: Permissions
    offset: int = 0
    device: str = "00:00"
    inode: int = 0
    path: str = ""
    fields: Dict[str, int] = field(default_factory=dict, hash=False)

    def field_bytes(self, name: str) -> int:
        """Return the byte count of ``name``, 0 when the field is absent."""
        return self.fields.get(name, 0)

    @property
    def pss(self) -> int:
        return self.field_bytes("Pss")

    @property
    def rss(self) -> int:
        return self.field_bytes("Rss")

    @property
    def size(self) -> int:
        return self.field_bytes("Size")

    @property
    def is_file_backed(self) -> bool:
        """True when the path names a file rather than a pseudo-mapping."""
        return is_file_path(self.path)


class MemoryCategory(Enum):
    """Named memory categories. ``OtherCategory`` covers everything else."""

    STACK = "stack"
    HEAP = "heap"
    THREAD_STACK = "thread_stack"
    BINARY_TEXT = "bin_text"
    EXTERNAL_TEXT = "lib_text"
    BINARY_DATA = "bin_data"
    EXTERNAL_DATA = "lib_data"
    ANONYMOUS = "anon_map"
    VDSO = "vdso"
    VVAR = "vvar"
    VSYSCALL = "vsyscall"
    SYSV_SHARED = "sysv_shm"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class OtherCategory:
    """
    The catch-all category, keyed by path and a (possibly reduced) permission label.

    The permission label is produced by a grouping key, so the same mapping can
    land in different ``OtherCategory`` keys depending on the configured mask.
    """

    path: str
    perms: str = ""

    @property
    def label(self) -> str:
        return f"{self.path} {self.perms}" if self.perms else self.path

    @property
    def is_file_backed(self) -> bool:
        return is_file_path(self.path)


Category = Union[MemoryCategory, OtherCategory]

# (path, permission string) of a file-backed mapping
FileKey = Tuple[str, str]


def _add_maps(lhs: Dict, rhs: Dict) -> Dict:
    result = dict(lhs)
    for key, value in rhs.items():
        result[key] = result.get(key, 0) + value
    return result


@dataclass(frozen=True)
class FaultCounts:
    """Minor and major page fault counters of a process."""

    minor: int = 0
    major: int = 0

    def __add__(self, other: "FaultCounts") -> "FaultCounts":
        if not isinstance(other, FaultCounts):
            return NotImplemented
        return FaultCounts(self.minor + other.minor, self.major + other.major)

    def __radd__(self, other):
        # Allows sum() over an iterable of FaultCounts.
        if other == 0:
            return self
        return NotImplemented


@dataclass
class MemoryBreakdown:
    """
    PSS bytes per category.

    ``categories`` holds the scalar totals of the named categories, ``other``
    holds the catch-all entries and ``files`` indexes the bytes of every
    file-backed mapping by (path, permission string). ``files`` is a second
    view of bytes already counted in ``categories``/``other`` and is not part
    of ``total()``.
    """

    categories: Dict[MemoryCategory, int] = field(default_factory=dict)
    other: Dict[OtherCategory, int] = field(default_factory=dict)
    files: Dict[FileKey, int] = field(default_factory=dict)

    def add(self, category: Category, nbytes: int, file_key: Optional[FileKey] = None) -> None:
        """Add ``nbytes`` to ``category`` and, if given, to the file index."""
        if nbytes < 0:
            raise ValueError(f"Byte counts cannot be negative: {nbytes}")
        if isinstance(category, MemoryCategory):
            self.categories[category] = self.categories.get(category, 0) + nbytes
        elif isinstance(category, OtherCategory):
            self.other[category] = self.other.get(category, 0) + nbytes
        else:
            raise TypeError(f"Unknown category type: {type(category).__name__}")
        if file_key is not None:
            self.files[file_key] = self.files.get(file_key, 0) + nbytes

    def get(self, category: Category) -> int:
        if isinstance(category, MemoryCategory):
            return self.categories.get(category, 0)
        return self.other.get(category, 0)

    def items(self) -> Iterator[Tuple[Category, int]]:
        """Yield (category, bytes) for every named category, then the Other entries."""
        for category in MemoryCategory:
            if category in self.categories:
                yield category, self.categories[category]
        for other_key in sorted(self.other):
            yield other_key, self.other[other_key]

    def other_total(self) -> int:
        return sum(self.other.values())

    def total(self) -> int:
        return sum(self.categories.values()) + self.other_total()

    def __add__(self, rhs: "MemoryBreakdown") -> "MemoryBreakdown":
        if not isinstance(rhs, MemoryBreakdown):
            return NotImplemented
        return MemoryBreakdown(
            categories=_add_maps(self.categories, rhs.categories),
            other=_add_maps(self.other, rhs.other),
            files=_add_maps(self.files, rhs.files),
        )

    def __radd__(self, other):
        # sum() starts from 0; the result must not alias an input.
        if other == 0:
            return MemoryBreakdown() + self
        return NotImplemented
