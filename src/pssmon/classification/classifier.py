"""
Memory map classification.

Assigns every parsed mapping to exactly one memory category. Classification
is a pure function of the mapping, the process's main executable path and
the grouping key: there is no cache and no global state.
"""

import logging
from typing import Optional

from ..models.memory import SYSV_PREFIX, Category, MappingRecord, MemoryCategory, OtherCategory
from .grouping import DEFAULT_GROUPING, GroupingKey

logger = logging.getLogger(__name__)

DELETED_SUFFIX = " (deleted)"

# Pseudo-mappings with a fixed name.
PSEUDO_PATHS = {
    "[heap]": MemoryCategory.HEAP,
    "[stack]": MemoryCategory.STACK,
    "[vdso]": MemoryCategory.VDSO,
    "[vvar]": MemoryCategory.VVAR,
    "[vsyscall]": MemoryCategory.VSYSCALL,
}


def _strip_deleted(path: str) -> str:
    if path.endswith(DELETED_SUFFIX):
        return path[: -len(DELETED_SUFFIX)]
    return path


def is_same_file(path: str, exe_path: str) -> bool:
    """
    Compare a mapping path with the executable path.

    The kernel appends " (deleted)" to both when the binary was replaced on
    disk, but psutil strips it from the executable path, so the suffix is
    ignored on either side.
    """
    return _strip_deleted(path) == _strip_deleted(exe_path)


def classify_mapping(
    record: MappingRecord,
    exe_path: Optional[str],
    grouping: GroupingKey = DEFAULT_GROUPING,
) -> Category:
    """Classify a mapping into a memory category.

    Rules are evaluated in order and the first match wins:

    1. ``[heap]``, ``[stack]``, ``[stack:<tid>]``, ``[vdso]``, ``[vvar]`` and
       ``[vsyscall]`` map to their own categories.
    2. ``/SYSV...`` paths are System V shared memory segments.
    3. An empty path is an anonymous mapping.
    4. Any other unbracketed path, including ``anon_inode:`` and ``memfd:``
       maps, is binary text/data when it is the main executable and external
       text/data otherwise; executable maps are text and writable maps are
       data.
    5. Anything else, including read-only file maps, unknown pseudo names and
       every file map of a process whose executable could not be resolved,
       becomes an ``OtherCategory`` keyed by path and the grouping's
       permission label.

    Args:
        record: The mapping to classify.
        exe_path: The process's resolved main executable, or None.
        grouping: Selects the permission bits used in ``OtherCategory`` keys.

    Returns:
        A MemoryCategory member or an OtherCategory.
    """
    path = record.path
    perms = record.permissions

    category = PSEUDO_PATHS.get(path)
    if category is not None:
        return category
    if path.startswith("[stack:"):
        return MemoryCategory.THREAD_STACK
    if path.startswith(SYSV_PREFIX):
        return MemoryCategory.SYSV_SHARED
    if not path:
        return MemoryCategory.ANONYMOUS

    if record.is_file_backed and exe_path:
        is_self = is_same_file(path, exe_path)
        if perms.execute:
            return MemoryCategory.BINARY_TEXT if is_self else MemoryCategory.EXTERNAL_TEXT
        if perms.write:
            return MemoryCategory.BINARY_DATA if is_self else MemoryCategory.EXTERNAL_DATA

    return OtherCategory(path=path, perms=grouping.perms_label(perms))
