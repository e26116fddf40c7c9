"""
Memory map classification and grouping keys.
"""

from .classifier import classify_mapping, is_same_file
from .grouping import (
    DEFAULT_GROUPING,
    DEFAULT_GROUPING_MASK,
    FILE_BACKED_LABEL,
    GroupingKey,
)

__all__ = [
    "classify_mapping",
    "is_same_file",
    "DEFAULT_GROUPING",
    "DEFAULT_GROUPING_MASK",
    "FILE_BACKED_LABEL",
    "GroupingKey",
]
