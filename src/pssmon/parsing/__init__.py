"""
Parsers for kernel-provided process descriptors.
"""

from .smaps import KNOWN_FIELDS, parse_smaps

__all__ = [
    "KNOWN_FIELDS",
    "parse_smaps",
]
