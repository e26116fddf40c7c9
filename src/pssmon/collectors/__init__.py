"""
Collectors turning selected processes into per-process memory usage.
"""

from .usage_collector import CollectionResult, UsageCollector

__all__ = [
    "CollectionResult",
    "UsageCollector",
]
