"""
Factory for creating sample writers.
"""

import logging
from typing import Literal, TextIO

from .base import AbstractSampleWriter
from .jsonl import JsonLinesSampleWriter
from .tsv import TsvSampleWriter

logger = logging.getLogger(__name__)


def create_sample_writer(
    stream: TextIO,
    format_type: Literal["tsv", "json"] = "tsv",
) -> AbstractSampleWriter:
    """
    Create a sample writer for the specified output format.

    Args:
        stream: Text stream the samples are written to
        format_type: Output format ('tsv' or 'json')

    Returns:
        AbstractSampleWriter instance

    Raises:
        ValueError: If an unsupported format type is specified
    """
    if format_type == "tsv":
        logger.debug("Creating TsvSampleWriter")
        return TsvSampleWriter(stream)
    elif format_type == "json":
        logger.debug("Creating JsonLinesSampleWriter")
        return JsonLinesSampleWriter(stream)
    else:
        raise ValueError(f"Unsupported output format: {format_type}")
