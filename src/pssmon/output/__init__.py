"""
Output formats for profiler samples and snapshot reports.
"""

from .base import AbstractSampleWriter
from .factory import create_sample_writer
from .jsonl import JsonLinesSampleWriter, read_samples_jsonl, sample_from_dict, sample_to_dict
from .table import human_bytes, render_ranked_table, render_report
from .tsv import HEADER as TSV_HEADER
from .tsv import TsvSampleWriter

__all__ = [
    "AbstractSampleWriter",
    "create_sample_writer",
    "JsonLinesSampleWriter",
    "read_samples_jsonl",
    "sample_from_dict",
    "sample_to_dict",
    "human_bytes",
    "render_ranked_table",
    "render_report",
    "TSV_HEADER",
    "TsvSampleWriter",
]
