"""
Abstract base class for profiler sample writers.

Writers are independent consumers of ``Sample`` objects: the scheduler hands
each sample to every configured writer as soon as it is taken, and the writer
decides how to render it onto its stream.
"""

from abc import ABC, abstractmethod
from typing import Iterable, TextIO

from ..models.results import Sample


class AbstractSampleWriter(ABC):
    """Interface shared by all sample output formats."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.samples_written = 0

    @abstractmethod
    def write_sample(self, sample: Sample) -> None:
        """
        Render one sample onto the stream.

        Args:
            sample: The sample to write.
        """
        pass

    def write_samples(self, samples: Iterable[Sample]) -> None:
        for sample in samples:
            self(sample)

    def __call__(self, sample: Sample) -> None:
        self.write_sample(sample)
        self.samples_written += 1
        self.stream.flush()
