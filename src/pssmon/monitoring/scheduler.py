"""
Periodic sampling loop for the profiler.

The scheduler is a two-state machine (RUNNING -> STOPPED). Each tick runs one
collection pass, turns it into a ``Sample`` covering the time since the
previous tick ended, hands it to ``on_sample`` and sleeps for the interval.
A stop request is observed between ticks, so an in-flight collection always
completes; it also cuts the sleep short. ``on_finish`` runs exactly once with
every sample taken.

The clock is injectable so the loop can be driven by virtual time in tests.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence

from ..aggregation import assemble_sample
from ..models.process import ProcessUsage
from ..models.results import Sample

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class Clock(Protocol):
    """Time source used by the scheduler."""

    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    def sleep(self, seconds: float, stop_event: threading.Event) -> None:
        """Wait for ``seconds`` or until ``stop_event`` is set."""
        ...


class MonotonicClock:
    """Wall-clock implementation backed by ``time.monotonic``."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, stop_event: threading.Event) -> None:
        stop_event.wait(timeout=seconds)


class SampleScheduler:
    """
    Drives periodic collection passes until stopped.

    Args:
        collect: Callable returning the usages of one collection pass.
        interval: Seconds to sleep between ticks. Must be positive.
        clock: Time source, defaults to MonotonicClock.
        on_sample: Called with each Sample as soon as it is taken.
        on_finish: Called once with all samples when the loop stops.
    """

    def __init__(
        self,
        collect: Callable[[], Sequence[ProcessUsage]],
        interval: float,
        clock: Optional[Clock] = None,
        on_sample: Optional[Callable[[Sample], None]] = None,
        on_finish: Optional[Callable[[List[Sample]], None]] = None,
    ):
        if interval <= 0:
            raise ValueError(f"Sampling interval must be positive, got {interval}")
        self.collect = collect
        self.interval = interval
        self.clock = clock or MonotonicClock()
        self.on_sample = on_sample
        self.on_finish = on_finish
        self.samples: List[Sample] = []
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()
        self._state = SchedulerState.STOPPED

    @property
    def state(self) -> SchedulerState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: SchedulerState) -> None:
        with self._state_lock:
            self._state = state

    def request_stop(self) -> None:
        """Ask the loop to stop after the current tick. Safe to call from signal handlers."""
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def run(self, max_samples: Optional[int] = None) -> List[Sample]:
        """
        Sample until a stop is requested or ``max_samples`` samples were taken.

        Returns:
            Every sample taken, in order.
        """
        if self.state is SchedulerState.RUNNING:
            raise RuntimeError("Scheduler is already running")

        self.samples = []
        self._set_state(SchedulerState.RUNNING)
        logger.info(f"Profiler started, interval {self.interval}s, max samples {max_samples or 'unlimited'}")

        origin = self.clock.now()
        previous_end = 0.0
        try:
            while not self._stop_event.is_set():
                usages = self.collect()
                tick_end = self.clock.now() - origin
                sample = assemble_sample(previous_end, tick_end, usages)
                previous_end = tick_end
                self.samples.append(sample)

                if self.on_sample is not None:
                    self.on_sample(sample)

                if max_samples is not None and len(self.samples) >= max_samples:
                    break
                if self._stop_event.is_set():
                    break
                self.clock.sleep(self.interval, self._stop_event)
        finally:
            self._set_state(SchedulerState.STOPPED)
            logger.info(f"Profiler stopped after {len(self.samples)} samples")

        if self.on_finish is not None:
            self.on_finish(self.samples)
        return self.samples
