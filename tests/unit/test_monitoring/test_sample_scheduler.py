"""
Unit tests for the profiler's sample scheduler, driven by a virtual clock.
"""

import threading

import pytest

from pssmon.models.memory import MemoryBreakdown, MemoryCategory
from pssmon.models.process import ProcessIdentity, ProcessUsage
from pssmon.monitoring import SampleScheduler, SchedulerState


class VirtualClock:
    """Clock whose time only advances when sleeping or collecting."""

    def __init__(self, start: float = 1000.0):
        self.time = start
        self.sleeps = []

    def now(self) -> float:
        return self.time

    def sleep(self, seconds, stop_event: threading.Event) -> None:
        self.sleeps.append(seconds)
        if not stop_event.is_set():
            self.time += seconds


def make_collect(clock, cost=0.25, heap=4096):
    def collect():
        clock.time += cost
        breakdown = MemoryBreakdown()
        breakdown.add(MemoryCategory.HEAP, heap)
        return [ProcessUsage(ProcessIdentity(1, 0, "init"), breakdown)]

    return collect


@pytest.mark.unit
class TestSampleScheduler:
    """Test cases for SampleScheduler."""

    def test_interval_accounting(self):
        clock = VirtualClock()
        scheduler = SampleScheduler(make_collect(clock), interval=1.0, clock=clock)

        samples = scheduler.run(max_samples=3)

        assert [(s.interval_start, s.interval_end) for s in samples] == [
            (0.0, 0.25),
            (0.25, 1.5),
            (1.5, 2.75),
        ]
        assert clock.sleeps == [1.0, 1.0]

    def test_intervals_are_contiguous(self):
        clock = VirtualClock()
        samples = SampleScheduler(make_collect(clock, cost=0.1), interval=0.5, clock=clock).run(max_samples=5)

        for previous, current in zip(samples, samples[1:]):
            assert current.interval_start == previous.interval_end
            assert current.interval_end > current.interval_start

    def test_sample_aggregates_collected_usage(self):
        clock = VirtualClock()

        sample = SampleScheduler(make_collect(clock, heap=123), interval=1.0, clock=clock).run(max_samples=1)[0]

        assert sample.aggregate.get(MemoryCategory.HEAP) == 123
        assert [u.pid for u in sample.processes] == [1]

    def test_stop_requested_during_collection_completes_tick(self):
        clock = VirtualClock()
        collect = make_collect(clock)
        scheduler = None

        def collect_then_stop():
            usages = collect()
            if len(scheduler.samples) == 1:
                scheduler.request_stop()
            return usages

        finished = []
        scheduler = SampleScheduler(collect_then_stop, interval=1.0, clock=clock, on_finish=finished.append)

        samples = scheduler.run()

        assert len(samples) == 2
        assert finished == [samples]
        assert scheduler.state is SchedulerState.STOPPED

    def test_on_sample_called_for_each_sample(self):
        clock = VirtualClock()
        seen = []

        scheduler = SampleScheduler(make_collect(clock), interval=1.0, clock=clock, on_sample=seen.append)
        samples = scheduler.run(max_samples=4)

        assert seen == samples

    def test_collection_error_stops_without_finishing(self):
        clock = VirtualClock()
        finished = []

        def failing_collect():
            raise RuntimeError("boom")

        scheduler = SampleScheduler(failing_collect, interval=1.0, clock=clock, on_finish=finished.append)

        with pytest.raises(RuntimeError):
            scheduler.run()
        assert scheduler.state is SchedulerState.STOPPED
        assert finished == []

    def test_state_is_running_during_collection(self):
        clock = VirtualClock()
        states = []
        scheduler = None

        def collect():
            states.append(scheduler.state)
            return []

        scheduler = SampleScheduler(collect, interval=1.0, clock=clock)
        scheduler.run(max_samples=1)

        assert states == [SchedulerState.RUNNING]

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            SampleScheduler(lambda: [], interval=0)
