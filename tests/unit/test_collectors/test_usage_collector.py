"""
Unit tests for the per-process usage collector.
"""

from unittest.mock import patch

import pytest

from pssmon.collectors import UsageCollector
from pssmon.models.config import MonitorConfig
from pssmon.models.memory import FaultCounts, MemoryCategory
from pssmon.models.process import ProcessFailure, ProcessIdentity
from pssmon.system import EnumerationResult
from pssmon.validation import InvalidPatternError, ProcessPermissionError, ProcessVanishedError

MODULE = "pssmon.collectors.usage_collector"

IDENTITIES = [
    ProcessIdentity(30, 1, "/bin/app worker"),
    ProcessIdentity(10, 1, "/bin/app"),
    ProcessIdentity(20, 1, "/bin/gone"),
]

SMAPS = "1000-2000 r-xp 00000000 fd:01 7 /bin/app\nPss: 8 kB\n2000-3000 rw-p 00000000 00:00 0\nPss: 4 kB\n"


def fake_smaps(pid):
    if pid == 20:
        raise ProcessVanishedError(pid)
    return SMAPS


@pytest.fixture
def patched_system():
    with (
        patch(f"{MODULE}.enumerate_processes", return_value=EnumerationResult(processes=list(IDENTITIES))) as enumerate_mock,
        patch(f"{MODULE}.read_smaps", side_effect=fake_smaps),
        patch(f"{MODULE}.resolve_exe", return_value="/bin/app"),
        patch(f"{MODULE}.read_fault_counts", return_value=FaultCounts(3, 1)),
    ):
        yield enumerate_mock


@pytest.mark.unit
class TestUsageCollector:
    """Test cases for UsageCollector."""

    def test_collects_sorted_usages_and_drops_vanished(self, patched_system):
        result = UsageCollector(MonitorConfig()).collect()

        assert [u.pid for u in result.usages] == [10, 30]
        assert result.failures == []
        usage = result.usages[0]
        assert usage.breakdown.get(MemoryCategory.BINARY_TEXT) == 8192
        assert usage.breakdown.get(MemoryCategory.ANONYMOUS) == 4096
        assert usage.faults == FaultCounts(3, 1)
        assert usage.exe_path == "/bin/app"

    def test_thread_pool_gives_same_result(self, patched_system):
        sequential = UsageCollector(MonitorConfig()).collect()
        parallel = UsageCollector(MonitorConfig(max_workers=4)).collect()

        assert parallel.usages == sequential.usages

    def test_selection_settings_are_forwarded(self, patched_system):
        config = MonitorConfig(pattern="app", match_children=True, match_self=True)

        UsageCollector(config, self_pid=77).collect()

        kwargs = patched_system.call_args.kwargs
        assert kwargs["pattern"].pattern == "app"
        assert kwargs["match_children"] is True
        assert kwargs["match_self"] is True
        assert kwargs["self_pid"] == 77

    def test_permission_error_is_recorded(self, patched_system):
        with patch(f"{MODULE}.read_smaps", side_effect=ProcessPermissionError(10, "denied")):
            result = UsageCollector(MonitorConfig()).collect()

        assert result.usages == []
        assert {f.pid for f in result.failures} == {10, 20, 30}
        assert all(isinstance(f, ProcessFailure) for f in result.failures)

    def test_permission_error_escalates(self, patched_system):
        config = MonitorConfig(fail_on_permission_error=True)

        with patch(f"{MODULE}.read_smaps", side_effect=ProcessPermissionError(10, "denied")):
            with pytest.raises(ProcessPermissionError):
                UsageCollector(config).collect()

    def test_enumeration_failures_are_kept(self, patched_system):
        patched_system.return_value = EnumerationResult(
            processes=[IDENTITIES[1]],
            failures=[ProcessFailure(5, "permission_denied")],
        )

        result = UsageCollector(MonitorConfig()).collect()

        assert [f.pid for f in result.failures] == [5]
        assert [u.pid for u in result.usages] == [10]

    def test_invalid_pattern_fails_at_construction(self):
        with pytest.raises(InvalidPatternError):
            UsageCollector(MonitorConfig(pattern="[unclosed"))
