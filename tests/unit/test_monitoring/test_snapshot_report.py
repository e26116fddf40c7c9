"""
Unit tests for snapshot reports and their text rendering.
"""

from unittest.mock import MagicMock

import pytest

from pssmon.classification import GroupingKey
from pssmon.collectors import CollectionResult
from pssmon.models.memory import MemoryBreakdown, MemoryCategory, OtherCategory
from pssmon.models.process import ProcessFailure, ProcessIdentity, ProcessUsage
from pssmon.models.results import RankedEntry, RankedTable
from pssmon.monitoring import AGGREGATE_TITLE, build_report
from pssmon.output import human_bytes, render_ranked_table, render_report


def usage(pid, heap, files):
    breakdown = MemoryBreakdown()
    breakdown.add(MemoryCategory.HEAP, heap)
    for path, perms, nbytes in files:
        breakdown.add(OtherCategory(path, perms), nbytes, (path, perms))
    return ProcessUsage(ProcessIdentity(pid, 1, f"prog{pid} --flag"), breakdown)


@pytest.fixture
def collector():
    collector = MagicMock()
    collector.grouping = GroupingKey()
    collector.collect.return_value = CollectionResult(
        usages=[
            usage(10, 4096, [("/data/a", "r--p", 1024)]),
            usage(20, 8192, [("/data/b", "r--s", 2048)]),
        ],
        failures=[ProcessFailure(30, "permission_denied")],
    )
    return collector


@pytest.mark.unit
class TestBuildReport:
    """Test cases for build_report."""

    def test_one_table_per_process_and_aggregate(self, collector):
        report = build_report(collector)

        assert [u.pid for u, _ in report.processes] == [10, 20]
        assert report.processes[0][1].title == "10 prog10 --flag"
        assert report.aggregate.title == AGGREGATE_TITLE
        assert report.aggregate.total == 4096 + 8192 + 1024 + 2048
        assert [f.pid for f in report.failures] == [30]

    def test_empty_mask_collapses_files_in_aggregate(self, collector):
        report = build_report(collector, GroupingKey.parse(""))

        rows = {e.label: e.nbytes for e in report.aggregate.entries}
        assert rows == {"heap": 12288, "file-backed": 3072}


@pytest.mark.unit
class TestRendering:
    """Test cases for the text renderer."""

    @pytest.mark.parametrize(
        "nbytes, expected",
        [(0, "0 B"), (512, "512 B"), (40960, "40.0 KiB"), (3 * 1024 * 1024, "3.0 MiB")],
    )
    def test_human_bytes(self, nbytes, expected):
        assert human_bytes(nbytes) == expected

    def test_render_table(self):
        table = RankedTable(
            title="10 prog",
            entries=(
                RankedEntry("heap", 9900, 99.0),
                RankedEntry("small categories", 100, 1.0),
            ),
            folded=(RankedEntry("vdso", 100, 1.0 - 1e-9),),
            total=10000,
        )

        text = render_ranked_table(table)
        lines = text.splitlines()

        assert lines[0] == "10 prog (total 9.8 KiB)"
        assert lines[1].split() == ["99%", "9.7", "KiB", "heap"]
        assert "vdso" not in text
        assert "vdso" in render_ranked_table(table, show_small=True)

    def test_render_empty_table(self):
        assert "no memory" in render_ranked_table(RankedTable(title="x", entries=()))

    def test_render_report_ends_with_aggregate(self, collector):
        text = render_report(build_report(collector))

        assert text.rstrip().splitlines()[0].startswith("10 prog10")
        assert AGGREGATE_TITLE in text.split("\n\n")[-1]
