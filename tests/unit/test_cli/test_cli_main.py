"""
Unit tests for the command-line interface.
"""

import json
import logging
from unittest.mock import patch

import pytest

from pssmon.cli.main import apply_cli_overrides, build_parser, main
from pssmon.collectors import CollectionResult
from pssmon.models.config import MonitorConfig
from pssmon.models.memory import MemoryBreakdown, MemoryCategory
from pssmon.models.process import ProcessIdentity, ProcessUsage
from pssmon.validation import InvalidPatternError, ProcessPermissionError, ValidationError


def heap_usage(pid, nbytes):
    breakdown = MemoryBreakdown()
    breakdown.add(MemoryCategory.HEAP, nbytes)
    return ProcessUsage(ProcessIdentity(pid, 1, f"proc{pid}"), breakdown)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_collection():
    result = CollectionResult(usages=[heap_usage(1, 4096), heap_usage(2, 8192)])
    with patch("pssmon.collectors.usage_collector.UsageCollector.collect", return_value=result) as collect:
        yield collect


@pytest.mark.unit
class TestArgumentParsing:
    """Test cases for argument parsing and overrides."""

    def test_profile_arguments(self):
        args = build_parser().parse_args(["profile", "python", "-c", "-i", "0.5", "-o", "json", "-n", "3"])

        config = apply_cli_overrides(MonitorConfig(), args)

        assert config.pattern == "python"
        assert config.match_children is True
        assert config.interval_seconds == 0.5
        assert config.output_format == "json"
        assert args.max_samples == 3

    def test_unset_flags_keep_config_values(self):
        base = MonitorConfig(pattern="make", match_children=True, grouping_mask="fx", show_small=True)
        args = build_parser().parse_args(["snapshot"])

        assert apply_cli_overrides(base, args) == base

    def test_snapshot_arguments(self):
        args = build_parser().parse_args(["snapshot", "-m", "", "--show-small", "--match-self", "-f"])

        config = apply_cli_overrides(MonitorConfig(), args)

        assert config.grouping_mask == ""
        assert config.show_small is True
        assert config.match_self is True
        assert config.fail_on_permission_error is True

    def test_invalid_regex(self):
        args = build_parser().parse_args(["snapshot", "(unclosed"])

        with pytest.raises(InvalidPatternError):
            apply_cli_overrides(MonitorConfig(), args)

    @pytest.mark.parametrize(
        "argv",
        [["profile", "-i", "0"], ["snapshot", "-m", "fz"], ["snapshot", "-j", "0"]],
    )
    def test_invalid_values(self, argv):
        args = build_parser().parse_args(argv)

        with pytest.raises(ValidationError):
            apply_cli_overrides(MonitorConfig(), args)

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


@pytest.mark.unit
class TestMain:
    """Test cases for the main entry point."""

    def test_snapshot_prints_tables(self, fake_collection, capsys):
        assert main(["snapshot"]) == 0

        out = capsys.readouterr().out
        assert "1 proc1" in out
        assert "all selected processes" in out
        assert "heap" in out

    def test_profile_streams_tsv(self, fake_collection, capsys):
        assert main(["profile", "-n", "2", "-i", "0.01"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("START\tEND\tPID")
        assert [line.split("\t")[2] for line in lines[1:]] == ["1", "2", "ALL", "1", "2", "ALL"]

    def test_profile_json_to_file(self, fake_collection, tmp_path):
        output = tmp_path / "samples.jsonl"

        assert main(["profile", "-n", "1", "-o", "json", "--output", str(output)]) == 0

        record = json.loads(output.read_text().splitlines()[0])
        assert record["aggregate"]["categories"]["heap"] == 12288

    def test_profile_renders_graph_on_finish(self, fake_collection, tmp_path):
        graph = tmp_path / "run.html"

        with patch("pssmon.cli.main.plot_samples") as plot_samples:
            main(["profile", "-n", "2", "-i", "0.01", "-g", str(graph)])

        samples, path = plot_samples.call_args.args
        assert len(samples) == 2
        assert path == str(graph)

    def test_invalid_pattern_exits_before_collection(self, fake_collection):
        with pytest.raises(SystemExit) as exc_info:
            main(["snapshot", "(unclosed"])

        assert exc_info.value.code == 1
        fake_collection.assert_not_called()

    def test_escalated_permission_error_exits(self, fake_collection):
        fake_collection.side_effect = ProcessPermissionError(4, "denied")

        with pytest.raises(SystemExit) as exc_info:
            main(["snapshot", "-f"])

        assert exc_info.value.code == 1

    def test_missing_config_file_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["snapshot", "--config", str(tmp_path / "missing.toml")])

        assert exc_info.value.code == 1

    def test_config_file_is_used(self, fake_collection, config_file, capsys):
        assert main(["snapshot", "--config", str(config_file)]) == 0

        assert "all selected processes" in capsys.readouterr().out
