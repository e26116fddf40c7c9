"""
Command-line interface for the pssmon memory monitor.

Two subcommands are provided:

- ``profile``: sample the selected processes periodically, streaming one
  record per sample to stdout (TSV or NDJSON) until interrupted, then
  optionally render a graph of the run.
- ``snapshot``: take a single pass and print ranked per-process and
  aggregate tables, with file-backed memory grouped by a mask.

Data goes to stdout; logs go to stderr.
"""

import argparse
import dataclasses
import logging
import signal
import sys
import tomllib
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

from .. import __version__
from ..collectors import UsageCollector
from ..config import get_config, set_config_path
from ..config.validators import OUTPUT_FORMATS
from ..models.config import MonitorConfig
from ..monitoring import SampleScheduler, take_snapshot
from ..output import create_sample_writer, render_report
from ..plotter import plot_samples
from ..validation import (
    ProcessPermissionError,
    ValidationError,
    handle_cli_error,
    validate_grouping_mask,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def setup_logging(level: int) -> None:
    """Configure root logging to stderr; stdout is reserved for data."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def _flag_log_level(args: argparse.Namespace) -> Optional[int]:
    if args.verbose:
        return logging.DEBUG
    if args.show_warnings:
        return logging.WARNING
    return None


def _selection_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "regex",
        nargs="?",
        help="Regex matched against each process command line. Matches all processes if omitted.",
    )
    parent.add_argument(
        "-c",
        "--match-children",
        action="store_true",
        default=None,
        help="Also include all descendants of matched processes, even if they don't match.",
    )
    parent.add_argument(
        "--match-self",
        action="store_true",
        default=None,
        help="Include pssmon's own process, which is excluded by default.",
    )
    parent.add_argument(
        "-f",
        "--fail-on-noperm",
        dest="fail_on_permission_error",
        action="store_true",
        default=None,
        help="Fail if permission is denied to read a process's info. "
        "By default the process is skipped and monitoring continues.",
    )
    parent.add_argument(
        "-j",
        "--max-workers",
        type=int,
        help="Number of threads reading process details in parallel.",
    )
    parent.add_argument("--config", type=Path, help="Path to a config.toml file.")
    parent.add_argument("-w", "--show-warnings", action="store_true", help="Print warnings to stderr.")
    parent.add_argument("-v", "--verbose", action="store_true", help="Print debug logs to stderr.")
    return parent


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for both subcommands."""
    parser = argparse.ArgumentParser(
        prog="pssmon",
        description="Reports process stack, heap, text, and data memory usage (PSS).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)
    selection = _selection_parent()

    profile = subparsers.add_parser(
        "profile",
        parents=[selection],
        help="Sample memory usage periodically until interrupted.",
    )
    profile.add_argument("-i", "--interval", type=float, help="Refresh interval in seconds.")
    profile.add_argument("-n", "--max-samples", type=int, help="Stop after this many samples.")
    profile.add_argument(
        "-o",
        "--output-format",
        choices=OUTPUT_FORMATS,
        help="Format of the sample stream written to stdout.",
    )
    profile.add_argument("--output", type=Path, help="Write samples to this file instead of stdout.")
    profile.add_argument("-g", "--graph", type=Path, help="Render a graph of the run to this path when stopping.")

    snapshot = subparsers.add_parser(
        "snapshot",
        parents=[selection],
        help="Print ranked memory tables for the selected processes once.",
    )
    snapshot.add_argument(
        "-m",
        "--grouping-mask",
        help="Letters from 'frwxsp' selecting how file-backed memory is grouped "
        "(f: file, r/w/x: permissions, s/p: shared/private). An empty mask merges all files.",
    )
    snapshot.add_argument(
        "--show-small",
        action="store_true",
        default=None,
        help="List the entries folded into 'small categories'.",
    )
    return parser


def apply_cli_overrides(config: MonitorConfig, args: argparse.Namespace) -> MonitorConfig:
    """
    Override configuration values with the command-line arguments that were given.

    Raises:
        ValidationError: If an argument value is invalid.
    """
    overrides = {}
    if args.regex is not None:
        validate_regex_pattern(args.regex, field_name="regex")
        overrides["pattern"] = args.regex
    for name in ("match_children", "match_self", "fail_on_permission_error"):
        if getattr(args, name) is not None:
            overrides[name] = getattr(args, name)
    if args.max_workers is not None:
        overrides["max_workers"] = validate_positive_integer(
            args.max_workers, min_value=1, max_value=64, field_name="--max-workers"
        )

    if args.command == "profile":
        if args.interval is not None:
            overrides["interval_seconds"] = validate_positive_float(
                args.interval, min_value=0.01, max_value=3600.0, field_name="--interval"
            )
        if args.output_format is not None:
            overrides["output_format"] = args.output_format
        if args.graph is not None:
            overrides["graph_path"] = str(args.graph)
    elif args.command == "snapshot":
        if args.grouping_mask is not None:
            overrides["grouping_mask"] = validate_grouping_mask(args.grouping_mask, field_name="--grouping-mask")
        if args.show_small is not None:
            overrides["show_small"] = args.show_small

    match_children = overrides.get("match_children", config.match_children)
    if match_children and overrides.get("pattern", config.pattern) is None:
        logger.warning("--match-children has no effect without a regex")
    return dataclasses.replace(config, **overrides)


@contextmanager
def _stop_on_signals(scheduler: SampleScheduler) -> Iterator[None]:
    def handler(signum, frame):
        if scheduler.stop_requested:
            logger.warning("Stop already requested. Finishing the current sample.")
            return
        logger.info(f"Signal {signal.strsignal(signum)} received. Stopping after the current sample...")
        scheduler.request_stop()

    original_sigint = signal.signal(signal.SIGINT, handler)
    original_sigterm = signal.signal(signal.SIGTERM, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, original_sigint)
        signal.signal(signal.SIGTERM, original_sigterm)


@contextmanager
def _open_output(path: Optional[Path]) -> Iterator[TextIO]:
    if path is None:
        yield sys.stdout
        return
    with open(path, "w", encoding="utf-8", newline="") as f:
        yield f


def run_profile(config: MonitorConfig, output: Optional[Path] = None, max_samples: Optional[int] = None) -> int:
    """Run the profiler until interrupted or ``max_samples`` samples were taken."""
    collector = UsageCollector(config)

    def on_finish(samples) -> None:
        if config.graph_path:
            plot_samples(samples, config.graph_path)

    with _open_output(output) as stream:
        writer = create_sample_writer(stream, config.output_format)
        scheduler = SampleScheduler(
            collect=collector.collect_usages,
            interval=config.interval_seconds,
            on_sample=writer,
            on_finish=on_finish,
        )
        with _stop_on_signals(scheduler):
            scheduler.run(max_samples=max_samples)
    return 0


def run_snapshot(config: MonitorConfig) -> int:
    """Print the snapshot report of the selected processes."""
    report = take_snapshot(config)
    sys.stdout.write(render_report(report, show_small=config.show_small))
    if report.failures:
        logger.warning(f"{len(report.failures)} processes could not be read and were skipped")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, load configuration and dispatch to a subcommand.

    Returns:
        The process exit status.

    Raises:
        SystemExit: On configuration errors, invalid arguments or an
            escalated permission error.
    """
    args = build_parser().parse_args(argv)
    flag_level = _flag_log_level(args)
    setup_logging(flag_level or logging.ERROR)

    if args.config is not None:
        set_config_path(args.config)
    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    if flag_level is None:
        logging.getLogger().setLevel(app_config.monitor.log_level)

    try:
        config = apply_cli_overrides(app_config.monitor, args)
        if args.command == "profile":
            max_samples = None
            if args.max_samples is not None:
                max_samples = validate_positive_integer(args.max_samples, field_name="--max-samples")
            return run_profile(config, output=args.output, max_samples=max_samples)
        return run_snapshot(config)
    except ValidationError as e:
        handle_cli_error(error=e, context="argument validation", exit_code=1, logger=logger)
    except ProcessPermissionError as e:
        handle_cli_error(error=e, context=f"reading process {e.pid}", exit_code=1, logger=logger)
    return 1


def main_cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_cli()
