"""Standalone Command-Line Tool for Re-plotting pssmon Profiles.

Reads the newline-delimited JSON written by ``pssmon profile -o json`` and
renders it as a stacked area graph of PSS per category over time. Unlike the
graph drawn at the end of a profiling run, this tool can graph a single
process of the run and can restrict the graph to its largest categories.

Usage examples:
  # Graph the aggregate of all processes in a run
  python tools/plotter.py --input run.jsonl

  # Graph one process, keeping only its three largest categories
  python tools/plotter.py --input run.jsonl --pid 4242 --top-n 3 --output graphs/pid4242
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Third-party library imports
import polars as pl

from pssmon.output import read_samples_jsonl
from pssmon.plotter import build_figure, samples_to_frame, save_plotly_figure

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("PlotterTool")


def keep_top_categories(df: pl.DataFrame, top_n: int) -> pl.DataFrame:
    """Restrict a sample frame to the ``top_n`` categories by peak PSS."""
    peaks = (
        df.group_by("Category")
        .agg(pl.col("PSS_Bytes").max().alias("peak"))
        .sort(["peak", "Category"], descending=[True, False])
        .head(top_n)
    )
    return df.filter(pl.col("Category").is_in(peaks["Category"].to_list()))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate graphs from pssmon JSON profiles.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Required. Profile written with `pssmon profile -o json`.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Graph path without extension. Defaults to the input path.",
    )
    parser.add_argument(
        "--pid",
        type=int,
        help="Graph a single process instead of the aggregate of the run.",
    )
    parser.add_argument(
        "--top-n",
        type=int,
        metavar="N",
        help="Only graph the N categories with the highest peak PSS.",
    )
    parser.add_argument("--title", type=str, help="Graph title.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, read the profile and save the graph."""
    args = build_parser().parse_args(argv)

    if not args.input.is_file():
        logger.error(f"Profile not found: {args.input}")
        return 1
    if args.top_n is not None and args.top_n < 1:
        logger.error(f"Invalid --top-n value: {args.top_n}. Must be at least 1.")
        return 1

    try:
        samples = read_samples_jsonl(args.input)
    except ValueError as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return 1
    if not samples:
        logger.warning(f"No samples in {args.input}")
        return 0

    if args.pid is not None and not any(u.pid == args.pid for s in samples for u in s.processes):
        logger.warning(f"PID {args.pid} does not appear in {args.input}")

    df = samples_to_frame(samples, args.pid)
    if args.top_n is not None:
        logger.info(f"Filtering for top {args.top_n} categories by peak PSS")
        df = keep_top_categories(df, args.top_n)

    output = args.output or args.input
    subject = f"PID {args.pid}" if args.pid is not None else "all processes"
    fig = build_figure(df, args.title or f"PSS over time - {subject} - {output.stem}")
    if fig is None:
        logger.warning("No memory recorded; nothing to graph.")
        return 0

    output.parent.mkdir(parents=True, exist_ok=True)
    save_plotly_figure(fig, output.stem, output.parent)
    return 0


if __name__ == "__main__":
    sys.exit(main())
