"""
Generates graphs from profiler samples.

The samples taken during a profiling run are flattened into a long-format
Polars DataFrame (one row per sample and category) and rendered with Plotly
as a stacked area chart of the aggregate PSS per category over time, with a
dashed line for the total. Graphs are saved as interactive HTML files and,
if Kaleido is installed, as static PNG images.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

# Third-party library imports
import polars as pl
import plotly.express as px
import plotly.graph_objects as go

from .models.memory import MemoryBreakdown, MemoryCategory
from .models.results import Sample

logger = logging.getLogger(__name__)

# --- Module Constants ---

OTHER_LABEL = "other"
BYTES_PER_MIB = 1024 * 1024

# Categories whose peak stays below this many bytes are left out of the
# graph to keep it readable.
MIN_PEAK_BYTES_FOR_PLOT = 1


def _breakdown_of(sample: Sample, pid: Optional[int]) -> MemoryBreakdown:
    if pid is None:
        return sample.aggregate
    for usage in sample.processes:
        if usage.pid == pid:
            return usage.breakdown
    return MemoryBreakdown()


def samples_to_frame(samples: Iterable[Sample], pid: Optional[int] = None) -> pl.DataFrame:
    """
    Flatten samples into a long-format DataFrame.

    Args:
        samples: Profiler samples in time order.
        pid: Use this process's breakdown instead of the aggregate. Samples
            in which the process does not appear count as zero.

    Returns:
        A DataFrame with columns ``Time`` (end of the sample interval in
        seconds), ``Category`` and ``PSS_Bytes``; one row per sample and
        category, including zero rows so the stack has no gaps.
    """
    times: List[float] = []
    categories: List[str] = []
    values: List[int] = []
    for sample in samples:
        breakdown = _breakdown_of(sample, pid)
        for category in MemoryCategory:
            times.append(sample.interval_end)
            categories.append(category.label)
            values.append(breakdown.categories.get(category, 0))
        times.append(sample.interval_end)
        categories.append(OTHER_LABEL)
        values.append(breakdown.other_total())

    return pl.DataFrame(
        {"Time": times, "Category": categories, "PSS_Bytes": values},
        schema={"Time": pl.Float64, "Category": pl.Utf8, "PSS_Bytes": pl.Int64},
    )


def _significant_categories(df: pl.DataFrame) -> List[str]:
    peaks = df.group_by("Category", maintain_order=True).agg(pl.col("PSS_Bytes").max().alias("peak"))
    return peaks.filter(pl.col("peak") >= MIN_PEAK_BYTES_FOR_PLOT)["Category"].to_list()


def save_plotly_figure(fig: go.Figure, base_filename: str, output_dir: Path):
    """
    Saves a Plotly figure to both HTML and, if possible, PNG formats.

    Args:
        fig: The Plotly figure object to save.
        base_filename: The base name for the output files (without extension).
        output_dir: The directory to save the files in.
    """
    plot_filename_html = output_dir / f"{base_filename}.html"
    try:
        fig.write_html(plot_filename_html)
        logger.info(f"Interactive graph saved to: {plot_filename_html}")
        try:
            plot_filename_png = output_dir / f"{base_filename}.png"
            fig.write_image(plot_filename_png, width=1200, height=600)
            logger.info(f"Static graph saved to: {plot_filename_png}")
        except Exception as e_kaleido:
            # PNG export is optional.
            logger.warning(
                f"Failed to save static graph to PNG (Kaleido might be missing or misconfigured): {e_kaleido}. "
                f"To enable PNG export, install Kaleido: `pip install pssmon[export]`"
            )
    except OSError as e:
        logger.error(f"Failed to save graph {plot_filename_html}: {e}", exc_info=True)


def build_figure(df: pl.DataFrame, title: str) -> Optional[go.Figure]:
    """
    Build the stacked area figure for a sample frame.

    Returns:
        The figure, or None when no category holds any memory.
    """
    if df.is_empty():
        return None

    significant = _significant_categories(df)
    if not significant:
        return None
    plot_df = df.filter(pl.col("Category").is_in(significant)).with_columns(
        (pl.col("PSS_Bytes") / BYTES_PER_MIB).alias("PSS_MiB")
    )
    logger.debug(f"Graphing categories: {significant}")

    fig = px.area(
        plot_df.to_pandas(),  # Plotly Express prefers Pandas.
        x="Time",
        y="PSS_MiB",
        color="Category",
        title=title,
        labels={"Time": "Time (s)", "PSS_MiB": "PSS (MiB)"},
    )

    total_df = plot_df.group_by("Time").agg(pl.col("PSS_MiB").sum().alias("Total")).sort("Time")
    fig.add_trace(
        go.Scatter(
            x=total_df["Time"].to_list(),
            y=total_df["Total"].to_list(),
            mode="lines",
            name="Total",
            line={"color": "black", "dash": "dash"},
        )
    )
    fig.update_layout(
        legend_title_text="Category",
        xaxis_title="Time since profiling started (s)",
        yaxis_title="PSS (MiB) - Stacked",
    )
    return fig


def plot_samples(
    samples: List[Sample],
    output_path: Union[str, Path],
    title: Optional[str] = None,
    pid: Optional[int] = None,
) -> Optional[go.Figure]:
    """
    Render the samples of a profiling run to a graph file.

    Args:
        samples: Profiler samples in time order.
        output_path: Destination; the extension, if any, is replaced by
            ``.html`` and ``.png``.
        title: Graph title, defaults to the output file name.
        pid: Graph a single process instead of the aggregate.

    Returns:
        The figure that was saved, or None if there was nothing to graph.
    """
    output_path = Path(output_path)
    if not samples:
        logger.warning(f"No samples taken; not writing graph {output_path}")
        return None

    df = samples_to_frame(samples, pid)
    fig = build_figure(df, title or f"PSS over time - {output_path.stem}")
    if fig is None:
        logger.warning(f"No memory recorded in {len(samples)} samples; not writing graph {output_path}")
        return None

    output_dir = output_path.parent
    output_dir.mkdir(parents=True, exist_ok=True)
    save_plotly_figure(fig, output_path.stem, output_dir)
    return fig
