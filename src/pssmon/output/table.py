"""
Plain-text rendering of snapshot tables.
"""

from typing import List

from ..models.results import SMALL_CATEGORIES_LABEL, RankedEntry, RankedTable, SnapshotReport

_UNITS = ["B", "KiB", "MiB", "GiB", "TiB"]


def human_bytes(nbytes: int) -> str:
    """Format a byte count with a binary unit, e.g. ``40.0 KiB``."""
    value = float(nbytes)
    for unit in _UNITS:
        if abs(value) < 1024 or unit == _UNITS[-1]:
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{nbytes} B"


def printable(text: str) -> str:
    """Replace undecodable path bytes, kept as surrogates, with U+FFFD."""
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _entry_line(entry: RankedEntry, indent: str = "  ") -> str:
    return f"{indent}{entry.rounded_percent:>3d}% {human_bytes(entry.nbytes):>11}  {printable(entry.label)}"


def render_ranked_table(table: RankedTable, show_small: bool = False) -> str:
    """
    Render a ranked table as text.

    Args:
        table: The table to render.
        show_small: List the entries folded into the small-categories entry
            beneath it.

    Returns:
        The rendered table, one line per entry, without a trailing newline.
    """
    lines: List[str] = [f"{printable(table.title)} (total {human_bytes(table.total)})"]
    if not table.entries:
        lines.append("  no memory")
        return "\n".join(lines)

    for entry in table.entries:
        lines.append(_entry_line(entry))
        if show_small and entry.label == SMALL_CATEGORIES_LABEL:
            lines.extend(_entry_line(folded, indent="        ") for folded in table.folded)
    return "\n".join(lines)


def render_report(report: SnapshotReport, show_small: bool = False) -> str:
    """Render every process table followed by the aggregate table."""
    blocks = [render_ranked_table(table, show_small) for _, table in report.processes]
    blocks.append(render_ranked_table(report.aggregate, show_small))
    return "\n\n".join(blocks) + "\n"
