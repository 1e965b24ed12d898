from __future__ import annotations

from ..models.cell import EmptyCell, TextCell, cell_to_json
from ..models.extraction import Series
from ..models.grid import RawGrid
from .normalize import format_label, to_number

"""Label and per-metric series extraction below a located header row."""

__all__ = [
    "extract_labels",
    "extract_series",
    "metric_name",
]


def extract_labels(grid: RawGrid, header_index: int) -> list[str]:
    return [format_label(cell) for cell in grid[header_index][1:]]


def metric_name(row) -> str:
    """Trimmed column-0 text ('' when the row has no usable name)."""
    if not row:
        return ""
    first = row[0]
    if isinstance(first, TextCell):
        return first.text.strip()
    if isinstance(first, EmptyCell):
        return ""
    # 数値や日付のメトリクス名も文字列として扱う
    return str(cell_to_json(first)).strip()


def extract_series(grid: RawGrid, header_index: int, width: int) -> Series:
    """Map metric name -> values aligned to `width` label positions.

    Rows without a name, or with no number anywhere after column 0, are
    skipped. The null check runs before values are fitted to the labels. A
    later row with the same name replaces the earlier one but keeps its
    position.
    """
    series: Series = {}
    for row in grid[header_index + 1:]:
        name = metric_name(row)
        if not name:
            continue
        values = [to_number(cell) for cell in row[1:]]
        if all(v is None for v in values):
            continue
        # 値の有無は行全体で判定し、その後ラベル数に揃える
        values = values[:width] + [None] * (width - len(values))
        series[name] = values
    return series
