from __future__ import annotations

from ..models.grid import RawGrid
from .normalize import DEFAULT_SERIAL_RANGE, is_date_like

"""Header row locator for overview-style sheets.

The month/year header is the first row whose cells after column 0 are
predominantly date-like. Only the first `scan_rows` rows are examined.
"""

__all__ = [
    "count_date_like",
    "locate_header_row",
]


def count_date_like(row, serial_range: tuple[float, float] = DEFAULT_SERIAL_RANGE) -> int:
    return sum(1 for cell in row[1:] if is_date_like(cell, serial_range))


def locate_header_row(
    grid: RawGrid,
    *,
    scan_rows: int = 60,
    min_date_cells: int = 3,
    serial_range: tuple[float, float] = DEFAULT_SERIAL_RANGE,
) -> int | None:
    """Return the index of the header row, or None when no row qualifies."""
    for index, row in enumerate(grid[:scan_rows]):
        if count_date_like(row, serial_range) >= min_date_cells:
            return index
    return None
