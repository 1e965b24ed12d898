from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .cell import Cell, cell_from_value, cell_to_json

"""RawGrid and SheetGrid models.

RawGrid is the immutable rows x columns view of one worksheet handed to the
metric extractor. Rows may be ragged (trailing blanks trimmed by the reader).
"""

__all__ = [
    "InvalidGridError",
    "RawGrid",
    "SheetGrid",
    "build_grid",
    "grid_preview",
]

RawGrid = tuple[tuple[Cell, ...], ...]


class InvalidGridError(TypeError):
    """Raised when the grid itself is absent or not a sequence of rows."""


@dataclass(frozen=True)
class SheetGrid:
    sheet_name: str
    rows: RawGrid

    @property
    def row_count(self) -> int:
        return len(self.rows)


def build_grid(rows: Iterable[Sequence[Any] | None] | None) -> RawGrid:
    """Build a RawGrid from nested sequences of raw values or Cells.

    A missing row (None) becomes an empty row. Anything that is not a
    sequence of rows raises InvalidGridError.
    """
    if rows is None:
        raise InvalidGridError("grid is missing")
    if isinstance(rows, (str, bytes)):
        raise InvalidGridError(f"grid must be a sequence of rows, got {type(rows).__name__}")
    try:
        iterator = iter(rows)
    except TypeError as e:
        raise InvalidGridError(f"grid must be a sequence of rows, got {type(rows).__name__}") from e

    grid: list[tuple[Cell, ...]] = []
    for index, row in enumerate(iterator):
        if row is None:
            grid.append(())
            continue
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise InvalidGridError(f"row {index} is not a sequence: {type(row).__name__}")
        grid.append(tuple(cell_from_value(v) for v in row))
    return tuple(grid)


def grid_preview(grid: RawGrid, limit: int = 50) -> list[list[Any]]:
    """First `limit` rows as JSON-safe lists (for diagnostic display)."""
    return [[cell_to_json(c) for c in row] for row in grid[:limit]]
