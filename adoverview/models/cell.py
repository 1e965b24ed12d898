from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Union

import pandas as pd

"""Cell variant model for raw worksheet values.

A worksheet cell is exactly one of four kinds. Downstream code matches on the
concrete class instead of inspecting raw Python types, so the normalizer and
the label formatter stay exhaustive:

- EmptyCell: blank, NaN, NaT or None
- TextCell: any string (untrimmed, as read)
- NumberCell: int/float values (may be non-finite; normalizer rejects those)
- DateCell: a date or datetime value converted by the reader
"""

__all__ = [
    "Cell",
    "DateCell",
    "EmptyCell",
    "NumberCell",
    "TextCell",
    "cell_from_value",
    "cell_to_json",
]


@dataclass(frozen=True)
class EmptyCell:
    pass


@dataclass(frozen=True)
class TextCell:
    text: str


@dataclass(frozen=True)
class NumberCell:
    value: float


@dataclass(frozen=True)
class DateCell:
    value: datetime


Cell = Union[EmptyCell, TextCell, NumberCell, DateCell]

EMPTY = EmptyCell()


def cell_from_value(value: Any) -> Cell:
    """Convert a raw value (as produced by pandas/openpyxl) into a Cell."""
    if isinstance(value, (EmptyCell, TextCell, NumberCell, DateCell)):
        return value
    if value is None:
        return EMPTY
    # bool は int のサブクラスなので数値判定より先に処理
    if isinstance(value, bool):
        return TextCell("TRUE" if value else "FALSE")
    if isinstance(value, str):
        return TextCell(value)
    if isinstance(value, datetime):
        if pd.isna(value):
            return EMPTY
        if isinstance(value, pd.Timestamp):
            return DateCell(value.to_pydatetime())
        return DateCell(value)
    if isinstance(value, date):
        return DateCell(datetime(value.year, value.month, value.day))
    if isinstance(value, time):
        return TextCell(value.isoformat())
    if isinstance(value, (int, float)) or hasattr(value, "__float__"):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return TextCell(str(value))
        if math.isnan(number):
            return EMPTY
        return NumberCell(number)
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return EMPTY
    return TextCell(str(value))


def cell_to_json(cell: Cell) -> Any:
    """JSON-safe value for previews (dates as ISO 8601 strings)."""
    if isinstance(cell, EmptyCell):
        return None
    if isinstance(cell, TextCell):
        return cell.text
    if isinstance(cell, NumberCell):
        if not math.isfinite(cell.value):
            return None
        if cell.value.is_integer():
            return int(cell.value)
        return cell.value
    return cell.value.isoformat()
