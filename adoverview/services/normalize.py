from __future__ import annotations

import math
import re
from datetime import date, timedelta

from ..models.cell import Cell, DateCell, EmptyCell, NumberCell, TextCell

"""Cell normalization helpers: numbers, date detection and label text.

to_number() is the single place where a worksheet cell becomes a number.
Blank and placeholder cells become None, never 0: averages downstream count
only months that reported data.
"""

__all__ = [
    "PLACEHOLDER",
    "excel_serial_to_date",
    "format_label",
    "is_date_like",
    "month_label",
    "to_number",
]

PLACEHOLDER = "—"

DEFAULT_SERIAL_RANGE = (20000.0, 60000.0)

# Largest serial Excel can represent (9999-12-31)
MAX_EXCEL_SERIAL = 2958465

_YEAR_TOKEN = re.compile(r"\b(?:19|20)\d{2}\b", re.ASCII)
_STRIP_CHARS = re.compile(r"[₱$,\s]")
_PLAIN_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_NULL_TEXT = {"", "-", PLACEHOLDER}

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_EPOCH_BEFORE_LEAP_BUG = date(1899, 12, 31)
_EPOCH_AFTER_LEAP_BUG = date(1899, 12, 30)


def to_number(cell: Cell) -> float | None:
    """Parse a cell into a finite float, or None when it holds no number."""
    if isinstance(cell, EmptyCell):
        return None
    if isinstance(cell, NumberCell):
        return cell.value if math.isfinite(cell.value) else None
    if isinstance(cell, DateCell):
        return None
    if isinstance(cell, TextCell):
        text = cell.text.strip()
        if text in _NULL_TEXT:
            return None
        cleaned = _STRIP_CHARS.sub("", text)
        # float() も受け付ける "1_000" や "inf" は数値扱いしない
        if not _PLAIN_NUMBER.fullmatch(cleaned):
            return None
        number = float(cleaned)
        return number if math.isfinite(number) else None
    raise TypeError(f"unsupported cell type: {type(cell).__name__}")


def is_date_like(cell: Cell, serial_range: tuple[float, float] = DEFAULT_SERIAL_RANGE) -> bool:
    """True for header-ish cells: dates, plausible Excel serials, year-bearing text."""
    if isinstance(cell, DateCell):
        return True
    if isinstance(cell, NumberCell):
        lo, hi = serial_range
        return lo <= cell.value < hi
    if isinstance(cell, TextCell):
        return _YEAR_TOKEN.search(cell.text) is not None
    return False


def excel_serial_to_date(serial: float) -> date | None:
    """Convert an Excel 1900-system day serial to a date.

    Serials below 61 are offset by one day to account for the fictitious
    1900-02-29 that the 1900 date system counts.
    """
    if not math.isfinite(serial) or serial < 0 or serial > MAX_EXCEL_SERIAL:
        return None
    days = int(math.floor(serial))
    if days < 61:
        return _EPOCH_BEFORE_LEAP_BUG + timedelta(days=days)
    return _EPOCH_AFTER_LEAP_BUG + timedelta(days=days)


def month_label(value: date) -> str:
    """'Jan 25' style label (English short month, 2-digit year)."""
    return f"{_MONTHS[value.month - 1]} {value.year % 100:02d}"


def _number_text(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def format_label(cell: Cell) -> str:
    """Render a header cell as an x-axis label."""
    if isinstance(cell, DateCell):
        return month_label(cell.value)
    if isinstance(cell, NumberCell):
        converted = excel_serial_to_date(cell.value)
        if converted is not None:
            return month_label(converted)
        return _number_text(cell.value).strip() or PLACEHOLDER
    if isinstance(cell, TextCell):
        return cell.text.strip() or PLACEHOLDER
    return PLACEHOLDER
