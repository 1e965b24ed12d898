from __future__ import annotations

import math
from datetime import date, datetime

"""Display formatting for KPI values (cards, tables, PDF, CLI output)."""

__all__ = [
    "MISSING",
    "format_currency",
    "format_month_year",
    "format_number",
    "format_ratio",
]

MISSING = "—"


def _is_number(n: float | None) -> bool:
    return n is not None and isinstance(n, (int, float)) and math.isfinite(n)


def format_number(n: float | None, max_decimals: int = 2) -> str:
    """Thousands separators, up to `max_decimals` decimals, trailing zeros dropped."""
    if not _is_number(n):
        return MISSING
    text = f"{n:,.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_currency(n: float | None, symbol: str = "₱") -> str:
    if not _is_number(n):
        return MISSING
    if n < 0:
        return f"-{symbol}{format_number(abs(n))}"
    return f"{symbol}{format_number(n)}"


def format_ratio(n: float | None) -> str:
    if not _is_number(n):
        return MISSING
    return f"{n:.2f}"


def format_month_year(value: date | datetime | str | None) -> str | None:
    """'June 2025' for a date or an ISO date string; None when unparseable."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return value.strftime("%B %Y")
