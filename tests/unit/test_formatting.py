from __future__ import annotations

from datetime import date

import pytest

from adoverview.services.formatting import (
    MISSING,
    format_currency,
    format_month_year,
    format_number,
    format_ratio,
)


@pytest.mark.parametrize("value,expected", [
    (1234567.891, "1,234,567.89"),
    (1000.0, "1,000"),
    (0.5, "0.5"),
    (0, "0"),
    (None, MISSING),
    (float("nan"), MISSING),
])
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_format_currency():
    assert format_currency(1500.5) == "₱1,500.5"
    assert format_currency(-20, symbol="$") == "-$20"
    assert format_currency(None) == MISSING


def test_format_ratio():
    assert format_ratio(3) == "3.00"
    assert format_ratio(None) == MISSING


def test_format_month_year():
    assert format_month_year(date(2025, 6, 1)) == "June 2025"
    assert format_month_year("2025-06-01T00:00:00Z") == "June 2025"
    assert format_month_year("not a date") is None
    assert format_month_year(None) is None
