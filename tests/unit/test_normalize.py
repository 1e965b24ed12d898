from __future__ import annotations

from datetime import date, datetime

import pytest

from adoverview.models.cell import EMPTY, DateCell, NumberCell, TextCell, cell_from_value
from adoverview.services.normalize import (
    PLACEHOLDER,
    excel_serial_to_date,
    format_label,
    is_date_like,
    month_label,
    to_number,
)


@pytest.mark.parametrize("cell", [
    EMPTY,
    TextCell(""),
    TextCell("   "),
    TextCell("-"),
    TextCell("—"),
    TextCell("₱"),
    TextCell("$ ,"),
    TextCell("n/a"),
    DateCell(datetime(2025, 1, 1)),
    NumberCell(float("inf")),
])
def test_to_number_never_zero_for_blank_or_placeholder(cell):
    assert to_number(cell) is None


@pytest.mark.parametrize("text,expected", [
    ("1,234.50", 1234.5),
    ("₱1,000", 1000.0),
    ("$ 12", 12.0),
    (" -3.5 ", -3.5),
    ("0", 0.0),
])
def test_to_number_parses_currency_text(text, expected):
    assert to_number(TextCell(text)) == expected


def test_to_number_passes_numbers_through():
    assert to_number(NumberCell(42.0)) == 42.0
    assert to_number(NumberCell(0.0)) == 0.0


@pytest.mark.parametrize("text", ["1_000", "inf", "-Infinity", "nan", "0x10", "1e999", "12abc"])
def test_to_number_rejects_non_plain_numeric_text(text):
    assert to_number(TextCell(text)) is None


def test_to_number_accepts_exponent_and_bare_fraction():
    assert to_number(TextCell("1e3")) == 1000.0
    assert to_number(TextCell(".5")) == 0.5
    assert to_number(TextCell("+7")) == 7.0


def test_is_date_like_variants():
    assert is_date_like(DateCell(datetime(2025, 1, 1)))
    assert is_date_like(NumberCell(45658.0))  # 2025-01-01
    assert is_date_like(TextCell("Jan 2025"))
    assert is_date_like(TextCell("FY 1999 total"))
    assert is_date_like(TextCell("2025年1月"))
    assert is_date_like(TextCell("1月2025年"))
    assert not is_date_like(TextCell("Jan"))
    assert not is_date_like(TextCell("x2025x"))
    assert not is_date_like(NumberCell(1500.0))
    assert not is_date_like(EMPTY)


def test_is_date_like_serial_bounds():
    assert is_date_like(NumberCell(20000.0))
    assert not is_date_like(NumberCell(60000.0))
    assert not is_date_like(NumberCell(19999.0))
    assert is_date_like(NumberCell(150.0), serial_range=(100, 200))


def test_excel_serial_to_date():
    assert excel_serial_to_date(45658) == date(2025, 1, 1)
    assert excel_serial_to_date(45658.75) == date(2025, 1, 1)
    assert excel_serial_to_date(1) == date(1900, 1, 1)
    assert excel_serial_to_date(61) == date(1900, 3, 1)
    assert excel_serial_to_date(-1) is None
    assert excel_serial_to_date(float("nan")) is None
    assert excel_serial_to_date(3_000_000) is None


def test_month_label():
    assert month_label(date(2025, 1, 15)) == "Jan 25"
    assert month_label(date(2009, 12, 1)) == "Dec 09"


@pytest.mark.parametrize("cell,expected", [
    (DateCell(datetime(2025, 6, 1)), "Jun 25"),
    (NumberCell(45658.0), "Jan 25"),
    (TextCell("  Q1 2025 "), "Q1 2025"),
    (TextCell("   "), PLACEHOLDER),
    (EMPTY, PLACEHOLDER),
    (NumberCell(-5.0), "-5"),
    (NumberCell(-2.5), "-2.5"),
])
def test_format_label(cell, expected):
    assert format_label(cell) == expected


def test_cell_from_value_conversions():
    assert cell_from_value(None) is EMPTY
    assert cell_from_value(float("nan")) is EMPTY
    assert cell_from_value("abc") == TextCell("abc")
    assert cell_from_value(3) == NumberCell(3.0)
    assert cell_from_value(True) == TextCell("TRUE")
    assert cell_from_value(date(2025, 2, 1)) == DateCell(datetime(2025, 2, 1))
