from __future__ import annotations

from collections.abc import Iterable
from io import BytesIO
from pathlib import Path
from typing import Union

import pandas as pd

from ..models.cell import Cell, EmptyCell, cell_from_value
from ..models.grid import RawGrid, SheetGrid

"""Workbook reader / sheet locator.

- The sheet named "overview" (case-insensitive) is preferred, else the first sheet
- Sheets are read raw (header=None) so the extractor sees every row
- Dates arrive as datetime values (openpyxl converts date-formatted cells)
- Trailing empty cells of each row are dropped, blank rows are kept
"""

__all__ = [
    "WorkbookReadError",
    "WorkbookSource",
    "dataframe_to_grid",
    "ensure_xlsx",
    "load_sheet_grid",
    "read_workbook",
    "select_sheet",
]

WorkbookSource = Union[Path, str, bytes, BytesIO]


class WorkbookReadError(Exception):
    """Raised when a workbook cannot be opened or holds no sheets."""


def ensure_xlsx(filename: str, allowed_extensions: Iterable[str] = (".xlsx",)) -> None:
    allowed = {ext.lower() for ext in allowed_extensions}
    if Path(filename or "").suffix.lower() not in allowed:
        raise WorkbookReadError("Only .xlsx files are allowed.")


def _open(source: WorkbookSource) -> pd.ExcelFile:
    if isinstance(source, bytes):
        source = BytesIO(source)
    try:
        return pd.ExcelFile(source, engine="openpyxl")
    except FileNotFoundError as e:
        raise WorkbookReadError(f"workbook not found: {source}") from e
    except Exception as e:  # zipfile.BadZipFile / openpyxl errors etc.
        raise WorkbookReadError(f"cannot read workbook: {e}") from e


def select_sheet(sheet_names: Iterable[str], preferred: str = "overview") -> str:
    """Pick the preferred sheet (case-insensitive exact match) or the first one."""
    names = [str(n) for n in sheet_names]
    if not names:
        raise WorkbookReadError("workbook has no sheets")
    target = preferred.lower()
    for name in names:
        if name.lower() == target:
            return name
    return names[0]


def read_workbook(
    source: WorkbookSource, target_sheets: Iterable[str] | None = None
) -> dict[str, pd.DataFrame]:
    """Read a workbook returning raw DataFrames keyed by sheet name (sheet order kept).

    Parameters
    ----------
    source: path or in-memory bytes of an .xlsx workbook
    target_sheets: restrict to these sheet names (None = all sheets)
    """
    xls = _open(source)
    wanted = set(target_sheets) if target_sheets is not None else None
    dfs: dict[str, pd.DataFrame] = {}
    with xls:
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            # ヘッダなしで生読み。"NA" 等の文字列を NaN にしない
            dfs[str(name)] = xls.parse(name, header=None, keep_default_na=False, na_values=[""])
    return dfs


def _trim_trailing_empty(cells: list[Cell]) -> tuple[Cell, ...]:
    end = len(cells)
    while end > 0 and isinstance(cells[end - 1], EmptyCell):
        end -= 1
    return tuple(cells[:end])


def dataframe_to_grid(df: pd.DataFrame) -> RawGrid:
    rows: list[tuple[Cell, ...]] = []
    for raw in df.itertuples(index=False, name=None):
        rows.append(_trim_trailing_empty([cell_from_value(v) for v in raw]))
    # 末尾の空行は除去 (シート範囲外の書式だけの行)
    while rows and not rows[-1]:
        rows.pop()
    return tuple(rows)


def load_sheet_grid(source: WorkbookSource, preferred_sheet: str = "overview") -> SheetGrid:
    """Open a workbook, choose the sheet to analyze and return it as a grid."""
    xls = _open(source)
    with xls:
        sheet_name = select_sheet(xls.sheet_names, preferred_sheet)
        df = xls.parse(sheet_name, header=None, keep_default_na=False, na_values=[""])
    return SheetGrid(sheet_name=sheet_name, rows=dataframe_to_grid(df))
