# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from adoverview.logging.init import reset_logging

MONTHS = [datetime(2025, m, 1) for m in (1, 2, 3, 4)]

# Overview-style sheet: title rows, a month header, metric rows below it
OVERVIEW_ROWS: list[list[object]] = [
    ["Marketing Overview", None, None, None, None],
    ["Client: Sample Store", None, None, None, None],
    [None, None, None, None, None],
    ["Metric", *MONTHS],
    ["Total Ad Spent", 1000, 2000, None, 1000],
    ["No. of Messages", 100, 100, None, 50],
    ["Total Revenue", 5000, 4000, None, 3000],
    ["No. of Customers", 10, 20, None, 10],
    ["CTR", 1.5, 1.2, None, 1.1],
]


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("ADOVERVIEW_CONFIG", raising=False)
        yield p


@pytest.fixture()
def xlsx_factory():
    return make_workbook


@pytest.fixture()
def overview_rows() -> list[list[object]]:
    return [list(r) for r in OVERVIEW_ROWS]


@pytest.fixture()
def overview_workbook(temp_workdir: Path) -> Path:
    return make_workbook(
        temp_workdir / "data" / "overview.xlsx",
        {"Notes": [["ignore me"]], "Overview": OVERVIEW_ROWS},
    )


@pytest.fixture()
def unrecognized_workbook(temp_workdir: Path) -> Path:
    return make_workbook(
        temp_workdir / "data" / "flat.xlsx",
        {"Sheet1": [["name", "amount"], ["a", 1], ["b", 2]]},
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./reports
preferred_sheet: overview
recommendations:
  roas_target: 3.0
  target_cac: 80
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "dashboard.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()
