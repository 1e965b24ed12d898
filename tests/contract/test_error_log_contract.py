from __future__ import annotations

import json
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from adoverview.cli.__main__ import main as cli_main
from adoverview.models.config_models import DashboardConfig
from adoverview.services import orchestrator

"""Error log (JSON Lines) written by a CLI run."""

EXPECTED_KEYS = ["timestamp", "file", "sheet", "error_type", "message"]


def test_error_log_records_unrecognized_and_broken(
    temp_workdir: Path, unrecognized_workbook: Path, capsys
):
    (temp_workdir / "data" / "broken.xlsx").write_bytes(b"garbage")
    assert cli_main([]) == 2
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    records = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert all(list(r) == EXPECTED_KEYS for r in records)
    by_file = {r["file"]: r for r in records}
    assert by_file["broken.xlsx"]["error_type"] == "WORKBOOK_READ_ERROR"
    assert by_file["broken.xlsx"]["sheet"] == ""
    assert by_file["flat.xlsx"]["error_type"] == "FORMAT_NOT_RECOGNIZED"
    assert by_file["flat.xlsx"]["sheet"] == "Sheet1"
    assert "error log written:" in capsys.readouterr().out


def test_no_error_log_on_clean_run(temp_workdir: Path, overview_workbook: Path):
    assert cli_main([]) == 0
    assert list((temp_workdir / "logs").glob("errors-*.log")) == []


def test_unwritable_output_fails_one_file_and_run_continues(
    temp_workdir: Path, overview_workbook: Path, unrecognized_workbook: Path, capsys
):
    data = temp_workdir / "data"
    shutil.copy(overview_workbook, data / "b.xlsx")
    shutil.copy(overview_workbook, data / "c.xlsx")
    overview_workbook.unlink()
    # b.json cannot be written: the path is a directory
    (temp_workdir / "reports" / "b.json").mkdir(parents=True)

    assert cli_main([]) == 2
    assert (temp_workdir / "reports" / "c.json").is_file()
    assert (temp_workdir / "reports" / "flat.json").is_file()
    out = capsys.readouterr().out
    assert "SUMMARY files=3/3 success=1 unrecognized=1 failed=1 " in out

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    records = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    by_file = {r["file"]: r for r in records}
    assert set(by_file) == {"b.xlsx", "flat.xlsx"}
    assert by_file["b.xlsx"]["error_type"] == "UNEXPECTED_ERROR"
    assert by_file["flat.xlsx"]["error_type"] == "FORMAT_NOT_RECOGNIZED"


def test_error_log_flushed_when_run_is_interrupted(
    temp_workdir: Path, unrecognized_workbook: Path, overview_workbook: Path
):
    real = orchestrator.process_workbook
    calls = []

    def _interrupt_second(*args, **kwargs):
        calls.append(args[0])
        if len(calls) > 1:
            raise KeyboardInterrupt
        return real(*args, **kwargs)

    config = DashboardConfig()
    with patch.object(orchestrator, "process_workbook", side_effect=_interrupt_second):
        with pytest.raises(KeyboardInterrupt):
            orchestrator.process_all(config)
    # flat.xlsx sorts first and its record reaches the log
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    assert json.loads(logs[0].read_text(encoding="utf-8"))["file"] == "flat.xlsx"
