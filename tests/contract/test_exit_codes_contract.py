from __future__ import annotations

import re
from pathlib import Path

from adoverview.cli.__main__ import main as cli_main

"""Exit code and SUMMARY line contract for the CLI."""

SUMMARY_RE = re.compile(
    r"^SUMMARY files=(\d+)/(\d+) success=(\d+) unrecognized=(\d+) failed=(\d+) elapsed_sec=[0-9.]+$",
    re.MULTILINE,
)


def _summary(out: str) -> tuple[int, ...]:
    m = SUMMARY_RE.search(out)
    assert m, out
    return tuple(int(g) for g in m.groups())


def test_exit_code_all_success(temp_workdir: Path, overview_workbook: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert _summary(out) == (1, 1, 1, 0, 0)


def test_exit_code_no_files(temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert _summary(out) == (0, 0, 0, 0, 0)


def test_exit_code_partial_when_unrecognized(
    temp_workdir: Path, overview_workbook: Path, unrecognized_workbook: Path, capsys
):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert _summary(out) == (2, 2, 1, 1, 0)


def test_exit_code_partial_when_unreadable(temp_workdir: Path, capsys):
    (temp_workdir / "data" / "broken.xlsx").write_bytes(b"garbage")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert _summary(out) == (1, 1, 0, 0, 1)
    assert "ERROR broken.xlsx:" in out


def test_exit_code_fatal_bad_config(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "dashboard.yml").write_text("bogus: 1\n", encoding="utf-8")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config:" in out
    assert "SUMMARY" not in out


def test_exit_code_fatal_missing_path(temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "nowhere")])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR processing: path not found:" in out
