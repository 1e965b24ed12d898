from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""Per-workbook and per-run result models for batch (CLI) processing."""


class FileStatus(Enum):
    """Outcome of analyzing one workbook.

    - SUCCESS: overview-style sheet recognized, dashboard produced
    - UNRECOGNIZED: no month header row found (preview written instead)
    - FAILED: the workbook could not be read or the report not rendered
    """
    SUCCESS = "success"
    UNRECOGNIZED = "unrecognized"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    file_name: str
    status: FileStatus
    sheet_name: str | None
    months: int  # ラベル数
    metrics: int  # 抽出できたシリーズ数
    elapsed_seconds: float
    output_path: Path | None = None
    pdf_path: Path | None = None
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one CLI run (source of the SUMMARY line)."""
    success_files: int
    unrecognized_files: int
    failed_files: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.unrecognized_files + self.failed_files
