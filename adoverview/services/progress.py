from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import Any

from tqdm import tqdm

from ..models.processing_result import FileStatus

"""Workbook progress for CLI batch runs.

A tqdm bar is drawn only when stdout is a terminal; otherwise tqdm is
created disabled so redirected output carries just the labeled log lines.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One bar over the workbooks of a run, with per-status counts as postfix."""

    def __init__(self, total_files: int, *, description: str = "Analyzing workbooks") -> None:
        self.description = description
        self.counts: Counter[FileStatus] = Counter()
        self.enabled = is_tty_enabled()
        self._bar: Any = tqdm(
            total=total_files,
            desc=description,
            unit="wb",
            ncols=80,
            ascii=True,
            disable=not self.enabled,
        )

    @property
    def done(self) -> int:
        return sum(self.counts.values())

    def start_file(self, file_path: Path) -> None:
        self._bar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, status: FileStatus) -> None:
        self.counts[status] += 1
        self._bar.set_postfix(
            ok=self.counts[FileStatus.SUCCESS],
            unrec=self.counts[FileStatus.UNRECOGNIZED],
            ng=self.counts[FileStatus.FAILED],
        )
        self._bar.set_description(self.description)
        self._bar.update(1)

    def close(self) -> None:
        self._bar.close()

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
