from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from ..excel.reader import WorkbookReadError
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import DashboardConfig
from ..models.error_record import (
    ERROR_FORMAT_NOT_RECOGNIZED,
    ERROR_READ_FAILED,
    ERROR_RENDER_FAILED,
    ERROR_UNEXPECTED,
    ErrorRecord,
)
from ..models.extraction import OverviewExtraction
from ..models.processing_result import FileStat, FileStatus, RunResult
from .analysis import analyze_workbook
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

"""Batch orchestration for the CLI.

For every workbook: analyze, write `<stem>.json` (dashboard payload or the
unrecognized-format preview) and optionally `<stem>.pdf`, record errors in
the JSON Lines error log, and aggregate a RunResult for the SUMMARY line.
One workbook failing never stops the others.
"""

__all__ = [
    "ProcessingError",
    "collect_workbooks",
    "process_all",
    "process_workbook",
]


class ProcessingError(Exception):
    """Fatal error that prevents a run from starting (bad input paths)."""


def collect_workbooks(paths: Iterable[Path], allowed_extensions: Iterable[str] = (".xlsx",)) -> list[Path]:
    """Expand files/directories (non-recursive) into a sorted list of workbooks.

    Raises:
        ProcessingError: if a path does not exist
    """
    allowed = {e.lower() for e in allowed_extensions}
    found: list[Path] = []
    for path in paths:
        if not path.exists():
            raise ProcessingError(f"path not found: {path}")
        if path.is_dir():
            try:
                found.extend(
                    sorted(
                        p for p in path.iterdir()
                        # Excel のロックファイル (~$foo.xlsx) は除外
                        if p.is_file() and p.suffix.lower() in allowed and not p.name.startswith("~$")
                    )
                )
            except OSError as e:
                raise ProcessingError(f"error reading directory {path}: {e}") from e
        elif path.suffix.lower() in allowed:
            found.append(path)
        else:
            logger.warning(f"skipping non-workbook file: {path}")
    return found


def _write_json(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _process(
    file_path: Path,
    config: DashboardConfig,
    output_dir: Path,
    error_log: ErrorLogBuffer,
    *,
    pdf: bool = False,
    target_cac: float | None = None,
    notes: str | None = None,
    start: datetime,
) -> FileStat:
    def _elapsed() -> float:
        return (datetime.now(timezone.utc) - start).total_seconds()

    try:
        result = analyze_workbook(file_path, config, target_cac=target_cac)
    except WorkbookReadError as e:
        logger.error(f"{file_path.name}: {e}")
        error_log.append(ErrorRecord.create(file_path.name, "", ERROR_READ_FAILED, str(e)))
        return FileStat(file_path.name, FileStatus.FAILED, None, 0, 0, _elapsed(), error=str(e))

    json_path = output_dir / f"{file_path.stem}.json"
    _write_json(json_path, result.to_payload())

    ex = result.extraction
    if not isinstance(ex, OverviewExtraction):
        error_log.append(ErrorRecord.create(
            file_path.name, result.sheet_name, ERROR_FORMAT_NOT_RECOGNIZED,
            f"no month header row in first {ex.scanned_rows} rows",
        ))
        return FileStat(
            file_path.name, FileStatus.UNRECOGNIZED, result.sheet_name, 0, 0, _elapsed(),
            output_path=json_path, error="format not recognized",
        )

    pdf_path: Path | None = None
    if pdf:
        # 描画モジュールは PDF 指定時のみ読み込む (matplotlib の初期化が重い)
        from ..report.pdf import render_dashboard_pdf

        try:
            data = render_dashboard_pdf(
                result, source_name=file_path.name, notes=notes, currency=config.currency_symbol
            )
        except Exception as e:  # reportlab / matplotlib failures are per-file
            logger.error(f"{file_path.name}: pdf render failed: {e}")
            error_log.append(ErrorRecord.create(
                file_path.name, result.sheet_name, ERROR_RENDER_FAILED, str(e)
            ))
            return FileStat(
                file_path.name, FileStatus.FAILED, result.sheet_name, len(ex.labels), len(ex.series),
                _elapsed(), output_path=json_path, error=f"pdf render failed: {e}",
            )
        pdf_path = output_dir / f"{file_path.stem}.pdf"
        pdf_path.write_bytes(data)

    return FileStat(
        file_path.name, FileStatus.SUCCESS, result.sheet_name, len(ex.labels), len(ex.series),
        _elapsed(), output_path=json_path, pdf_path=pdf_path,
    )


def process_workbook(
    file_path: Path,
    config: DashboardConfig,
    output_dir: Path,
    error_log: ErrorLogBuffer,
    *,
    pdf: bool = False,
    target_cac: float | None = None,
    notes: str | None = None,
) -> FileStat:
    """Analyze one workbook and write its outputs; never raises."""
    start = datetime.now(timezone.utc)
    try:
        return _process(
            file_path, config, output_dir, error_log,
            pdf=pdf, target_cac=target_cac, notes=notes, start=start,
        )
    except Exception as e:  # 想定外のエラーもファイル単位で記録して続行
        logger.error(f"{file_path.name}: unexpected error: {e}")
        error_log.append(ErrorRecord.create(file_path.name, "", ERROR_UNEXPECTED, str(e)))
        return FileStat(
            file_path.name, FileStatus.FAILED, None, 0, 0,
            (datetime.now(timezone.utc) - start).total_seconds(), error=str(e),
        )


def process_all(
    config: DashboardConfig,
    paths: Iterable[Path] | None = None,
    *,
    output_dir: Path | None = None,
    pdf: bool = False,
    target_cac: float | None = None,
    notes: str | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Analyze every workbook under `paths` (default: config.source_directory).

    Raises:
        ProcessingError: for fatal errors that prevent processing
    """
    start_time = datetime.now(timezone.utc)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    paths = list(paths) if paths else [Path(config.source_directory)]
    output_dir = output_dir or Path(config.output_directory)

    workbooks = collect_workbooks(paths, config.upload.allowed_extensions)
    logger.info(f"workbooks found: {len(workbooks)}")

    stats: list[FileStat] = []
    try:
        with ProgressTracker(len(workbooks)) as progress:
            for wb in workbooks:
                progress.start_file(wb)
                stat = process_workbook(
                    wb, config, output_dir, error_log, pdf=pdf, target_cac=target_cac, notes=notes
                )
                stats.append(stat)
                logger.debug(f"{wb.name}: status={stat.status.value} sheet={stat.sheet_name}")
                progress.finish_file(stat.status)
    finally:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")
    counts = progress.counts

    end_time = datetime.now(timezone.utc)
    return RunResult(
        success_files=counts[FileStatus.SUCCESS],
        unrecognized_files=counts[FileStatus.UNRECOGNIZED],
        failed_files=counts[FileStatus.FAILED],
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=stats,
    )
