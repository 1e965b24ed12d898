from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from adoverview.config.loader import ConfigError, load_config
from adoverview.excel.reader import WorkbookReadError, load_sheet_grid
from adoverview.logging.error_log import ErrorLogBuffer
from adoverview.logging.init import log_summary, set_debug, setup_logging
from adoverview.models.grid import grid_preview
from adoverview.services.orchestrator import ProcessingError, collect_workbooks, process_all
from adoverview.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then config (YAML + schema)
- Collect .xlsx files from the given paths (or config.source_directory)
- Analyze each workbook, write <stem>.json (and <stem>.pdf with --pdf)
- Emit the SUMMARY line and exit 0 / 2 / 1
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv.

    ADOVERVIEW_CONFIG 等を .env で指定できるようにする。失敗時は警告のみで続行。
    """
    if not path.exists():
        return
    try:
        load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="adoverview", description="Overview-style ad report workbook -> dashboard JSON / PDF"
    )
    p.add_argument("paths", nargs="*", type=Path, help=".xlsx files or directories (default: source_directory)")
    p.add_argument("--config", type=Path, default=None, help="YAML config path")
    p.add_argument("--output-dir", type=Path, default=None, help="Where <stem>.json / <stem>.pdf are written")
    p.add_argument("--pdf", action="store_true", help="Also render a PDF report per workbook")
    p.add_argument("--target-cac", type=float, default=None, help="CAC target for recommendations")
    p.add_argument("--notes", default=None, help="Notes text appended to PDF reports")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print selected sheet & first rows then exit")
    return p.parse_args(argv)


def _inspect_data(cfg, paths: list[Path]) -> int:
    try:
        workbooks = collect_workbooks(paths, cfg.upload.allowed_extensions)
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not workbooks:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    for f in workbooks:
        print(f"FILE: {f.name}")
        try:
            sheet = load_sheet_grid(f, cfg.preferred_sheet)
        except WorkbookReadError as e:
            print(f"  read_error: {e}")
            continue
        print(f"  SHEET: {sheet.sheet_name} rows={sheet.row_count}")
        for i, row in enumerate(grid_preview(sheet.rows, 5)):
            print(f"    [{i}] {row}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # argv=[] (テストからの呼び出し) で sys.argv が混入しないよう None のときのみ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    paths = list(args.paths) or [Path(cfg.source_directory)]

    if args.inspect_data:
        return _inspect_data(cfg, paths)

    logger.info(f"Processing workbooks from: {', '.join(str(p) for p in paths)}")
    try:
        result = process_all(
            cfg,
            paths,
            output_dir=args.output_dir,
            pdf=args.pdf,
            target_cac=args.target_cac,
            notes=args.notes,
            error_log=ErrorLogBuffer(),
        )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    # log_summary が "SUMMARY " を付けるので本文だけ渡す
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0 or result.unrecognized_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
