from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..models.config_models import HeaderDetectionConfig
from ..models.extraction import ExtractionResult, FormatNotRecognized, OverviewExtraction
from ..models.grid import RawGrid, build_grid, grid_preview
from .header import locate_header_row
from .kpi import compute_kpis, cost_per_message_series
from .series import extract_labels, extract_series

"""Metric extractor: RawGrid -> labels, series and KPIs.

extract_overview() is a pure function of its inputs. It holds no state
between calls, so the same grid always yields an equal result.
"""

__all__ = [
    "extract_overview",
]


def extract_overview(
    grid: RawGrid | Sequence[Sequence[Any]],
    detection: HeaderDetectionConfig | None = None,
    preview_rows: int = 50,
) -> ExtractionResult:
    """Extract an overview-style sheet.

    Returns FormatNotRecognized (with the first `preview_rows` rows) when no
    header row is found. Raises InvalidGridError only when `grid` is not a
    grid at all.
    """
    detection = detection or HeaderDetectionConfig()
    rows = build_grid(grid)

    header_index = locate_header_row(
        rows,
        scan_rows=detection.scan_rows,
        min_date_cells=detection.min_date_cells,
        serial_range=detection.serial_range,
    )
    if header_index is None:
        return FormatNotRecognized(
            preview=grid_preview(rows, preview_rows),
            scanned_rows=min(len(rows), detection.scan_rows),
        )

    labels = extract_labels(rows, header_index)
    series = extract_series(rows, header_index, len(labels))
    report = compute_kpis(labels, series)

    spent_key = report.resolved_keys.get("spent")
    messages_key = report.resolved_keys.get("messages")
    cpm = cost_per_message_series(
        series[spent_key] if spent_key else None,
        series[messages_key] if messages_key else None,
    )
    # ラベル位置と揃える
    if len(cpm) < len(labels):
        cpm.extend([None] * (len(labels) - len(cpm)))

    return OverviewExtraction(
        header_index=header_index,
        labels=labels,
        series=series,
        kpis=report,
        cost_per_message_series=cpm,
    )
