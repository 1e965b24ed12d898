from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..excel.reader import WorkbookSource, load_sheet_grid
from ..models.config_models import DashboardConfig
from ..models.extraction import ExtractionResult, OverviewExtraction
from ..models.grid import SheetGrid, grid_preview
from .extractor import extract_overview
from .recommendations import Recommendation, build_recommendations

logger = logging.getLogger(__name__)

"""Analysis service: workbook -> dashboard payload.

Combines sheet selection, metric extraction and recommendations into the
structure served by the HTTP endpoint and written by the CLI:

    {mode, sheetName, labels, series, kpis, costPerMessageSeries,
     recommendations, tablePreview}

or, when the sheet layout is not recognized:

    {error, tablePreview}
"""

__all__ = [
    "FORMAT_NOT_RECOGNIZED_MESSAGE",
    "MODE_OVERVIEW",
    "AnalysisResult",
    "analyze_grid",
    "analyze_workbook",
]

MODE_OVERVIEW = "overview-style"
FORMAT_NOT_RECOGNIZED_MESSAGE = (
    "Could not detect Overview-style format. Please use the provided sample format."
)


@dataclass(frozen=True)
class AnalysisResult:
    sheet_name: str
    extraction: ExtractionResult
    table_preview: list[list[Any]]
    recommendations: list[Recommendation] = field(default_factory=list)

    @property
    def recognized(self) -> bool:
        return isinstance(self.extraction, OverviewExtraction)

    def series_for(self, metric: str) -> list[float | None] | None:
        """Series of a canonical metric (e.g. 'spent', 'ctr'), or None when absent."""
        if not isinstance(self.extraction, OverviewExtraction):
            return None
        key = self.extraction.kpis.resolved_keys.get(metric)
        return self.extraction.series[key] if key else None

    def to_payload(self) -> dict[str, Any]:
        preview = {"sheetName": self.sheet_name, "rows": self.table_preview}
        ex = self.extraction
        if not isinstance(ex, OverviewExtraction):
            return {"error": FORMAT_NOT_RECOGNIZED_MESSAGE, "tablePreview": preview}
        return {
            "mode": MODE_OVERVIEW,
            "sheetName": self.sheet_name,
            "labels": list(ex.labels),
            "series": {k: list(v) for k, v in ex.series.items()},
            "kpis": ex.kpis.to_dict(),
            "costPerMessageSeries": list(ex.cost_per_message_series),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "tablePreview": preview,
        }


def analyze_grid(
    sheet: SheetGrid, config: DashboardConfig | None = None, target_cac: float | None = None
) -> AnalysisResult:
    config = config or DashboardConfig()
    extraction = extract_overview(
        sheet.rows, detection=config.header_detection, preview_rows=config.preview_rows
    )
    preview = grid_preview(sheet.rows, config.preview_rows)

    if not isinstance(extraction, OverviewExtraction):
        logger.warning(
            f"sheet '{sheet.sheet_name}': no month header row in first "
            f"{extraction.scanned_rows} rows"
        )
        return AnalysisResult(sheet_name=sheet.sheet_name, extraction=extraction, table_preview=preview)

    resolved = extraction.kpis.resolved_keys
    series = extraction.series
    recs = build_recommendations(
        extraction.kpis.kpis,
        ctr=series.get(resolved["ctr"]) if "ctr" in resolved else None,
        cost_per_message_sheet=(
            series.get(resolved["cost_per_message"]) if "cost_per_message" in resolved else None
        ),
        cost_per_message_computed=extraction.cost_per_message_series,
        target_cac=target_cac,
        rules=config.recommendations,
        currency_symbol=config.currency_symbol,
    )
    missing = [m for m in ("spent", "messages", "revenue", "customers") if m not in resolved]
    if missing:
        logger.info(f"sheet '{sheet.sheet_name}': metrics not present: {', '.join(missing)}")
    logger.info(
        f"sheet '{sheet.sheet_name}': header_row={extraction.header_index} "
        f"months={len(extraction.labels)} metrics={len(series)}"
    )
    return AnalysisResult(
        sheet_name=sheet.sheet_name,
        extraction=extraction,
        table_preview=preview,
        recommendations=recs,
    )


def analyze_workbook(
    source: WorkbookSource, config: DashboardConfig | None = None, target_cac: float | None = None
) -> AnalysisResult:
    """Read a workbook, pick its overview sheet and analyze it.

    Raises WorkbookReadError when the workbook cannot be opened.
    """
    config = config or DashboardConfig()
    sheet = load_sheet_grid(source, config.preferred_sheet)
    logger.debug(f"selected sheet '{sheet.sheet_name}' rows={sheet.row_count}")
    return analyze_grid(sheet, config, target_cac=target_cac)
