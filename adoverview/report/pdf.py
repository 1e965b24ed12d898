from __future__ import annotations

import logging
import threading
from datetime import date as _date
from io import BytesIO
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from matplotlib import font_manager
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..models.extraction import OverviewExtraction
from ..services.analysis import AnalysisResult
from ..services.formatting import format_currency, format_number, format_ratio
from .charts import render_dashboard_charts

logger = logging.getLogger(__name__)

"""PDF export of the dashboard (A4 portrait).

Layout: title block, KPI table, recommendations, charts (two per row),
monthly data table, optional notes. Built with reportlab platypus and
returned as bytes so callers decide where it goes (HTTP response / file).
"""

__all__ = [
    "render_dashboard_pdf",
]

_FONT = "Helvetica"
_FONT_BOLD = "Helvetica-Bold"
_fonts_ready = False
_fonts_lock = threading.Lock()

_LEVEL_COLORS = {
    "high": colors.HexColor("#e11d48"),
    "med": colors.HexColor("#d97706"),
    "low": colors.HexColor("#059669"),
}


# ---------------- fonts ----------------
def _ensure_fonts() -> None:
    """Register DejaVu Sans (bundled with matplotlib) so the peso sign renders.

    Falls back to the built-in Helvetica when the TTF cannot be located.
    """
    global _fonts_ready
    if _fonts_ready:
        return
    with _fonts_lock:
        if _fonts_ready:
            return
        _register_dejavu()
        # フォント名の確定後にフラグを立てる
        _fonts_ready = True


def _register_dejavu() -> None:
    global _FONT, _FONT_BOLD
    try:
        regular = font_manager.findfont("DejaVu Sans", fallback_to_default=False)
        bold = font_manager.findfont(
            font_manager.FontProperties(family="DejaVu Sans", weight="bold"), fallback_to_default=False
        )
        pdfmetrics.registerFont(TTFont("DejaVuSans", regular))
        pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", bold))
        # <b> inside Paragraph needs the family mapping
        pdfmetrics.registerFontFamily(
            "DejaVuSans",
            normal="DejaVuSans",
            bold="DejaVuSans-Bold",
            italic="DejaVuSans",
            boldItalic="DejaVuSans-Bold",
        )
    except (ValueError, OSError) as e:
        logger.debug(f"pdf: DejaVu Sans unavailable, using Helvetica: {e}")
        return
    _FONT, _FONT_BOLD = "DejaVuSans", "DejaVuSans-Bold"


def _styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("title", parent=base["Title"], fontName=_FONT_BOLD, fontSize=18),
        "meta": ParagraphStyle("meta", parent=base["Normal"], fontName=_FONT, fontSize=9,
                               textColor=colors.HexColor("#6b7280")),
        "h2": ParagraphStyle("h2", parent=base["Heading2"], fontName=_FONT_BOLD, fontSize=13),
        "body": ParagraphStyle("body", parent=base["Normal"], fontName=_FONT, fontSize=9, leading=12),
        "small": ParagraphStyle("small", parent=base["Normal"], fontName=_FONT, fontSize=8, leading=10),
    }


# ---------------- sections ----------------
def _kpi_rows(extraction: OverviewExtraction, currency: str) -> List[List[str]]:
    report = extraction.kpis
    t, a, k = report.totals, report.averages_per_month, report.kpis
    return [
        ["KPI", "Value", "Detail"],
        ["Ad Spent", format_currency(t.spent, currency), f"Avg/mo {format_currency(a.spent, currency)}"],
        ["Messages", format_number(t.messages), f"Avg/mo {format_number(a.messages)}"],
        ["Revenue", format_currency(t.revenue, currency), f"Avg/mo {format_currency(a.revenue, currency)}"],
        ["Cost/Message", format_currency(k.cost_per_message, currency), "Spent ÷ Messages"],
        ["ROAS", format_ratio(k.roas), "Revenue ÷ Spent"],
        ["CAC", format_currency(k.cac, currency),
         "CAC row average" if "cac" in report.resolved_keys and k.cac is not None else "Spent ÷ Customers"],
        ["Customers", format_number(t.customers), f"Avg/mo {format_number(a.customers)}"],
    ]


def _table(data: List[List[Any]], col_widths: List[float], font_size: float = 9) -> Table:
    tbl = Table(data, colWidths=col_widths, repeatRows=1)
    tbl.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), _FONT),
        ("FONTNAME", (0, 0), (-1, 0), _FONT_BOLD),
        ("FONTSIZE", (0, 0), (-1, -1), font_size),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#e5e7eb")),
        ("GRID", (0, 0), (-1, -1), 0.4, colors.HexColor("#d1d5db")),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f9fafb")]),
    ]))
    return tbl


def _data_table(extraction: OverviewExtraction, width: float, max_cols: int = 12) -> List[Table]:
    """Labels x series, split into chunks of `max_cols` months so it fits the page."""
    labels = extraction.labels
    tables: List[Table] = []
    if not labels:
        return tables
    for start in range(0, len(labels), max_cols):
        chunk = labels[start:start + max_cols]
        rows: List[List[str]] = [["Metric"] + chunk]
        for name, values in extraction.series.items():
            rows.append([name] + [format_number(v) for v in values[start:start + max_cols]])
        name_w = 38 * mm
        col_w = (width - name_w) / len(chunk)
        tables.append(_table(rows, [name_w] + [col_w] * len(chunk), font_size=7))
    return tables


def _chart_grid(charts: List[Dict[str, Any]], width: float) -> Table:
    cell_w = width / 2 - 3 * mm
    cells = []
    for chart in charts:
        reader = ImageReader(BytesIO(chart["png"]))
        iw, ih = reader.getSize()
        h = cell_w * ih / iw if iw else cell_w * 0.45
        cells.append(Image(BytesIO(chart["png"]), width=cell_w, height=h))
    rows = [cells[i:i + 2] for i in range(0, len(cells), 2)]
    if rows and len(rows[-1]) == 1:
        rows[-1].append("")
    grid = Table(rows, colWidths=[width / 2, width / 2])
    grid.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    return grid


# ---------------- main renderer ----------------
def render_dashboard_pdf(
    result: AnalysisResult,
    *,
    source_name: Optional[str] = None,
    notes: Optional[str] = None,
    currency: str = "₱",
    generated_on: Optional[_date] = None,
) -> bytes:
    """Render a recognized analysis as a PDF document (bytes).

    Raises ValueError for an unrecognized analysis; there is nothing to chart.
    """
    if not isinstance(result.extraction, OverviewExtraction):
        raise ValueError("cannot render PDF: sheet format not recognized")
    _ensure_fonts()
    extraction = result.extraction
    styles = _styles()
    generated_on = generated_on or _date.today()

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        topMargin=14 * mm,
        bottomMargin=14 * mm,
        title="Excel Dashboard",
    )
    width = doc.width

    story: List[Any] = [
        Paragraph("Marketing Overview Dashboard", styles["title"]),
        Paragraph(
            escape(
                f"Sheet: {result.sheet_name}"
                + (f" | File: {source_name}" if source_name else "")
                + f" | Months: {len(extraction.labels)} | Generated {generated_on.isoformat()}"
            ),
            styles["meta"],
        ),
        Spacer(1, 6 * mm),
        Paragraph("Key metrics", styles["h2"]),
        _table(_kpi_rows(extraction, currency), [45 * mm, 50 * mm, width - 95 * mm]),
        Spacer(1, 5 * mm),
        Paragraph("Recommendations", styles["h2"]),
    ]

    for rec in result.recommendations:
        color = _LEVEL_COLORS.get(rec.level, colors.black).hexval()[2:]
        story.append(Paragraph(
            f'<font color="#{color}"><b>[{escape(rec.level_label)}]</b></font> '
            f"<b>{escape(rec.title)}</b> - {escape(rec.why)}",
            styles["body"],
        ))
        for action in rec.actions:
            story.append(Paragraph(f"&bull; {escape(action)}", styles["small"]))
        story.append(Spacer(1, 2 * mm))

    story.append(PageBreak())
    story.append(Paragraph("Charts", styles["h2"]))
    story.append(_chart_grid(render_dashboard_charts(extraction, currency), width))

    story.append(Spacer(1, 5 * mm))
    story.append(Paragraph("Monthly data", styles["h2"]))
    for tbl in _data_table(extraction, width):
        story.append(tbl)
        story.append(Spacer(1, 3 * mm))

    if notes and notes.strip():
        story.append(Paragraph("Notes", styles["h2"]))
        for line in notes.strip().splitlines():
            story.append(Paragraph(escape(line) or "&nbsp;", styles["body"]))

    if not extraction.series:
        story.append(Paragraph("No metric rows found below the month header.", styles["body"]))

    doc.build(story)
    logger.debug(f"pdf: rendered {len(buf.getvalue())} bytes for sheet '{result.sheet_name}'")
    return buf.getvalue()
