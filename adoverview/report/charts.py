from __future__ import annotations

from io import BytesIO
from typing import Optional, Sequence

import matplotlib
matplotlib.use("Agg")  # headless
import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter

from ..models.extraction import OverviewExtraction

"""Dashboard charts rendered to PNG bytes.

Spend and revenue as filled lines, messages as bars, cost per message as a
line, and a spend-vs-revenue pie. None values leave gaps in lines and bars.
"""

__all__ = [
    "render_dashboard_charts",
]

_COLORS = {
    "spent": "#60A5FA",
    "revenue": "#A78BFA",
    "messages": "#34D399",
    "cpm": "#FBBF24",
}


def _apply_theme(ax) -> None:
    ax.set_facecolor("#f9fafb")
    ax.grid(True, axis="y", linestyle="--", alpha=0.35)
    ax.set_axisbelow(True)
    for spine in ("top", "right"):
        ax.spines[spine].set_visible(False)


def _fig_to_png(fig) -> bytes:
    buf = BytesIO()
    fig.tight_layout()
    fig.savefig(buf, format="png", dpi=140)
    plt.close(fig)
    return buf.getvalue()


def _values(data: Optional[Sequence[float | None]], n: int) -> list[float]:
    # None -> NaN (matplotlib は NaN を欠損として描画しない)
    vals = [float("nan") if v is None else float(v) for v in (data or [])][:n]
    vals.extend([float("nan")] * (n - len(vals)))
    return vals


def _no_data(ax) -> None:
    ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes, color="#6b7280")


def _line_chart(title: str, labels: list[str], data, color: str, currency: str | None) -> bytes:
    fig = plt.figure(figsize=(7.5, 3.2))
    ax = fig.add_subplot(111)
    _apply_theme(ax)
    x = list(range(len(labels)))
    if data is None or all(v is None for v in data):
        _no_data(ax)
    else:
        ys = _values(data, len(labels))
        ax.plot(x, ys, color=color, linewidth=2.5, marker="o", markersize=3)
        ax.fill_between(x, ys, color=color, alpha=0.2)
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=45 if len(labels) > 8 else 0, fontsize=8)
    if currency:
        ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _pos: f"{currency}{v:,.0f}"))
    ax.set_title(title)
    return _fig_to_png(fig)


def _bar_chart(title: str, labels: list[str], data, color: str) -> bytes:
    fig = plt.figure(figsize=(7.5, 3.2))
    ax = fig.add_subplot(111)
    _apply_theme(ax)
    x = list(range(len(labels)))
    if data is None or all(v is None for v in data):
        _no_data(ax)
    else:
        ax.bar(x, _values(data, len(labels)), color=color, alpha=0.6, edgecolor=color)
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=45 if len(labels) > 8 else 0, fontsize=8)
    ax.set_title(title)
    return _fig_to_png(fig)


def _pie_chart(title: str, spent: float | None, revenue: float | None) -> bytes:
    fig = plt.figure(figsize=(4.5, 3.6))
    ax = fig.add_subplot(111)
    values = [max(spent or 0.0, 0.0), max(revenue or 0.0, 0.0)]
    if sum(values) <= 0:
        _no_data(ax)
        ax.axis("off")
    else:
        ax.pie(
            values,
            labels=["Ad Spent", "Revenue"],
            colors=[_COLORS["spent"], _COLORS["revenue"]],
            autopct="%1.0f%%",
            wedgeprops={"linewidth": 1, "edgecolor": "white"},
        )
        ax.axis("equal")
    ax.set_title(title)
    return _fig_to_png(fig)


def _series_for(extraction: OverviewExtraction, metric: str):
    key = extraction.kpis.resolved_keys.get(metric)
    return extraction.series[key] if key else None


def render_dashboard_charts(extraction: OverviewExtraction, currency: str = "₱") -> list[dict]:
    """Render every dashboard chart as {"title": str, "png": bytes}."""
    labels = extraction.labels
    totals = extraction.kpis.totals
    return [
        dict(title="Ad Spent", png=_line_chart(
            "Ad Spent", labels, _series_for(extraction, "spent"), _COLORS["spent"], currency)),
        dict(title="Revenue", png=_line_chart(
            "Revenue", labels, _series_for(extraction, "revenue"), _COLORS["revenue"], currency)),
        dict(title="Messages", png=_bar_chart(
            "Messages", labels, _series_for(extraction, "messages"), _COLORS["messages"])),
        dict(title="Cost / Message", png=_line_chart(
            "Cost / Message", labels, extraction.cost_per_message_series, _COLORS["cpm"], currency)),
        dict(title="Ad Spent vs Revenue", png=_pie_chart(
            "Ad Spent vs Revenue", totals.spent, totals.revenue)),
    ]
