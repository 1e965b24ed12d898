from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from ..models.extraction import Averages, KpiReport, Kpis, Series, Totals

"""KPI derivation from extracted series.

Metric rows are found through an ordered alias table rather than fixed row
names, since exported sheets label the same metric differently
("Total Ad Spent", "Amount spent", ...). A metric that cannot be resolved is
not an error: its totals, averages and dependent KPIs are None.
"""

__all__ = [
    "METRIC_ALIASES",
    "compute_kpis",
    "cost_per_message_series",
    "finite_values",
    "resolve_metric_key",
    "resolve_metric_keys",
    "safe_divide",
]

METRIC_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("spent", ("Total Ad Spent", "Amount spent", "Ad Spent")),
    ("messages", ("No. of Messages", "Messages")),
    ("revenue", ("Total Revenue", "Revenue")),
    ("customers", ("No. of Customers", "Customers")),
    ("cac", ("CAC",)),
    # charts / recommendations only
    ("ctr", ("CTR", "Link CTR", "CTR (Link)")),
    ("cost_per_message", ("Cost Per Message", "Cost/Message", "Cost per message")),
)

_TOTAL_METRICS = ("spent", "messages", "revenue", "customers")


def resolve_metric_key(keys: Iterable[str], aliases: Sequence[str]) -> str | None:
    """Find the series key for a metric.

    Exact case-insensitive match over every alias wins over a substring
    match; within each pass aliases are tried in order and the first key (in
    series order) that matches is returned.
    """
    keys = list(keys)
    lowered = [(k, k.lower()) for k in keys]
    for alias in aliases:
        target = alias.lower()
        for key, low in lowered:
            if low == target:
                return key
    for alias in aliases:
        target = alias.lower()
        for key, low in lowered:
            if target in low:
                return key
    return None


def resolve_metric_keys(series: Series) -> dict[str, str]:
    resolved: dict[str, str] = {}
    for metric, aliases in METRIC_ALIASES:
        key = resolve_metric_key(series.keys(), aliases)
        if key is not None:
            resolved[metric] = key
    return resolved


def finite_values(values: Iterable[float | None] | None) -> list[float]:
    return [v for v in (values or []) if v is not None and math.isfinite(v)]


def safe_divide(a: float | None, b: float | None) -> float | None:
    """a / b, or None when either side is missing/non-finite or b is zero."""
    if a is None or b is None:
        return None
    if not math.isfinite(a) or not math.isfinite(b) or b == 0:
        return None
    result = a / b
    return result if math.isfinite(result) else None


def _mean_positive(values: Iterable[float | None]) -> float | None:
    positive = [v for v in finite_values(values) if v > 0]
    if not positive:
        return None
    return sum(positive) / len(positive)


def cost_per_message_series(
    spent: Sequence[float | None] | None, messages: Sequence[float | None] | None
) -> list[float | None]:
    """Per-month spend / messages, None where either side is unusable."""
    spent = list(spent or [])
    messages = list(messages or [])
    out: list[float | None] = []
    for i in range(max(len(spent), len(messages))):
        s = spent[i] if i < len(spent) else None
        m = messages[i] if i < len(messages) else None
        out.append(safe_divide(s, m))
    return out


def compute_kpis(labels: Sequence[str], series: Series) -> KpiReport:
    """Totals, per-month averages and ratio KPIs for one extraction."""
    resolved = resolve_metric_keys(series)

    totals: dict[str, float | None] = {}
    averages: dict[str, float | None] = {}
    for metric in _TOTAL_METRICS:
        key = resolved.get(metric)
        if key is None:
            totals[metric] = None
            averages[metric] = None
            continue
        values = finite_values(series[key])
        total = float(sum(values))
        totals[metric] = total
        # 実際にデータがある月数で割る (ラベル数ではない)
        averages[metric] = total / max(1, len(values))

    cac = None
    if "cac" in resolved:
        cac = _mean_positive(series[resolved["cac"]])
    if cac is None:
        cac = safe_divide(totals["spent"], totals["customers"])

    return KpiReport(
        totals=Totals(**totals),
        averages_per_month=Averages(**averages),
        kpis=Kpis(
            cost_per_message=safe_divide(totals["spent"], totals["messages"]),
            roas=safe_divide(totals["revenue"], totals["spent"]),
            cac=cac,
        ),
        resolved_keys=resolved,
    )
