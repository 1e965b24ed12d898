from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

"""Extraction result models.

The metric extractor never raises for missing or malformed data. It returns
one of two results:

- OverviewExtraction: header found; labels, series and derived KPIs
- FormatNotRecognized: no header row within the scan window; carries a
  bounded raw preview for diagnostic display

All models are frozen and rebuilt on every request.
"""

__all__ = [
    "Averages",
    "ExtractionResult",
    "FormatNotRecognized",
    "KpiReport",
    "Kpis",
    "OverviewExtraction",
    "Series",
    "Totals",
]

Series = dict[str, list[Union[float, None]]]


@dataclass(frozen=True)
class Totals:
    """Sum of non-null monthly values per canonical metric (None = not present)."""
    spent: float | None = None
    messages: float | None = None
    revenue: float | None = None
    customers: float | None = None

    def to_dict(self) -> dict[str, float | None]:
        return {
            "spent": self.spent,
            "messages": self.messages,
            "revenue": self.revenue,
            "customers": self.customers,
        }


@dataclass(frozen=True)
class Averages:
    """Totals divided by the number of months that actually reported data."""
    spent: float | None = None
    messages: float | None = None
    revenue: float | None = None
    customers: float | None = None

    def to_dict(self) -> dict[str, float | None]:
        return {
            "spent": self.spent,
            "messages": self.messages,
            "revenue": self.revenue,
            "customers": self.customers,
        }


@dataclass(frozen=True)
class Kpis:
    cost_per_message: float | None = None
    roas: float | None = None
    cac: float | None = None

    def to_dict(self) -> dict[str, float | None]:
        return {
            "costPerMessage": self.cost_per_message,
            "roas": self.roas,
            "cac": self.cac,
        }


@dataclass(frozen=True)
class KpiReport:
    totals: Totals
    averages_per_month: Averages
    kpis: Kpis
    # canonical metric -> resolved series key (absent metrics omitted)
    resolved_keys: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totals": self.totals.to_dict(),
            "averagesPerMonth": self.averages_per_month.to_dict(),
            "kpis": self.kpis.to_dict(),
        }


@dataclass(frozen=True)
class OverviewExtraction:
    header_index: int
    labels: list[str]
    series: Series
    kpis: KpiReport
    cost_per_message_series: list[float | None]

    recognized = True


@dataclass(frozen=True)
class FormatNotRecognized:
    preview: list[list[Any]]
    scanned_rows: int

    recognized = False


ExtractionResult = Union[OverviewExtraction, FormatNotRecognized]
