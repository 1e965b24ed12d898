from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the ad overview dashboard.

These are the typed, frozen views produced by adoverview.config.loader after
schema validation and default application. Every field has a default so that
a missing default config file still yields a usable DashboardConfig.
"""


@dataclass(frozen=True)
class HeaderDetectionConfig:
    """Header row heuristic parameters.

    A header row is the first row (within `scan_rows`) with at least
    `min_date_cells` date-like cells after column 0. Numbers count as dates
    when serial_min <= value < serial_max (Excel 1900 day serials).
    """
    scan_rows: int = 60
    min_date_cells: int = 3
    serial_min: float = 20000
    serial_max: float = 60000

    @property
    def serial_range(self) -> tuple[float, float]:
        return (self.serial_min, self.serial_max)


@dataclass(frozen=True)
class RecommendationConfig:
    """Thresholds for the rule-based recommendations."""
    roas_target: float = 3.0
    ctr_target: float = 1.0
    cost_per_message_rise: float = 1.2  # last > prev * rise で警告
    target_cac: float | None = None


@dataclass(frozen=True)
class UploadConfig:
    max_bytes: int = 16 * 1024 * 1024
    allowed_extensions: tuple[str, ...] = (".xlsx",)


@dataclass(frozen=True)
class DashboardConfig:
    """Root configuration object."""
    source_directory: str = "./data"
    output_directory: str = "./reports"
    preferred_sheet: str = "overview"
    preview_rows: int = 50
    currency_symbol: str = "₱"
    header_detection: HeaderDetectionConfig = field(default_factory=HeaderDetectionConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
