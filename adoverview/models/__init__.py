"""Domain models for the ad overview dashboard.

Cells and grids (input), extraction results and KPI reports (core output),
configuration, and batch processing results.
"""

from .cell import Cell, DateCell, EmptyCell, NumberCell, TextCell
from .config_models import DashboardConfig, HeaderDetectionConfig, RecommendationConfig, UploadConfig
from .extraction import FormatNotRecognized, KpiReport, OverviewExtraction
from .grid import InvalidGridError, RawGrid, SheetGrid
from .processing_result import FileStat, FileStatus, RunResult

__all__ = [
    # Cell variants
    "Cell",
    "DateCell",
    "EmptyCell",
    "NumberCell",
    "TextCell",
    # Grid
    "InvalidGridError",
    "RawGrid",
    "SheetGrid",
    # Extraction
    "FormatNotRecognized",
    "KpiReport",
    "OverviewExtraction",
    # Configuration models
    "DashboardConfig",
    "HeaderDetectionConfig",
    "RecommendationConfig",
    "UploadConfig",
    # Processing models
    "FileStat",
    "FileStatus",
    "RunResult",
]
