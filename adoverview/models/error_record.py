from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

"""ErrorRecord model for the JSON Lines error log.

One record per workbook that could not be turned into a dashboard: either
the format was not recognized or reading/rendering failed. The key set is
fixed; consumers may rely on it.
"""

__all__ = [
    "ERROR_FORMAT_NOT_RECOGNIZED",
    "ERROR_READ_FAILED",
    "ERROR_RENDER_FAILED",
    "ERROR_UNEXPECTED",
    "ErrorRecord",
]

ERROR_FORMAT_NOT_RECOGNIZED = "FORMAT_NOT_RECOGNIZED"
ERROR_READ_FAILED = "WORKBOOK_READ_ERROR"
ERROR_RENDER_FAILED = "RENDER_ERROR"
ERROR_UNEXPECTED = "UNEXPECTED_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: workbook filename
        sheet: analyzed sheet name ('' when the workbook could not be opened)
        error_type: UPPER_SNAKE_CASE classification
        message: human readable description
    """
    timestamp: str
    file: str
    sheet: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
