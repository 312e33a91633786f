from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines failure log.

Each record describes one failed store operation. ``row`` is the row index
the operation targeted, or -1 for workbook-level failures where no row is
involved. The key set is fixed; see error_log_schema.json next to the config
schema.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured failure record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        workbook: Workbook file name
        operation: Store operation that failed (e.g. "append_row")
        sheet: Sheet name, empty when the failure is workbook-level
        row: Row index (first data row = 1). -1 when not row-specific
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Original error message
    """
    timestamp: str  # ISO8601 UTC
    workbook: str
    operation: str
    sheet: str
    row: int  # -1 when unknown
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        workbook: str, operation: str, sheet: str, row: int, error_type: str, message: str
    ) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            workbook=workbook,
            operation=operation,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line with exactly the dataclass keys."""
        return json.dumps(asdict(self), ensure_ascii=False)
