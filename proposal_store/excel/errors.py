from __future__ import annotations

"""Error taxonomy for the workbook data store.

Every exception raised by the store layer derives from ``StoreError`` and
carries an UPPER_SNAKE ``error_type`` used when failures are written to the
JSON Lines error log.

- NotFound: missing workbook file, sheet, column or backup
- IO: the workbook could not be read or written
- Range: row index outside the data rows of a sheet
- Validation: caller supplied a row/record that does not fit the sheet
"""

__all__ = [
    "StoreError",
    "NotFoundError",
    "WorkbookNotFoundError",
    "SheetNotFoundError",
    "ColumnNotFoundError",
    "BackupNotFoundError",
    "WorkbookIOError",
    "RowRangeError",
    "ValidationError",
    "HeaderDriftError",
]


class StoreError(Exception):
    """Base class for all workbook store failures."""

    error_type = "STORE_ERROR"


class NotFoundError(StoreError):
    error_type = "NOT_FOUND"


class WorkbookNotFoundError(NotFoundError):
    error_type = "WORKBOOK_NOT_FOUND"


class SheetNotFoundError(NotFoundError):
    error_type = "SHEET_NOT_FOUND"

    def __init__(self, sheet_name: str) -> None:
        super().__init__(f"Sheet '{sheet_name}' not found")
        self.sheet_name = sheet_name


class ColumnNotFoundError(NotFoundError):
    error_type = "COLUMN_NOT_FOUND"

    def __init__(self, sheet_name: str, column: str) -> None:
        super().__init__(f"Column '{column}' not found in sheet '{sheet_name}'")
        self.sheet_name = sheet_name
        self.column = column


class BackupNotFoundError(NotFoundError):
    error_type = "BACKUP_NOT_FOUND"


class WorkbookIOError(StoreError):
    error_type = "IO_FAILURE"


class RowRangeError(StoreError, IndexError):
    error_type = "ROW_OUT_OF_RANGE"

    def __init__(self, sheet_name: str, row_index: int, row_count: int) -> None:
        super().__init__(
            f"Invalid row index {row_index} for sheet '{sheet_name}' (valid: 1..{row_count - 1})"
        )
        self.sheet_name = sheet_name
        self.row_index = row_index


class ValidationError(StoreError, ValueError):
    error_type = "VALIDATION_ERROR"


class HeaderDriftError(ValidationError):
    """Raised when an existing sheet's header differs from the expected columns."""

    error_type = "HEADER_DRIFT"

    def __init__(self, sheet_name: str, expected: list[str], actual: list[str]) -> None:
        missing = [c for c in expected if c not in actual]
        extra = [c for c in actual if c not in expected]
        super().__init__(
            f"sheet '{sheet_name}' header drift: missing={missing} extra={extra}"
        )
        self.sheet_name = sheet_name
        self.expected = expected
        self.actual = actual
