"""Domain models for the proposal workbook store.

Sheet schemas and the required sheet set, sheet snapshots, status/validation
reports and the failure log record.
"""

from .error_record import ErrorRecord
from .sheet_data import SheetData
from .sheet_schema import PROPOSAL_HEADERS, REQUIRED_SHEETS, SheetSchema
from .workbook_status import SheetStatus, ValidationIssue, ValidationReport, WorkbookStatus

__all__ = [
    # Schema models
    "SheetSchema",
    "PROPOSAL_HEADERS",
    "REQUIRED_SHEETS",
    # Data / reporting models
    "SheetData",
    "SheetStatus",
    "WorkbookStatus",
    "ValidationIssue",
    "ValidationReport",
    "ErrorRecord",
]
