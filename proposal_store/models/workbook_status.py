from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

"""Status and validation report models for the workbook.

WorkbookStatus is a per-sheet inventory (exists / rows / columns / headers).
ValidationReport lists problems found when comparing the workbook against
the required sheet schemas: missing sheets are issues, header drift on an
existing sheet is a warning.
"""

__all__ = [
    "SheetStatus",
    "WorkbookStatus",
    "ValidationIssue",
    "ValidationReport",
]


@dataclass(frozen=True)
class SheetStatus:
    sheet_name: str
    exists: bool
    row_count: int = 0
    column_count: int = 0
    headers: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class WorkbookStatus:
    path: Path
    sheets: list[SheetStatus]

    @property
    def total_sheets(self) -> int:
        return len(self.sheets)

    @property
    def existing_sheets(self) -> int:
        return sum(1 for s in self.sheets if s.exists)

    @property
    def total_rows(self) -> int:
        return sum(s.row_count for s in self.sheets)


@dataclass(frozen=True)
class ValidationIssue:
    sheet_name: str
    kind: str  # "missing_sheet" | "header_drift" | "empty_header"
    message: str


@dataclass(frozen=True)
class ValidationReport:
    path: Path
    issues: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    checked_sheets: int = 0

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def status(self) -> str:
        if self.issues:
            return "invalid"
        return "valid_with_warnings" if self.warnings else "valid"
