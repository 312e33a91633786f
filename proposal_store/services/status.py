from __future__ import annotations

from collections.abc import Mapping

from ..excel.accessor import SheetTableAccessor
from ..excel.errors import NotFoundError
from ..models.sheet_schema import REQUIRED_SHEETS, SheetSchema
from ..models.workbook_status import (
    SheetStatus,
    ValidationIssue,
    ValidationReport,
    WorkbookStatus,
)

"""Workbook status and validation reporting.

workbook_status() inventories the required sheets. validate_workbook()
compares the workbook to the expected schemas without changing anything:
missing sheets are issues, header drift is a warning.
"""

__all__ = [
    "workbook_status",
    "validate_workbook",
]


async def workbook_status(
    accessor: SheetTableAccessor, definitions: Mapping[str, SheetSchema] | None = None
) -> WorkbookStatus:
    wanted = definitions if definitions is not None else REQUIRED_SHEETS
    sheets: list[SheetStatus] = []
    for name in wanted:
        try:
            data = await accessor.get_sheet_data(name)
        except NotFoundError as e:
            sheets.append(SheetStatus(sheet_name=name, exists=False, error=str(e)))
            continue
        sheets.append(
            SheetStatus(
                sheet_name=name,
                exists=True,
                row_count=data.row_count,
                column_count=data.column_count,
                headers=data.headers,
            )
        )
    return WorkbookStatus(path=accessor.path, sheets=sheets)


async def validate_workbook(
    accessor: SheetTableAccessor, definitions: Mapping[str, SheetSchema] | None = None
) -> ValidationReport:
    wanted = definitions if definitions is not None else REQUIRED_SHEETS
    present = set(await accessor.get_sheet_names())
    issues: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    for name, schema in wanted.items():
        if name not in present:
            issues.append(ValidationIssue(name, "missing_sheet", f"sheet '{name}' is missing"))
            continue
        data = await accessor.get_sheet_data(name)
        if not data.headers:
            issues.append(ValidationIssue(name, "empty_header", f"sheet '{name}' has no header row"))
            continue
        expected = list(schema.columns)
        if data.headers != expected:
            missing = [c for c in expected if c not in data.headers]
            extra = [c for c in data.headers if c not in expected]
            if not missing and not extra:
                detail = "column order differs"
            else:
                detail = f"missing={missing} extra={extra}"
            warnings.append(
                ValidationIssue(name, "header_drift", f"sheet '{name}' header drift: {detail}")
            )
    return ValidationReport(
        path=accessor.path, issues=issues, warnings=warnings, checked_sheets=len(wanted)
    )
