from __future__ import annotations

import asyncio

from proposal_store.excel.accessor import SheetTableAccessor
from proposal_store.excel.workbook import WorkbookStore
from proposal_store.models.sheet_schema import REQUIRED_SHEETS
from proposal_store.services.status import validate_workbook, workbook_status
from proposal_store.services.summary import render_summary_line


def _accessor(workbook_path, definitions) -> SheetTableAccessor:
    store = WorkbookStore(workbook_path)
    store.create(definitions)
    store.save()
    return SheetTableAccessor(store)


def test_workbook_status_counts_rows_and_missing_sheets(workbook_path):
    definitions = {n: list(s.columns) for n, s in REQUIRED_SHEETS.items() if n != "Budget"}
    accessor = _accessor(workbook_path, definitions)
    asyncio.run(accessor.append_record("Users", {"username": "admin"}))

    status = asyncio.run(workbook_status(accessor))
    by_name = {s.sheet_name: s for s in status.sheets}
    assert by_name["Users"].row_count == 1
    assert by_name["Users"].column_count == 7
    assert not by_name["Budget"].exists
    assert "Budget" in by_name["Budget"].error
    assert status.existing_sheets == 5
    assert status.total_rows == 1

    assert render_summary_line(status) == (
        "SUMMARY sheets=5/6 rows=1 missing=Budget workbook=proposal_management.xlsx"
    )


def test_validate_workbook_clean(full_accessor: SheetTableAccessor):
    report = asyncio.run(validate_workbook(full_accessor))
    assert report.valid
    assert report.status == "valid"
    assert report.checked_sheets == 6


def test_validate_workbook_reports_missing_and_drift(workbook_path):
    definitions = {n: list(s.columns) for n, s in REQUIRED_SHEETS.items() if n != "Workplan"}
    definitions["Cost"] = ["itemid", "itemname", "price", "category", "created_date"]
    definitions["Users"] = list(reversed(REQUIRED_SHEETS["Users"].columns))
    accessor = _accessor(workbook_path, definitions)

    report = asyncio.run(validate_workbook(accessor))
    assert not report.valid
    assert report.status == "invalid"
    assert [(i.sheet_name, i.kind) for i in report.issues] == [("Workplan", "missing_sheet")]
    warnings = {w.sheet_name: w.message for w in report.warnings}
    assert set(warnings) == {"Users", "Cost"}
    assert "column order differs" in warnings["Users"]
    assert "missing=['unitcost'] extra=['price']" in warnings["Cost"]
