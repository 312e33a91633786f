from __future__ import annotations

import asyncio

from proposal_store.excel.accessor import SheetTableAccessor
from proposal_store.excel.workbook import WorkbookStore

COST_HEADERS = ["itemid", "itemname", "unitcost", "category", "created_date"]


def test_create_append_reload_preserves_insertion_order(workbook_path):
    rows = [
        ["ITEM-001", "Project Manager (per day)", 125000, "Personnel", "2024-01-01T00:00:00Z"],
        ["ITEM-002", "Stationery Package", 12500.5, "Materials", "2024-01-02T00:00:00Z"],
        ["ITEM-003", "NA", 0, "", "2024-01-03T00:00:00Z"],
    ]
    store = WorkbookStore(workbook_path)
    store.create({"Cost": COST_HEADERS, "Workplan": ["year", "state"]})
    store.save()

    async def write():
        accessor = SheetTableAccessor(store)
        for row in rows:
            await accessor.append_row("Cost", row)

    asyncio.run(write())

    fresh = SheetTableAccessor(WorkbookStore(workbook_path))
    data = asyncio.run(fresh.get_sheet_data("Cost"))
    assert data.headers == COST_HEADERS
    assert data.rows == rows
    assert asyncio.run(fresh.get_sheet_data("Workplan")).rows == []


def test_delete_and_update_survive_reload(workbook_path):
    store = WorkbookStore(workbook_path)
    store.create({"Cost": COST_HEADERS})
    store.save()
    accessor = SheetTableAccessor(store)

    async def write():
        await accessor.append_rows(
            "Cost",
            [[f"ITEM-{n:03d}", f"Item {n}", n, "Venue", "2024-01-01T00:00:00Z"] for n in range(1, 5)],
        )
        await accessor.delete_row("Cost", 1)
        await accessor.update_row("Cost", 3, ["ITEM-404", "Replaced", 4, "Venue", "2024-01-01T00:00:00Z"])

    asyncio.run(write())
    data = asyncio.run(SheetTableAccessor(WorkbookStore(workbook_path)).get_sheet_data("Cost"))
    assert [r[0] for r in data.rows] == ["ITEM-002", "ITEM-003", "ITEM-404"]
