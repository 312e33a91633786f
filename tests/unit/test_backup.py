from __future__ import annotations

import asyncio

import pytest

from proposal_store.excel.accessor import SheetTableAccessor
from proposal_store.excel.errors import BackupNotFoundError, WorkbookIOError, WorkbookNotFoundError
from proposal_store.excel.workbook import WorkbookStore
from proposal_store.services.backup import BackupManager


def test_backup_and_restore(cost_accessor: SheetTableAccessor, temp_workdir):
    manager = BackupManager(cost_accessor, temp_workdir / "backups")
    row = ["ITEM-001", "Project Manager", 125000, "Personnel", "2024-01-01T00:00:00Z"]

    async def scenario():
        await cost_accessor.append_row("Cost", row)
        info = await manager.create_backup()
        await cost_accessor.delete_row("Cost", 1)
        await manager.restore_backup(info.backup_id)
        return info, await cost_accessor.get_sheet_data("Cost")

    info, data = asyncio.run(scenario())
    assert info.path.exists()
    assert info.backup_id.startswith("backup_")
    assert data.rows == [row]
    assert manager.list_backups()[0].backup_id == info.backup_id


def test_backups_listed_newest_first(cost_accessor: SheetTableAccessor, temp_workdir):
    manager = BackupManager(cost_accessor, temp_workdir / "backups")
    first = asyncio.run(manager.create_backup())
    second = asyncio.run(manager.create_backup())
    assert first.backup_id != second.backup_id
    assert [b.backup_id for b in manager.list_backups()] == sorted(
        [first.backup_id, second.backup_id], reverse=True
    )


def test_list_backups_without_directory(cost_accessor: SheetTableAccessor, temp_workdir):
    assert BackupManager(cost_accessor, temp_workdir / "none").list_backups() == []


@pytest.mark.parametrize("backup_id", ["backup_20240101-000000", "../proposal_management"])
def test_restore_unknown_backup(cost_accessor: SheetTableAccessor, temp_workdir, backup_id):
    manager = BackupManager(cost_accessor, temp_workdir / "backups")
    with pytest.raises(BackupNotFoundError):
        asyncio.run(manager.restore_backup(backup_id))


def test_backup_missing_workbook(workbook_path, temp_workdir):
    accessor = SheetTableAccessor(WorkbookStore(workbook_path))
    with pytest.raises(WorkbookNotFoundError):
        asyncio.run(BackupManager(accessor, temp_workdir / "backups").create_backup())


def test_restore_corrupt_backup_keeps_workbook(cost_accessor: SheetTableAccessor, workbook_path, temp_workdir):
    row = ["ITEM-001", "Project Manager", 125000, "Personnel", "2024-01-01T00:00:00Z"]
    asyncio.run(cost_accessor.append_row("Cost", row))
    before = workbook_path.read_bytes()

    backups = temp_workdir / "backups"
    backups.mkdir()
    (backups / "backup_20240101-000000.xlsx").write_bytes(b"truncated")

    manager = BackupManager(cost_accessor, backups)
    with pytest.raises(WorkbookIOError):
        asyncio.run(manager.restore_backup("backup_20240101-000000"))

    assert workbook_path.read_bytes() == before
    assert sorted(p.name for p in workbook_path.parent.iterdir()) == [workbook_path.name]
    assert asyncio.run(cost_accessor.get_sheet_data("Cost")).rows == [row]
