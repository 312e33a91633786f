from __future__ import annotations

import asyncio
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..excel.accessor import SheetTableAccessor
from ..excel.errors import BackupNotFoundError, WorkbookIOError, WorkbookNotFoundError
from ..excel.workbook import read_workbook_grids

"""Workbook backups.

A backup is a byte copy of the workbook file named
``backup_YYYYMMDD-HHMMSS[_N].xlsx`` (UTC) inside the backup directory; its id
is the file stem. Backup and restore both hold the workbook's write lock so
they never interleave with a mutation.
"""

__all__ = [
    "BackupInfo",
    "BackupManager",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
_BACKUP_ID = re.compile(r"^backup_\d{8}-\d{6}(_\d+)?$")

logger = logging.getLogger(__name__)


def _install_copy(source: Path, target: Path) -> None:
    tmp_name: str | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.stem}_", suffix=".xlsx", dir=str(target.parent)
        )
        os.close(fd)
        shutil.copy2(source, tmp_name)
        read_workbook_grids(Path(tmp_name))
        os.replace(tmp_name, target)
        tmp_name = None
    except Exception as e:
        raise WorkbookIOError(f"failed to restore {source.name}: {e}") from e
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)


@dataclass(frozen=True)
class BackupInfo:
    backup_id: str
    path: Path
    size_bytes: int
    created: datetime


class BackupManager:
    def __init__(self, accessor: SheetTableAccessor, backup_directory: Path | str) -> None:
        self.accessor = accessor
        self.backup_directory = Path(backup_directory)

    def _info(self, path: Path) -> BackupInfo:
        stat = path.stat()
        return BackupInfo(
            backup_id=path.stem,
            path=path,
            size_bytes=stat.st_size,
            created=datetime.fromtimestamp(stat.st_mtime, UTC),
        )

    def _next_path(self) -> Path:
        stem = f"backup_{datetime.now(UTC).strftime(TIMESTAMP_FMT)}"
        candidate = self.backup_directory / f"{stem}.xlsx"
        n = 1
        while candidate.exists():
            candidate = self.backup_directory / f"{stem}_{n}.xlsx"
            n += 1
        return candidate

    async def create_backup(self) -> BackupInfo:
        source = self.accessor.path
        async with self.accessor.exclusive():
            if not source.is_file():
                raise WorkbookNotFoundError(f"workbook not found: {source}")
            target = self._next_path()
            try:
                self.backup_directory.mkdir(parents=True, exist_ok=True)
                await asyncio.to_thread(shutil.copy2, source, target)
            except OSError as e:
                raise WorkbookIOError(f"failed to create backup {target}: {e}") from e
        logger.info(f"backup created: {target}")
        return self._info(target)

    def list_backups(self) -> list[BackupInfo]:
        """Backups in the backup directory, newest first."""
        if not self.backup_directory.is_dir():
            return []
        found = [
            self._info(p)
            for p in self.backup_directory.glob("backup_*.xlsx")
            if _BACKUP_ID.match(p.stem)
        ]
        return sorted(found, key=lambda b: b.backup_id, reverse=True)

    def _resolve(self, backup_id: str) -> Path:
        if not _BACKUP_ID.match(backup_id):
            raise BackupNotFoundError(f"invalid backup id: {backup_id!r}")
        path = self.backup_directory / f"{backup_id}.xlsx"
        if not path.is_file():
            raise BackupNotFoundError(f"backup not found: {backup_id}")
        return path

    async def restore_backup(self, backup_id: str) -> BackupInfo:
        """Replace the workbook with a backup copy and reload it.

        The copy is staged next to the workbook and parsed before it is
        renamed into place, so an unreadable backup leaves the workbook as it
        was. Current data is overwritten; take a backup first if it matters.
        """
        source = self._resolve(backup_id)
        async with self.accessor.exclusive():
            await asyncio.to_thread(_install_copy, source, self.accessor.path)
            await asyncio.to_thread(self.accessor.store.load)
        logger.warning(f"workbook restored from backup {backup_id}, previous data replaced")
        return self._info(source)
