from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from ..models.sheet_data import SheetData
from ..models.sheet_schema import SheetSchema
from .errors import (
    ColumnNotFoundError,
    RowRangeError,
    SheetNotFoundError,
    ValidationError,
)
from .workbook import WorkbookDocument, WorkbookStore

"""Sheet table accessor: row-level CRUD over a WorkbookStore.

Indexing convention shared by update/delete/find: the header is row index 0,
so the first data row is index 1. append_row returns the spreadsheet row
number of the new row (header = row 1), which is the row index plus one.

All mutations run load-mutate-save while holding a single asyncio.Lock per
workbook file, so at most one mutation per workbook is in flight and
concurrent appends never overwrite each other. Blocking file I/O runs in a
worker thread.
"""

__all__ = [
    "NOT_FOUND",
    "ConnectionInfo",
    "SheetTableAccessor",
]

NOT_FOUND = -1

T = TypeVar("T")

logger = logging.getLogger(__name__)

# event loop -> resolved workbook path -> lock
_WRITE_LOCKS: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, asyncio.Lock]] = (
    weakref.WeakKeyDictionary()
)


def _write_lock_for(path: Path) -> asyncio.Lock:
    """Return (or create) the write lock for ``path`` on the running loop."""
    loop = asyncio.get_running_loop()
    locks = _WRITE_LOCKS.setdefault(loop, {})
    key = str(path.resolve())
    if key not in locks:
        locks[key] = asyncio.Lock()
    return locks[key]


@dataclass(frozen=True)
class ConnectionInfo:
    path: Path
    sheets: list[str]


class SheetTableAccessor:
    """Row-level access to the named sheets of one workbook."""

    def __init__(self, store: WorkbookStore) -> None:
        self.store = store

    @property
    def path(self) -> Path:
        return self.store.path

    # ------------------------------------------------------------------
    # loading / locking
    # ------------------------------------------------------------------
    async def _ensure_loaded(self, *, refresh: bool = False) -> WorkbookDocument:
        stale = refresh and await asyncio.to_thread(self.store.is_stale)
        if self.store.document is None or stale:
            if self.store.document is not None:
                logger.info(f"workbook changed on disk, reloading: {self.path}")
            return await asyncio.to_thread(self.store.load)
        return self.store.document

    @asynccontextmanager
    async def exclusive(self):
        """Hold the workbook's write lock for the duration of the block."""
        async with _write_lock_for(self.path):
            yield

    def _grid(self, document: WorkbookDocument, sheet_name: str) -> list[list[Any]]:
        grid = document.get(sheet_name)
        if grid is None:
            raise SheetNotFoundError(sheet_name)
        return grid

    def _schema(self, sheet_name: str, grid: list[list[Any]]) -> SheetSchema:
        if not grid or not grid[0]:
            raise ValidationError(f"sheet '{sheet_name}' has no header row")
        return SheetSchema.from_headers(sheet_name, grid[0])

    async def _mutate_sheet(self, sheet_name: str, fn: Callable[[list[list[Any]]], T]) -> T:
        """Apply ``fn`` to a copy of the sheet grid, install it and save.

        If the save fails the previous grid is put back so the in-memory
        document keeps matching the file.
        """
        async with self.exclusive():
            document = await self._ensure_loaded(refresh=True)
            previous = self._grid(document, sheet_name)
            grid = [list(r) for r in previous]
            result = fn(grid)
            document[sheet_name] = grid
            try:
                await asyncio.to_thread(self.store.save)
            except Exception:
                document[sheet_name] = previous
                raise
            return result

    async def apply_to_document(self, fn: Callable[[WorkbookDocument], T]) -> T:
        """Run ``fn`` against the loaded document under the write lock.

        Used for document-level changes such as adding sheets. ``fn`` must not
        await; it mutates the document in place and may return a value. The
        file is rewritten only when the document actually changed.
        """
        async with self.exclusive():
            document = await self._ensure_loaded(refresh=True)
            snapshot = {name: [list(r) for r in grid] for name, grid in document.items()}
            try:
                result = fn(document)
            except Exception:
                self.store.document = snapshot
                raise
            if document != snapshot:
                try:
                    await asyncio.to_thread(self.store.save)
                except Exception:
                    self.store.document = snapshot
                    raise
            return result

    async def rebuild(self, definitions: Mapping[str, Sequence[str]]) -> list[str]:
        """Discard the document and recreate it with header-only sheets."""
        async with self.exclusive():
            previous = self.store.document
            self.store.create(definitions)
            try:
                await asyncio.to_thread(self.store.save)
            except Exception:
                self.store.document = previous
                raise
        logger.warning(f"workbook rebuilt, previous data discarded: {self.path}")
        return self.store.sheet_names

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    async def get_sheet_names(self) -> list[str]:
        await self._ensure_loaded()
        return self.store.sheet_names

    async def check_connection(self) -> ConnectionInfo:
        await self._ensure_loaded()
        return ConnectionInfo(path=self.path, sheets=self.store.sheet_names)

    async def get_sheet_data(self, sheet_name: str) -> SheetData:
        document = await self._ensure_loaded()
        grid = self._grid(document, sheet_name)
        if not grid:
            return SheetData(sheet_name=sheet_name, headers=[], rows=[])
        return SheetData(
            sheet_name=sheet_name,
            headers=[str(h) for h in grid[0]],
            rows=[list(r) for r in grid[1:]],
        )

    async def find_row_index(self, sheet_name: str, column: str, value: Any) -> int:
        """Return the row index of the first row whose ``column`` equals ``value``.

        Returns NOT_FOUND when no row matches. Later duplicates are ignored.
        """
        data = await self.get_sheet_data(sheet_name)
        try:
            col = data.headers.index(column)
        except ValueError:
            raise ColumnNotFoundError(sheet_name, column) from None
        for i, row in enumerate(data.rows):
            if col < len(row) and row[col] == value:
                return i + 1
        return NOT_FOUND

    async def find_record(self, sheet_name: str, column: str, value: Any) -> tuple[int, dict[str, Any]] | None:
        index = await self.find_row_index(sheet_name, column, value)
        if index == NOT_FOUND:
            return None
        data = await self.get_sheet_data(sheet_name)
        return index, data.records()[index - 1]

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------
    async def append_row(self, sheet_name: str, values: Sequence[Any]) -> int:
        """Append one row and save; returns its spreadsheet row number."""
        return (await self.append_rows(sheet_name, [values]))[0]

    async def append_rows(self, sheet_name: str, rows: Sequence[Sequence[Any]]) -> list[int]:
        """Append several rows with a single save."""

        def _append(grid: list[list[Any]]) -> list[int]:
            schema = self._schema(sheet_name, grid)
            checked = [schema.validate_row(r) for r in rows]
            numbers = []
            for row in checked:
                grid.append(row)
                numbers.append(len(grid))
            return numbers

        numbers = await self._mutate_sheet(sheet_name, _append)
        logger.debug(f"appended {len(numbers)} row(s) to '{sheet_name}'")
        return numbers

    async def append_record(self, sheet_name: str, record: Mapping[str, Any]) -> int:
        data = await self.get_sheet_data(sheet_name)
        row = SheetSchema.from_headers(sheet_name, data.headers).to_row(record)
        return await self.append_row(sheet_name, row)

    def _check_index(self, sheet_name: str, grid: list[list[Any]], row_index: int) -> None:
        if isinstance(row_index, bool) or not isinstance(row_index, int):
            raise ValidationError(f"row index must be an integer, got {row_index!r}")
        if row_index < 1 or row_index >= len(grid):
            raise RowRangeError(sheet_name, row_index, len(grid))

    async def update_row(self, sheet_name: str, row_index: int, values: Sequence[Any]) -> None:
        """Overwrite the data row at ``row_index`` (first data row = 1) and save."""

        def _update(grid: list[list[Any]]) -> None:
            schema = self._schema(sheet_name, grid)
            self._check_index(sheet_name, grid, row_index)
            grid[row_index] = schema.validate_row(values)

        await self._mutate_sheet(sheet_name, _update)
        logger.debug(f"updated row {row_index} in '{sheet_name}'")

    async def update_record(self, sheet_name: str, row_index: int, record: Mapping[str, Any]) -> None:
        """Merge ``record`` into the existing row at ``row_index`` and save."""

        def _update(grid: list[list[Any]]) -> None:
            schema = self._schema(sheet_name, grid)
            self._check_index(sheet_name, grid, row_index)
            merged = schema.to_record(grid[row_index])
            merged.update(record)
            # unknown columns in ``record`` are rejected here
            grid[row_index] = schema.to_row(merged)

        await self._mutate_sheet(sheet_name, _update)

    async def delete_row(self, sheet_name: str, row_index: int) -> None:
        """Remove the data row at ``row_index``; later rows shift up by one."""

        def _delete(grid: list[list[Any]]) -> None:
            self._check_index(sheet_name, grid, row_index)
            del grid[row_index]

        await self._mutate_sheet(sheet_name, _delete)
        logger.debug(f"deleted row {row_index} from '{sheet_name}'")
