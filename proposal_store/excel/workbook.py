from __future__ import annotations

import hashlib
import logging
import math
import os
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.sheet_schema import validate_sheet_name
from .errors import ValidationError, WorkbookIOError, WorkbookNotFoundError

"""Workbook store: whole-document load/save of the .xlsx data file.

The document is held in memory as an ordered mapping of sheet name to cell
grid (list of rows, row 0 being the header). There is no partial write: every
save serializes all sheets. Saves go to a temporary file in the target
directory that is then renamed over the workbook.

Grid I/O goes through pandas with the openpyxl engine. Cells are read with
pandas' default NA conversion disabled so strings like "NA" or "null" stay
data, and empty cells come back as "".
"""

__all__ = [
    "WorkbookDocument",
    "WorkbookStore",
    "read_workbook_grids",
    "write_workbook_grids",
]

ENGINE = "openpyxl"

WorkbookDocument = dict[str, list[list[Any]]]

logger = logging.getLogger(__name__)


def _clean_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    # numpy scalars -> plain python values
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (AttributeError, ValueError):
            return value
    return value


def read_workbook_grids(path: Path) -> WorkbookDocument:
    """Read every sheet of ``path`` as a raw cell grid (no header handling)."""
    document: WorkbookDocument = {}
    with pd.ExcelFile(path, engine=ENGINE) as xls:
        for name in xls.sheet_names:
            df = xls.parse(name, header=None, keep_default_na=False, na_values=[])
            document[str(name)] = [
                [_clean_cell(v) for v in raw] for raw in df.astype(object).values.tolist()
            ]
    return document


def write_workbook_grids(path: Path, document: Mapping[str, Sequence[Sequence[Any]]]) -> None:
    with pd.ExcelWriter(path, engine=ENGINE) as writer:
        for name, grid in document.items():
            df = pd.DataFrame([list(r) for r in grid], dtype=object)
            df.to_excel(writer, sheet_name=name, header=False, index=False)
            # openpyxl turns any "=..." string into a formula; cells hold data only
            for row in writer.sheets[name].iter_rows():
                for cell in row:
                    if isinstance(cell.value, str) and cell.value.startswith("="):
                        cell.data_type = "s"


class WorkbookStore:
    """Owns the on-disk workbook and its single in-memory document."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.document: WorkbookDocument | None = None
        self._synced_fingerprint: str | None = None

    def __repr__(self) -> str:  # pragma: no cover (trivial)
        return f"WorkbookStore(path={str(self.path)!r}, loaded={self.is_loaded})"

    @property
    def is_loaded(self) -> bool:
        return self.document is not None

    @property
    def sheet_names(self) -> list[str]:
        if self.document is None:
            return []
        return list(self.document.keys())

    def exists(self) -> bool:
        return self.path.is_file()

    def _fingerprint(self) -> str | None:
        # content digest; mtime is too coarse when two saves land in the same clock tick
        try:
            with self.path.open("rb") as f:
                return hashlib.file_digest(f, "blake2b").hexdigest()
        except FileNotFoundError:
            return None

    def is_stale(self) -> bool:
        """True when the file on disk changed since the last load or save."""
        if self.document is None:
            return False
        return self._fingerprint() != self._synced_fingerprint

    def load(self) -> WorkbookDocument:
        """Parse the workbook file, replacing any previously loaded document."""
        if not self.exists():
            raise WorkbookNotFoundError(f"workbook not found: {self.path}")
        try:
            document = read_workbook_grids(self.path)
        except Exception as e:
            raise WorkbookIOError(f"failed to read workbook {self.path}: {e}") from e
        self.document = document
        self._synced_fingerprint = self._fingerprint()
        logger.debug(f"loaded workbook {self.path} sheets={list(document)}")
        return document

    def save(self) -> Path:
        """Serialize the whole document over the workbook file."""
        if self.document is None:
            raise WorkbookIOError("no workbook to save")
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.stem}_", suffix=".xlsx", dir=str(self.path.parent)
            )
            os.close(fd)
            write_workbook_grids(Path(tmp_name), self.document)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except Exception as e:
            raise WorkbookIOError(f"failed to save workbook {self.path}: {e}") from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        self._synced_fingerprint = self._fingerprint()
        logger.debug(f"saved workbook {self.path}")
        return self.path

    def create(self, sheet_definitions: Mapping[str, Sequence[str]]) -> WorkbookDocument:
        """Build a fresh document with one header row per requested sheet.

        The previous document is discarded. Nothing is written to disk.
        """
        if not sheet_definitions:
            raise ValidationError("a workbook needs at least one sheet")
        document: WorkbookDocument = {}
        for name, headers in sheet_definitions.items():
            validate_sheet_name(name)
            document[name] = [list(headers)]
        self.document = document
        return document
