from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""SheetData model: one sheet read back as header + positional data rows."""

__all__ = [
    "SheetData",
]


@dataclass(frozen=True)
class SheetData:
    """Snapshot of a sheet's cell grid.

    ``rows`` holds the data rows only; the header row is kept in ``headers``.
    Position ``i`` in ``rows`` corresponds to row index ``i + 1`` for
    update/delete calls.
    """
    sheet_name: str
    headers: list[str]
    rows: list[list[Any]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def records(self) -> list[dict[str, Any]]:
        """Project every data row onto the header names."""
        return [
            {col: (row[i] if i < len(row) else "") for i, col in enumerate(self.headers)}
            for row in self.rows
        ]
