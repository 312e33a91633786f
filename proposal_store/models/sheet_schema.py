from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..excel.errors import ValidationError

"""Sheet schemas for the proposal management workbook.

A SheetSchema pairs a sheet name with its ordered header columns. It is the
boundary where positional rows are checked against the header and where
records (column -> value mappings) are converted to rows and back.
"""

__all__ = [
    "SheetSchema",
    "validate_sheet_name",
    "PROPOSAL_HEADERS",
    "REQUIRED_SHEETS",
]

# Excel limits sheet names to 31 characters and forbids these characters
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
MAX_SHEET_NAME_LENGTH = 31


def validate_sheet_name(name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"invalid sheet name: {name!r}")
    if len(name) > MAX_SHEET_NAME_LENGTH:
        raise ValidationError(f"sheet name longer than {MAX_SHEET_NAME_LENGTH} characters: {name!r}")
    if _INVALID_SHEET_CHARS.search(name):
        raise ValidationError(f"sheet name contains a forbidden character: {name!r}")
    return name


@dataclass(frozen=True)
class SheetSchema:
    """Ordered header definition for one sheet.

    Column names must be unique within a sheet. Values are kept as given;
    callers coerce to numbers or dates when they need to.
    """
    name: str
    columns: tuple[str, ...]

    def __post_init__(self) -> None:
        validate_sheet_name(self.name)
        if not self.columns:
            raise ValidationError(f"sheet '{self.name}' needs at least one column")
        dupes = sorted({c for c in self.columns if self.columns.count(c) > 1})
        if dupes:
            raise ValidationError(f"sheet '{self.name}' has duplicate columns: {dupes}")

    @classmethod
    def from_headers(cls, name: str, headers: Sequence[Any]) -> SheetSchema:
        return cls(name=name, columns=tuple(str(h) for h in headers))

    @property
    def width(self) -> int:
        return len(self.columns)

    def validate_row(self, values: Sequence[Any]) -> list[Any]:
        """Return ``values`` as a list, raising ValidationError on a shape mismatch."""
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise ValidationError(
                f"row for sheet '{self.name}' must be a sequence, got {type(values).__name__}"
            )
        if len(values) != self.width:
            raise ValidationError(
                f"row for sheet '{self.name}' has {len(values)} values, header has {self.width}"
            )
        return list(values)

    def to_row(self, record: Mapping[str, Any]) -> list[Any]:
        unknown = [k for k in record if k not in self.columns]
        if unknown:
            raise ValidationError(f"unknown columns for sheet '{self.name}': {unknown}")
        return [record.get(col, "") for col in self.columns]

    def to_record(self, row: Sequence[Any]) -> dict[str, Any]:
        # short rows read back with empty strings
        return {col: (row[i] if i < len(row) else "") for i, col in enumerate(self.columns)}


PROPOSAL_HEADERS: tuple[str, ...] = (
    "year", "field_office", "state", "outcome", "specialist_name", "specialist_email",
    "specialist_phone", "output", "intervention", "activity", "activity_id", "ip_name",
    "ip_email", "ip_id", "ip_phone", "micro_activity", "micro_activity_id", "timeline",
    "proposal_entry_date", "proposal_id", "proposal_title", "proposal_description",
    "proposal_objectives", "proposal_activities", "proposal_outcomes",
    "proposal_totalbudget", "proposal_duration", "proposal_startdate", "proposal_enddate",
    "proposal_location", "proposal_beneficiaries", "proposal_risks", "proposal_mitigation",
    "proposal_sustainability", "proposal_monitoring", "proposal_status",
    "proposal_submissiondate", "proposal_feedback", "proposal_priority",
    "created_date", "updated_date",
)

REQUIRED_SHEETS: dict[str, SheetSchema] = {
    schema.name: schema
    for schema in (
        SheetSchema("Users", (
            "username", "password", "email", "role", "full_name", "phone", "created_date",
        )),
        SheetSchema("Proposals", PROPOSAL_HEADERS),
        SheetSchema("Budget", (
            "ip_id", "proposal_id", "itemname", "itemid", "unitcost", "quantity",
            "frequency", "totalcost", "created_date",
        )),
        SheetSchema("Cost", ("itemid", "itemname", "unitcost", "category", "created_date")),
        SheetSchema("Workplan", (
            "year", "field_office", "state", "outcome", "specialist_name",
            "specialist_email", "specialist_phone", "output", "intervention", "activity",
            "activity_id", "micro_activity", "micro_activity_id",
        )),
        SheetSchema("System_Config", ("config_key", "config_value", "description", "updated_date")),
    )
}
