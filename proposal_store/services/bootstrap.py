from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..excel.accessor import SheetTableAccessor
from ..excel.errors import HeaderDriftError
from ..models.sheet_schema import REQUIRED_SHEETS, SheetSchema

"""Schema bootstrapper.

Idempotent workbook initialization: create the file when absent, add any
required sheet that is missing, and seed the Users and Cost sheets when they
have no data rows.

Header drift (an existing sheet whose header differs from the expected
columns) is never reconciled. With policy "ignore" it is logged as a warning
and the sheet is left untouched; with "reject" a HeaderDriftError is raised.
"""

__all__ = [
    "DEFAULT_USERS",
    "SAMPLE_COST_ITEMS",
    "InitializationResult",
    "SchemaBootstrapper",
]

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


# username, password, email, role, full_name, phone
DEFAULT_USERS: tuple[tuple[str, ...], ...] = (
    ("admin", "admin123", "admin@unicef.org", "specialist", "System Administrator", "+234-800-000-0001"),
    ("specialist1", "spec123", "specialist1@unicef.org", "specialist", "Dr. Jane Smith", "+234-800-000-0002"),
    ("partner1", "partner123", "partner1@ngo.org", "implementing_partner", "John Doe", "+234-800-000-0003"),
)

# itemid, itemname, unitcost, category
SAMPLE_COST_ITEMS: tuple[tuple[Any, ...], ...] = (
    ("ITEM-001", "Project Manager (per day)", 125000.00, "Personnel"),
    ("ITEM-002", "Technical Specialist (per day)", 150000.00, "Personnel"),
    ("ITEM-003", "Field Officer (per day)", 75000.00, "Personnel"),
    ("ITEM-004", "Training Materials (per set)", 22500.00, "Materials"),
    ("ITEM-005", "Transportation (per trip)", 37500.00, "Transport"),
    ("ITEM-006", "Accommodation (per night)", 60000.00, "Accommodation"),
    ("ITEM-007", "Meeting Venue (per day)", 100000.00, "Venue"),
    ("ITEM-008", "Equipment Rental (per day)", 90000.00, "Equipment"),
    ("ITEM-009", "Stationery Package", 12500.00, "Materials"),
    ("ITEM-010", "Communication (per month)", 25000.00, "Communication"),
)


@dataclass(frozen=True)
class InitializationResult:
    path: Path
    sheets: list[str]
    created: bool  # True when the workbook file did not exist before
    added_sheets: list[str] = field(default_factory=list)
    seeded: dict[str, int] = field(default_factory=dict)


class SchemaBootstrapper:
    def __init__(
        self,
        accessor: SheetTableAccessor,
        definitions: Mapping[str, SheetSchema] | None = None,
        *,
        header_drift: str = "ignore",
        seed_sample_data: bool = True,
    ) -> None:
        self.accessor = accessor
        self.definitions = dict(definitions) if definitions is not None else dict(REQUIRED_SHEETS)
        self.header_drift = header_drift
        self.seed_sample_data = seed_sample_data

    def _header_lists(self) -> dict[str, list[str]]:
        return {name: list(schema.columns) for name, schema in self.definitions.items()}

    async def initialize_workbook(self) -> InitializationResult:
        """Create or load the workbook, add missing sheets and seed empty ones."""
        store = self.accessor.store
        created = False
        if not store.exists():
            logger.info(f"creating new workbook: {store.path}")
            await self.accessor.rebuild(self._header_lists())
            created = True
        else:
            logger.info(f"loading existing workbook: {store.path}")

        added = await self.ensure_required_sheets()
        seeded = await self.initialize_sample_data() if self.seed_sample_data else {}
        logger.info("workbook initialization complete")
        return InitializationResult(
            path=store.path,
            sheets=await self.accessor.get_sheet_names(),
            created=created,
            added_sheets=added,
            seeded=seeded,
        )

    async def ensure_required_sheets(
        self, definitions: Mapping[str, SheetSchema] | None = None
    ) -> list[str]:
        """Add every missing sheet with its header row; returns the names added.

        Existing sheets are not modified. Nothing is written when no sheet is
        missing.
        """
        wanted = dict(definitions) if definitions is not None else self.definitions
        reject = self.header_drift == "reject"

        def _ensure(document: dict[str, list[list[Any]]]) -> list[str]:
            added: list[str] = []
            for name, schema in wanted.items():
                grid = document.get(name)
                if grid is None:
                    continue
                actual = [str(h) for h in grid[0]] if grid else []
                if actual != list(schema.columns):
                    if reject:
                        raise HeaderDriftError(name, list(schema.columns), actual)
                    logger.warning(f"sheet '{name}' header differs from expected columns, left unchanged")
            for name, schema in wanted.items():
                if name not in document:
                    logger.info(f"creating missing sheet: {name}")
                    document[name] = [list(schema.columns)]
                    added.append(name)
            return added

        return await self.accessor.apply_to_document(_ensure)

    async def initialize_sample_data(self) -> dict[str, int]:
        """Seed Users and Cost when they have zero data rows; returns rows added per sheet."""
        seeded: dict[str, int] = {}
        stamp = _now_iso()

        users = await self.accessor.get_sheet_data("Users")
        if not users.rows:
            logger.info("adding default users")
            await self.accessor.append_rows("Users", [[*u, stamp] for u in DEFAULT_USERS])
            seeded["Users"] = len(DEFAULT_USERS)

        costs = await self.accessor.get_sheet_data("Cost")
        if not costs.rows:
            logger.info("adding sample cost items")
            await self.accessor.append_rows("Cost", [[*c, stamp] for c in SAMPLE_COST_ITEMS])
            seeded["Cost"] = len(SAMPLE_COST_ITEMS)

        return seeded

    async def reset_workbook(self) -> InitializationResult:
        """Discard all data and rebuild every sheet plus seed rows.

        Destructive. Privilege checks are the caller's job.
        """
        logger.warning(f"RESETTING WORKBOOK - all data will be lost: {self.accessor.path}")
        sheets = await self.accessor.rebuild(self._header_lists())
        seeded = await self.initialize_sample_data()
        return InitializationResult(
            path=self.accessor.path,
            sheets=sheets,
            created=True,
            added_sheets=list(sheets),
            seeded=seeded,
        )
