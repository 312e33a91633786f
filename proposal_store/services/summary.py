from __future__ import annotations

from ..models.workbook_status import WorkbookStatus

"""SUMMARY line rendering for workbook status output."""


def render_summary_line(status: WorkbookStatus) -> str:
    """Render a SUMMARY line from a WorkbookStatus.

    Format:
    SUMMARY sheets={existing}/{total} rows={rows} missing={name,...|-} workbook={file name}

    Examples:
        >>> from pathlib import Path
        >>> from proposal_store.models.workbook_status import SheetStatus, WorkbookStatus
        >>> status = WorkbookStatus(
        ...     path=Path("data/proposal_management.xlsx"),
        ...     sheets=[SheetStatus("Users", True, 3, 7), SheetStatus("Cost", False)],
        ... )
        >>> render_summary_line(status)
        'SUMMARY sheets=1/2 rows=3 missing=Cost workbook=proposal_management.xlsx'
    """
    missing = [s.sheet_name for s in status.sheets if not s.exists]
    return (
        f"SUMMARY sheets={status.existing_sheets}/{status.total_sheets} "
        f"rows={status.total_rows} "
        f"missing={','.join(missing) if missing else '-'} "
        f"workbook={status.path.name}"
    )
