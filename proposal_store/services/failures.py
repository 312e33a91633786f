from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..excel.errors import StoreError
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord

"""Failure mapping for callers of the store.

Route handlers and the CLI turn any store exception into an
OperationFailure: a generic "<operation> failed" message for the user plus
the original message and error type for diagnostics. record_failure() also
queues an ErrorRecord for the JSON Lines error log.
"""

__all__ = [
    "OperationFailure",
    "describe_failure",
    "record_failure",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationFailure:
    operation: str
    message: str  # user-facing
    detail: str  # original exception message
    error_type: str
    sheet: str = ""
    row: int = -1

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "message": self.message,
            "error": {
                "type": self.error_type,
                "detail": self.detail,
                "operation": self.operation,
                "sheet": self.sheet,
                "row": self.row,
            },
        }


def _error_type(exc: BaseException) -> str:
    if isinstance(exc, StoreError):
        return exc.error_type
    if isinstance(exc, OSError):
        return "IO_FAILURE"
    return "UNEXPECTED_ERROR"


def describe_failure(
    exc: BaseException, operation: str, *, sheet: str | None = None, row: int = -1
) -> OperationFailure:
    return OperationFailure(
        operation=operation,
        message=f"{operation.replace('_', ' ')} failed",
        detail=str(exc) or type(exc).__name__,
        error_type=_error_type(exc),
        sheet=sheet or getattr(exc, "sheet_name", "") or "",
        row=row,
    )


def record_failure(
    buffer: ErrorLogBuffer,
    workbook: str,
    exc: BaseException,
    operation: str,
    *,
    sheet: str | None = None,
    row: int = -1,
) -> OperationFailure:
    """Describe ``exc``, log it and queue it in ``buffer``."""
    failure = describe_failure(exc, operation, sheet=sheet, row=row)
    logger.error(f"{failure.message}: [{failure.error_type}] {failure.detail}")
    buffer.append(
        ErrorRecord.create(
            workbook=workbook,
            operation=operation,
            sheet=failure.sheet,
            row=failure.row,
            error_type=failure.error_type,
            message=failure.detail,
        )
    )
    return failure
