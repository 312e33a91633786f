from __future__ import annotations

import json

from proposal_store.models.error_record import ErrorRecord

"""Unit tests for the failure log ErrorRecord."""

KEYS = {"timestamp", "workbook", "operation", "sheet", "row", "error_type", "message"}


def test_error_record_row_minus_one_support():
    """Workbook-level failures carry row=-1."""
    rec = ErrorRecord.create(
        workbook="proposal_management.xlsx",
        operation="load",
        sheet="",
        row=-1,
        error_type="IO_FAILURE",
        message="failed to read workbook",
    )

    assert rec.row == -1
    data = json.loads(rec.to_json_line())
    assert data["row"] == -1
    assert data["operation"] == "load"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_error_record_positive_row_number():
    rec = ErrorRecord.create(
        workbook="proposal_management.xlsx",
        operation="update_row",
        sheet="Budget",
        row=42,
        error_type="ROW_OUT_OF_RANGE",
        message="Invalid row index 42 for sheet 'Budget' (valid: 1..3)",
    )

    assert rec.row == 42
    data = json.loads(rec.to_json_line())
    assert data["row"] == 42
    assert data["sheet"] == "Budget"


def test_error_record_non_ascii_message():
    rec = ErrorRecord.create("wb.xlsx", "append_row", "Proposals", 3, "VALIDATION_ERROR", "título inválido")
    line = rec.to_json_line()
    assert "título inválido" in line
    assert json.loads(line)["message"] == "título inválido"
