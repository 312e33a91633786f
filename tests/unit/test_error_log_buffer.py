from __future__ import annotations

import json
from pathlib import Path

from proposal_store.logging.error_log import ErrorLogBuffer, ErrorRecord

KEYS = {"timestamp", "workbook", "operation", "sheet", "row", "error_type", "message"}


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("wb.xlsx", "append_row", "Cost", -1, "VALIDATION_ERROR", "row too short"))
    buf.append(ErrorRecord.create("wb.xlsx", "find_row_index", "Cost", -1, "COLUMN_NOT_FOUND", "no column"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("logs")
    assert path.name.startswith("errors-")

    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    # buffer is cleared after flush
    assert len(buf) == 0


def test_error_log_buffer_multiple_flushes(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "custom-logs")
    buf.append(ErrorRecord.create("wb.xlsx", "delete_row", "Cost", 5, "ROW_OUT_OF_RANGE", "bad index"))
    path = buf.flush()
    size1 = path.stat().st_size

    buf.append(ErrorRecord.create("wb.xlsx", "delete_row", "Cost", 6, "ROW_OUT_OF_RANGE", "bad index"))
    path2 = buf.flush()
    assert path == path2
    assert path2.parent == temp_workdir / "custom-logs"
    assert path2.stat().st_size > size1


def test_error_log_buffer_empty_flush_writes_nothing(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "empty-logs")
    assert buf.flush() is None
    assert not (temp_workdir / "empty-logs").exists()
