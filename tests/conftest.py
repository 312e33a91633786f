# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from proposal_store.excel.accessor import SheetTableAccessor
from proposal_store.excel.workbook import WorkbookStore
from proposal_store.logging.init import reset_logging
from proposal_store.models.sheet_schema import REQUIRED_SHEETS

COST_HEADERS = ["itemid", "itemname", "unitcost", "category", "created_date"]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("PROPOSAL_STORE_WORKBOOK", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def workbook_path(temp_workdir: Path) -> Path:
    return temp_workdir / "data" / "proposal_management.xlsx"


@pytest.fixture()
def cost_store(workbook_path: Path) -> WorkbookStore:
    """Saved workbook holding only a header-only Cost sheet."""
    store = WorkbookStore(workbook_path)
    store.create({"Cost": COST_HEADERS})
    store.save()
    return store


@pytest.fixture()
def cost_accessor(cost_store: WorkbookStore) -> SheetTableAccessor:
    return SheetTableAccessor(cost_store)


@pytest.fixture()
def full_accessor(workbook_path: Path) -> SheetTableAccessor:
    """Saved workbook with every required sheet, header rows only."""
    store = WorkbookStore(workbook_path)
    store.create({name: list(s.columns) for name, s in REQUIRED_SHEETS.items()})
    store.save()
    return SheetTableAccessor(store)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """workbook_path: ./data/proposal_management.xlsx
backup_directory: ./backups
error_log_directory: ./logs
seed_sample_data: true
header_drift: ignore
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "store.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
