from __future__ import annotations

from dataclasses import dataclass

from ..config.loader import StoreConfig
from ..excel.accessor import SheetTableAccessor
from ..excel.workbook import WorkbookStore
from ..logging.error_log import ErrorLogBuffer
from .backup import BackupManager
from .bootstrap import SchemaBootstrapper

"""Store wiring.

open_store() builds the object graph for one workbook. Callers hold the
returned StoreContext and pass its accessor to whatever needs row access;
nothing in the package keeps a module-level workbook.
"""

__all__ = [
    "StoreContext",
    "open_store",
]


@dataclass
class StoreContext:
    config: StoreConfig
    store: WorkbookStore
    accessor: SheetTableAccessor
    bootstrapper: SchemaBootstrapper
    backups: BackupManager
    error_log: ErrorLogBuffer


def open_store(config: StoreConfig) -> StoreContext:
    store = WorkbookStore(config.workbook_path)
    accessor = SheetTableAccessor(store)
    return StoreContext(
        config=config,
        store=store,
        accessor=accessor,
        bootstrapper=SchemaBootstrapper(
            accessor,
            header_drift=config.header_drift,
            seed_sample_data=config.seed_sample_data,
        ),
        backups=BackupManager(accessor, config.backup_directory),
        error_log=ErrorLogBuffer(config.error_log_directory),
    )
