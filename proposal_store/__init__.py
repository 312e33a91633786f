"""Spreadsheet-backed data store for proposal and budget management.

One .xlsx workbook holds the Users, Proposals, Budget, Cost, Workplan and
System_Config sheets. ``open_store`` wires a WorkbookStore, the async
SheetTableAccessor and the SchemaBootstrapper for a given config.
"""

__version__ = "0.1.0"
