"""Spreadsheet-as-database access layer.

Submodules are imported explicitly (``proposal_store.excel.workbook``,
``proposal_store.excel.accessor``, ``proposal_store.excel.errors``).
"""
