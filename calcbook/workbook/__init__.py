"""
Calculation sheet: row/cell model and the dependency scheduler.

The layout builder and the openpyxl exporter live in
calcbook.workbook.layout and calcbook.workbook.export.
"""

from .model import (
    CALCULATIONS_SHEET,
    PROPOSAL_SHEET,
    Column,
    COLUMN_TITLES,
    AGGREGATE_COLUMNS,
    RowKind,
    StyleIntent,
    CellWrite,
    CalculationRow,
    WorkbookModel,
    referenced_rows,
)
from .scheduler import DeferredWrite, WritePlan, flush

__all__ = [
    "CALCULATIONS_SHEET",
    "PROPOSAL_SHEET",
    "Column",
    "COLUMN_TITLES",
    "AGGREGATE_COLUMNS",
    "RowKind",
    "StyleIntent",
    "CellWrite",
    "CalculationRow",
    "WorkbookModel",
    "referenced_rows",
    "DeferredWrite",
    "WritePlan",
    "flush",
]
