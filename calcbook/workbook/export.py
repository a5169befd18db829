"""
Workbook Export - writes the finalized model and proposal to .xlsx.

Two tabs:
1. Proposal Sheet - one line per group, quantity cells referencing the
   calculation sheet
2. Calculations Sheet - every row and cell write, styled by intent

Also dumps the write set to JSON for diffing two runs.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .model import CALCULATIONS_SHEET, PROPOSAL_SHEET, Column, StyleIntent, WorkbookModel

logger = logging.getLogger(__name__)


# =============================================================================
# COLOR SCHEME
# =============================================================================

# Color palette (RGB hex without #)
COLORS = {
    "column_titles": "4472C4",  # Blue
    "section": "D9D9D9",        # Light gray
    "subsection": "F2F2F2",     # Lighter gray
    "sum": "FFEB9C",            # Light yellow
    "manual_input": "FFC7CE",   # Light red - needs estimator input
    "total": "C6EFCE",          # Light green
}

COLUMN_WIDTHS = {
    Column.ESTIMATE: 16,
    Column.PARTICULARS: 60,
    Column.TAKEOFF: 12,
    Column.UNIT: 8,
    Column.SOURCE_ROW: 10,
}
DEFAULT_WIDTH = 11

PROPOSAL_HEADERS = [
    ("A", "Description", 90),
    ("B", "FT", 14),
    ("C", "LBS", 14),
    ("D", "QTY", 14),
    ("E", "Reference", 14),
]


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _style_for(intent: StyleIntent):
    """(font, fill) for a row's style intent."""
    if intent == StyleIntent.COLUMN_TITLES:
        return Font(bold=True, color="FFFFFF"), _fill(COLORS["column_titles"])
    if intent == StyleIntent.SECTION:
        return Font(bold=True, size=12), _fill(COLORS["section"])
    if intent == StyleIntent.SUBSECTION:
        return Font(bold=True, italic=True), _fill(COLORS["subsection"])
    if intent == StyleIntent.SUM:
        return Font(bold=True), _fill(COLORS["sum"])
    if intent == StyleIntent.MANUAL_INPUT:
        return None, _fill(COLORS["manual_input"])
    if intent == StyleIntent.TOTAL:
        return Font(bold=True), _fill(COLORS["total"])
    return None, None


class WorkbookExporter:
    """Renders a WorkbookModel (and optional proposal) with openpyxl."""

    def __init__(self, proposal_sheet: str = PROPOSAL_SHEET):
        self.proposal_sheet = proposal_sheet

    def build(self, workbook: WorkbookModel, proposal: Optional[Sequence] = None) -> openpyxl.Workbook:
        wb = openpyxl.Workbook()

        # =====================================================================
        # TAB 1: PROPOSAL
        # =====================================================================
        ws_prop = wb.active
        ws_prop.title = self.proposal_sheet
        self._write_proposal(ws_prop, proposal or [])

        # =====================================================================
        # TAB 2: CALCULATIONS
        # =====================================================================
        ws_calc = wb.create_sheet(workbook.sheet_name or CALCULATIONS_SHEET)
        self._write_calculations(ws_calc, workbook)

        return wb

    def save(self, workbook: WorkbookModel, path: Union[str, Path],
             proposal: Optional[Sequence] = None) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        wb = self.build(workbook, proposal)
        wb.save(path)
        logger.info(f"Saved workbook: {path}")
        return path

    def _write_calculations(self, ws, workbook: WorkbookModel) -> None:
        for column in Column:
            letter = get_column_letter(column.index)
            ws.column_dimensions[letter].width = COLUMN_WIDTHS.get(column, DEFAULT_WIDTH)

        for write in workbook.writes:
            ws.cell(row=write.row, column=write.column.index, value=write.content)

        for row in workbook.rows:
            font, fill = _style_for(row.style)
            if font is None and fill is None:
                continue
            for column in Column:
                cell = ws.cell(row=row.index, column=column.index)
                if font is not None:
                    cell.font = font
                if fill is not None:
                    cell.fill = fill

        ws.freeze_panes = "A2"

    def _write_proposal(self, ws, proposal: Sequence) -> None:
        for col, (letter, header, width) in enumerate(PROPOSAL_HEADERS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = _fill(COLORS["column_titles"])
            cell.alignment = Alignment(horizontal='center')
            ws.column_dimensions[letter].width = width

        current_section = None
        row = 2
        for line in proposal:
            if line.section is not None and line.section != current_section:
                current_section = line.section
                heading = ws.cell(row=row, column=1, value=current_section.value)
                heading.font = Font(bold=True, size=12)
                row += 1
            ws.cell(row=row, column=1, value=line.text).alignment = Alignment(wrap_text=True)
            for col, name in ((2, 'FT'), (3, 'LBS'), (4, 'QTY')):
                if name in line.cells:
                    ws.cell(row=row, column=col, value=f"={line.cells[name]}")
            ws.cell(row=row, column=5, value=line.reference)
            if line.unresolved:
                ws.cell(row=row, column=1).fill = _fill(COLORS["manual_input"])
            row += 1


def to_json(workbook: WorkbookModel, proposal: Optional[Sequence] = None) -> Dict[str, Any]:
    """Serializable view of the write set and proposal."""
    cells: List[Dict[str, Any]] = [
        {"address": w.address, "value": w.value, "formula": w.formula}
        for w in workbook.writes
    ]
    rows = [
        {
            "index": r.index,
            "kind": r.kind.value,
            "section": r.section.value if r.section else None,
            "subsection": r.subsection,
            "item_type": r.item_type.value if r.item_type else None,
            "style": r.style.value,
        }
        for r in workbook.rows
    ]
    lines = [
        {
            "text": line.text,
            "cells": dict(line.cells),
            "reference": line.reference,
            "unresolved": list(line.unresolved),
        }
        for line in (proposal or [])
    ]
    return {"sheet": workbook.sheet_name, "rows": rows, "cells": cells, "proposal": lines}


def save_json(workbook: WorkbookModel, path: Union[str, Path], proposal: Optional[Sequence] = None) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(to_json(workbook, proposal), f, indent=2)
    logger.info(f"Saved JSON: {path}")
    return path
