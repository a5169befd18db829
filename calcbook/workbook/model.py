"""
Calculation sheet model - columns, rows and cell writes.

A CellWrite is either a literal value or a formula, never both. Formulas
are stored without the leading '=' and use A1 references, optionally
cross-sheet ('Calculations Sheet'!I12). Once the scheduler has flushed,
the rows and writes are frozen into a WorkbookModel that downstream
stages only read.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..items.types import ItemType, Section

CALCULATIONS_SHEET = "Calculations Sheet"
PROPOSAL_SHEET = "Proposal Sheet"


class Column(Enum):
    """Calculation sheet columns."""
    ESTIMATE = "A"
    PARTICULARS = "B"
    TAKEOFF = "C"
    UNIT = "D"
    QTY = "E"
    LENGTH = "F"
    WIDTH = "G"
    HEIGHT = "H"
    FT = "I"
    SQFT = "J"
    LBS = "K"
    CY = "L"
    QTY_FINAL = "M"
    SOURCE_ROW = "N"

    @property
    def letter(self) -> str:
        return self.value

    @property
    def index(self) -> int:
        """1-based column number, as openpyxl counts."""
        return ord(self.value) - ord('A') + 1

    @classmethod
    def from_letter(cls, letter: str) -> 'Column':
        return cls(letter.strip().upper())


COLUMN_TITLES: Dict[Column, str] = {
    Column.ESTIMATE: "Estimate",
    Column.PARTICULARS: "Particulars",
    Column.TAKEOFF: "Takeoff",
    Column.UNIT: "Unit",
    Column.QTY: "QTY",
    Column.LENGTH: "Length",
    Column.WIDTH: "Width",
    Column.HEIGHT: "Height",
    Column.FT: "FT",
    Column.SQFT: "SQ FT",
    Column.LBS: "LBS",
    Column.CY: "CY",
    Column.QTY_FINAL: "QTY",
    Column.SOURCE_ROW: "Source Row",
}

# Columns a sum row can aggregate
AGGREGATE_COLUMNS: Tuple[Column, ...] = (
    Column.FT, Column.SQFT, Column.LBS, Column.CY, Column.QTY_FINAL,
)


class RowKind(Enum):
    HEADER = "header"
    DATA = "data"
    SUM = "sum"
    BLANK = "blank"
    TOTAL = "total"


class StyleIntent(Enum):
    """Rendering intent; the exporter maps these to fonts and fills."""
    COLUMN_TITLES = "column_titles"
    SECTION = "section"
    SUBSECTION = "subsection"
    DATA = "data"
    SUM = "sum"
    MANUAL_INPUT = "manual_input"
    TOTAL = "total"
    BLANK = "blank"


# =============================================================================
# CELL WRITES
# =============================================================================

@dataclass(frozen=True)
class CellWrite:
    """One cell: a literal value XOR a formula (stored without '=')."""
    row: int
    column: Column
    value: Any = None
    formula: Optional[str] = None
    sheet: str = CALCULATIONS_SHEET

    def __post_init__(self):
        if (self.value is None) == (self.formula is None):
            raise ValueError(
                f"CellWrite {self.column.value}{self.row} needs exactly one of value or formula"
            )
        if self.row < 1:
            raise ValueError(f"Row index must be >= 1, got {self.row}")
        if self.formula is not None and self.formula.startswith('='):
            object.__setattr__(self, 'formula', self.formula[1:])

    @classmethod
    def literal(cls, row: int, column: Column, value: Any,
                sheet: str = CALCULATIONS_SHEET) -> 'CellWrite':
        return cls(row=row, column=column, value=value, sheet=sheet)

    @classmethod
    def of_formula(cls, row: int, column: Column, formula: str,
                   sheet: str = CALCULATIONS_SHEET) -> 'CellWrite':
        return cls(row=row, column=column, formula=formula, sheet=sheet)

    @property
    def address(self) -> str:
        return f"{self.column.value}{self.row}"

    @property
    def is_formula(self) -> bool:
        return self.formula is not None

    @property
    def content(self) -> Any:
        """What goes into the cell: '=' + formula, or the literal."""
        return f"={self.formula}" if self.is_formula else self.value

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.row, self.column.index)

    def cross_sheet_ref(self) -> str:
        """Reference to this cell from another sheet."""
        return f"'{self.sheet}'!{self.address}"


# =============================================================================
# ROWS
# =============================================================================

@dataclass(frozen=True)
class CalculationRow:
    """One laid-out row of the calculation sheet."""
    index: int
    kind: RowKind
    section: Optional[Section] = None
    subsection: Optional[str] = None
    item_type: Optional[ItemType] = None
    particulars: str = ""
    style: StyleIntent = StyleIntent.BLANK
    first_data_row: Optional[int] = None
    last_data_row: Optional[int] = None
    group_key: Optional[str] = None

    @property
    def is_data(self) -> bool:
        return self.kind == RowKind.DATA

    @property
    def is_sum(self) -> bool:
        return self.kind == RowKind.SUM


_REFERENCE = re.compile(
    r"(?:'[^']+'!|[A-Za-z_][\w.]*!)?"
    r"(?<![A-Za-z0-9_])\$?([A-Z]{1,2})\$?(\d+)"
    r"(?::\$?([A-Z]{1,2})\$?(\d+))?"
)


def referenced_rows(formula: str) -> Set[int]:
    """
    Same-sheet row numbers a formula reads.

    Ranges expand ("SUM(I10:I12)" -> {10, 11, 12}); cross-sheet
    references are ignored.
    """
    rows: Set[int] = set()
    if not formula:
        return rows
    for match in _REFERENCE.finditer(formula):
        if match.group(0).find('!') != -1:
            continue
        start = int(match.group(2))
        end = int(match.group(4)) if match.group(4) else start
        lo, hi = min(start, end), max(start, end)
        rows.update(range(lo, hi + 1))
    return rows


# =============================================================================
# FINALIZED MODEL
# =============================================================================

class WorkbookModel:
    """Finalized, read-only calculation sheet."""

    def __init__(self, sheet_name: str, rows: Sequence[CalculationRow], writes: Iterable[CellWrite]):
        self.sheet_name = sheet_name
        self._rows: Dict[int, CalculationRow] = {}
        for row in rows:
            if row.index in self._rows:
                raise ValueError(f"Duplicate row index {row.index}")
            self._rows[row.index] = row
        self._cells: Dict[Tuple[int, Column], CellWrite] = {}
        for write in writes:
            key = (write.row, write.column)
            if key in self._cells:
                raise ValueError(f"Duplicate write to {write.address}")
            self._cells[key] = write

    @classmethod
    def finalize(cls, sheet_name: str, rows: Sequence[CalculationRow],
                 writes: Iterable[CellWrite]) -> 'WorkbookModel':
        return cls(sheet_name, rows, writes)

    @property
    def rows(self) -> List[CalculationRow]:
        return [self._rows[i] for i in sorted(self._rows)]

    @property
    def writes(self) -> List[CellWrite]:
        return sorted(self._cells.values(), key=lambda w: w.sort_key)

    @property
    def max_row(self) -> int:
        return max(self._rows) if self._rows else 0

    def row(self, index: int) -> Optional[CalculationRow]:
        return self._rows.get(index)

    def get(self, row: int, column: Column) -> Optional[CellWrite]:
        return self._cells.get((row, column))

    def content(self, row: int, column: Column) -> Any:
        write = self.get(row, column)
        return write.content if write is not None else None

    def writes_in_row(self, row: int) -> List[CellWrite]:
        return sorted(
            (w for (r, _), w in self._cells.items() if r == row),
            key=lambda w: w.sort_key,
        )

    def data_rows(self) -> List[CalculationRow]:
        return [r for r in self.rows if r.is_data]

    def sum_rows(self) -> List[CalculationRow]:
        return [r for r in self.rows if r.is_sum]

    def rows_for_subsection(self, section: Section, subsection: str) -> List[CalculationRow]:
        """Rows under one subsection header, header excluded."""
        return [
            r for r in self.rows
            if r.section == section and r.subsection == subsection and r.kind != RowKind.HEADER
        ]

    def cell_map(self) -> Dict[str, Any]:
        """Address -> content, for diffing two runs."""
        return {w.address: w.content for w in self.writes}

    def __len__(self):
        return len(self._cells)
