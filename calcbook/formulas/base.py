"""
Per-row write collector shared by every formula builder.
"""

import logging
from typing import Callable, Dict, List, Mapping, Optional

from ..errors import CellWriteError
from ..patterns import UNKNOWN, PartialDimensions
from ..workbook.model import CellWrite, Column

logger = logging.getLogger(__name__)


class RowFormulas:
    """
    Collects the writes for one data row.

    Literal values that are None or UNKNOWN are skipped, so missing data
    leaves the cell blank rather than writing zero. A formula needing a
    reference to another row that is not available is recorded as a
    CellWriteError and the cell is skipped.
    """

    def __init__(self, row: int, refs: Optional[Mapping[str, int]] = None):
        self.row = row
        self.refs: Dict[str, int] = dict(refs or {})
        self.errors: List[CellWriteError] = []
        self._writes: Dict[Column, CellWrite] = {}

    def value(self, column: Column, value) -> None:
        if value is None or value is UNKNOWN:
            return
        if isinstance(value, float):
            value = round(value, 6)
        self._writes[column] = CellWrite.literal(self.row, column, value)

    def formula(self, column: Column, expression: str) -> None:
        self._writes[column] = CellWrite.of_formula(self.row, column, expression)

    def ref_formula(self, column: Column, template: str, *names: str) -> None:
        """Formula reading other rows; {name} placeholders come from refs."""
        missing = [n for n in names if self.refs.get(n) is None]
        if missing:
            error = CellWriteError(
                f"{column.value}{self.row}", f"unresolved row reference: {', '.join(missing)}"
            )
            logger.warning(f"Skipping cell {error}")
            self.errors.append(error)
            return
        self.formula(column, template.format(r=self.row, **self.refs))

    def weighted(self, column: Column, source: Column, weight) -> None:
        """source * weight, weight written with three decimals."""
        if weight is None or weight is UNKNOWN:
            return
        self.formula(column, f"{source.value}{self.row}*{weight:.3f}")

    def writes(self) -> List[CellWrite]:
        return sorted(self._writes.values(), key=lambda w: w.sort_key)

    def columns(self) -> List[Column]:
        return [w.column for w in self.writes()]


Builder = Callable[[RowFormulas, PartialDimensions], None]


def bracket_lwh(dims: PartialDimensions):
    """
    Length, width, height from a bracket.

    Three values read L x W x H; two values read W x H.
    """
    bracket = dims.bracket
    if bracket is UNKNOWN:
        return UNKNOWN, UNKNOWN, UNKNOWN
    if len(bracket) >= 3:
        return bracket[0], bracket[1], bracket[2]
    if len(bracket) == 2:
        return UNKNOWN, bracket[0], bracket[1]
    return UNKNOWN, bracket[0], UNKNOWN


def height_or_thickness(dims: PartialDimensions):
    """H= when present, otherwise the trailing thickness."""
    if dims.known('height'):
        return dims.height
    return dims.slab_thickness
