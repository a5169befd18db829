"""
Formula Assignment Engine.

Given a data row and a classified item, produce the cell writes for that
row. Sum rows get SUM(Xfirst:Xlast) over exactly the columns the
aggregation rule table lists for their subsection.
"""

import logging
from typing import Iterable, List, Mapping, Optional

from ..items.types import ItemType, Section, section_of
from ..patterns import PartialDimensions
from ..workbook.model import CellWrite, Column
from .aggregation import AggregationRuleTable
from .base import RowFormulas
from .registry import classify

logger = logging.getLogger(__name__)


def assign_row(row: int, item_type: ItemType, parsed_data: PartialDimensions,
               refs: Optional[Mapping[str, int]] = None,
               section: Optional[Section] = None) -> RowFormulas:
    """
    Run the builder for one data row.

    Returns the collector so callers can read both writes and
    recoverable errors.
    """
    if section is None:
        section = section_of(item_type) if isinstance(item_type, ItemType) else None
    builder = classify(section, item_type)
    rf = RowFormulas(row, refs)
    builder(rf, parsed_data)
    logger.debug(f"Row {row}: {item_type.value} -> {', '.join(c.value for c in rf.columns())}")
    return rf


def assign(row: int, item_type: ItemType, parsed_data: PartialDimensions,
           refs: Optional[Mapping[str, int]] = None) -> List[CellWrite]:
    """Cell writes for one data row (builder output only)."""
    return assign_row(row, item_type, parsed_data, refs).writes()


def sum_formula(column: Column, first: int, last: int) -> str:
    return f"SUM({column.value}{first}:{column.value}{last})"


def sum_columns(columns: Iterable[Column]) -> List[Column]:
    return sorted(columns, key=lambda c: c.index)


def assign_sum(row: int, section: Section, subsection: str, first: int, last: int,
               rules: AggregationRuleTable) -> List[CellWrite]:
    """
    SUM writes for a sum row covering data rows first..last.

    Only the columns listed for the subsection are written.
    """
    if first > last:
        raise ValueError(f"Empty sum range {first}:{last} for row {row}")
    return [
        CellWrite.of_formula(row, column, sum_formula(column, first, last))
        for column in sum_columns(rules.summed_columns(section, subsection))
    ]
