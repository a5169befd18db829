"""
Calculation Sheet Layout - the main pass.

Lays recognized items out as rows and emits their cell writes:

    1   column titles
    2   (blank)
        <Section>                      section row
        (blank)
        <Subsection>:                  subsection header
        data rows of group 1
        (blank)
        data rows of group 2
        sum row                        SUM over the subsection's data rows
        (blank)

Subsections in GROUP_SUM_SUBSECTIONS (pile families) give every group
its own sum row instead. Writes that read ranges only complete after the
main pass (Foundation CY) are emitted as DeferredWrites for the scheduler.
"""

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import CellWriteError
from ..formulas.aggregation import AggregationRuleTable
from ..formulas.engine import assign_row, assign_sum
from ..items.records import ParsedItem
from ..items.types import (
    GROUP_SUM_SUBSECTIONS,
    MANUAL_INPUT_TYPES,
    SECTION_ORDER,
    ItemType,
    Section,
    subsection_position,
)
from ..patterns import PartialDimensions
from .model import (
    CALCULATIONS_SHEET,
    COLUMN_TITLES,
    CalculationRow,
    CellWrite,
    Column,
    RowKind,
    StyleIntent,
)
from .scheduler import DeferredWrite, WritePlan

logger = logging.getLogger(__name__)

BACKPACKING_PATTERN = re.compile(r'w/\s*back\s*-?\s*packing', re.IGNORECASE)
MERGED_GROUP_KEY = 'MERGED'
TOTAL_CY_LABEL = 'Total CY'
STAIRS_SUBSECTION = 'Stairs on grade Stairs'


@dataclass
class _SheetState:
    """Mutable accumulator for one build() call."""
    rows: List[CalculationRow] = field(default_factory=list)
    immediate: List[CellWrite] = field(default_factory=list)
    deferred: List[DeferredWrite] = field(default_factory=list)
    skipped: List[CellWriteError] = field(default_factory=list)
    placed: List[ParsedItem] = field(default_factory=list)
    sum_rows: Dict[Tuple[Section, str], int] = field(default_factory=dict)
    next_row: int = 1

    def take_row(self) -> int:
        row = self.next_row
        self.next_row += 1
        return row

    def add_row(self, **kwargs) -> CalculationRow:
        row = CalculationRow(index=self.take_row(), **kwargs)
        self.rows.append(row)
        return row

    def blank(self, section: Optional[Section] = None, subsection: Optional[str] = None) -> CalculationRow:
        return self.add_row(kind=RowKind.BLANK, section=section, subsection=subsection)

    def literal(self, row: int, column: Column, value) -> None:
        if value is None or value == '':
            return
        self.immediate.append(CellWrite.literal(row, column, value))


class CalculationSheetBuilder:
    """
    Builds the write plan for the calculation sheet.

    Args:
        rules: Aggregation rule table (defaults to the built-in table)
        merge_singletons: Fold single-item groups of a subsection into one
            group when there is more than one of them
        sheet_name: Worksheet every emitted write targets
    """

    def __init__(self, rules: Optional[AggregationRuleTable] = None,
                 merge_singletons: bool = True,
                 sheet_name: str = CALCULATIONS_SHEET):
        self.rules = rules or AggregationRuleTable()
        self.merge_singletons = merge_singletons
        self.sheet_name = sheet_name

    # =========================================================================
    # ENTRY POINT
    # =========================================================================

    def build(self, items: Sequence[ParsedItem]) -> WritePlan:
        state = _SheetState()

        titles = state.add_row(kind=RowKind.HEADER, style=StyleIntent.COLUMN_TITLES)
        for column, title in COLUMN_TITLES.items():
            state.literal(titles.index, column, title)
        state.blank()

        for section in SECTION_ORDER:
            section_items = [i for i in items if i.section == section and not i.is_blank]
            if section_items:
                self._build_section(state, section, section_items)

        logger.info(
            f"Laid out {len(state.rows)} rows: {len(state.immediate)} writes, "
            f"{len(state.deferred)} deferred, {len(state.skipped)} skipped"
        )
        return WritePlan(
            rows=tuple(state.rows),
            immediate=tuple(replace(w, sheet=self.sheet_name) for w in state.immediate),
            deferred=tuple(replace(w, sheet=self.sheet_name) for w in state.deferred),
            skipped=tuple(state.skipped),
            items=tuple(state.placed),
        )

    # =========================================================================
    # SECTIONS AND SUBSECTIONS
    # =========================================================================

    def _build_section(self, state: _SheetState, section: Section, items: List[ParsedItem]) -> None:
        header = state.add_row(
            kind=RowKind.HEADER, section=section, particulars=section.value, style=StyleIntent.SECTION,
        )
        state.literal(header.index, Column.ESTIMATE, section.value)
        if section == Section.EXCAVATION:
            state.literal(header.index, Column.LBS, 'CY')
            state.literal(header.index, Column.CY, '1.3*CY')
        state.blank(section)

        by_subsection: "OrderedDict[str, List[ParsedItem]]" = OrderedDict()
        for item in items:
            by_subsection.setdefault(item.subsection, []).append(item)

        if section == Section.SOE:
            lagging = by_subsection.get("Timber lagging", [])
            if any(BACKPACKING_PATTERN.search(i.particulars) for i in lagging):
                by_subsection["Backpacking"] = [_derived(ItemType.BACKPACKING, section, "Backpacking", "Backpacking")]

        source_order = list(by_subsection)
        ordered = sorted(
            source_order,
            key=lambda name: (subsection_position(section, name), source_order.index(name)),
        )

        for subsection in ordered:
            self._build_subsection(state, section, subsection, by_subsection[subsection])

        if section == Section.FOUNDATION:
            self._build_total_cy(state, section)

    def _build_subsection(self, state: _SheetState, section: Section, subsection: str,
                          items: List[ParsedItem]) -> None:
        # Fail before laying out rows if the subsection has no aggregation entry
        self.rules.summed_columns(section, subsection)

        header = state.add_row(
            kind=RowKind.HEADER, section=section, subsection=subsection,
            particulars=f"{subsection}:", style=StyleIntent.SUBSECTION,
        )
        state.literal(header.index, Column.PARTICULARS, f"{subsection}:")

        if subsection == STAIRS_SUBSECTION:
            groups = self.stair_groups(items)
        else:
            groups = self.group_items(section, subsection, items)

        if (section, subsection) in GROUP_SUM_SUBSECTIONS:
            for key, group in groups:
                data_rows = [self._place(state, item) for item in group]
                self._build_sum(state, section, subsection, data_rows, group_key=key)
                state.blank(section, subsection)
            return

        data_rows: List[int] = []
        for gi, (_, group) in enumerate(groups):
            for item in group:
                placed_row = self._place(state, item, refs=self._refs_for(state, item))
                data_rows.append(placed_row)
                if item.item_type == ItemType.STAIRS_ON_GRADE:
                    # Each flight's slab sits directly under it, inside the flight's group
                    slab = _derived(ItemType.STAIR_SLAB, section, subsection, "Stair slab")
                    data_rows.append(self._place(state, slab, refs={'stairs_row': placed_row}))
            if gi < len(groups) - 1:
                state.blank(section, subsection)

        sum_row = self._build_sum(state, section, subsection, data_rows)
        state.sum_rows[(section, subsection)] = sum_row

        if section == Section.EXCAVATION and subsection == "Excavation":
            havg = _derived(ItemType.EXCAVATION_HAVG, section, subsection, "Havg")
            self._place(state, havg, refs={'sum_row': sum_row})

        state.blank(section, subsection)

    def group_items(self, section: Section, subsection: str,
                    items: List[ParsedItem]) -> List[Tuple[str, List[ParsedItem]]]:
        """Group by group_key in first-appearance order."""
        groups: "OrderedDict[str, List[ParsedItem]]" = OrderedDict()
        for item in items:
            groups.setdefault(item.group_key or 'OTHER', []).append(item)
        result = list(groups.items())

        if not self.merge_singletons or (section, subsection) in GROUP_SUM_SUBSECTIONS:
            return result
        singles = [(k, g) for k, g in result if len(g) == 1]
        if len(singles) <= 1:
            return result
        multi = [(k, g) for k, g in result if len(g) > 1]
        merged = [g[0] for _, g in singles]
        return multi + [(MERGED_GROUP_KEY, merged)]

    def stair_groups(self, items: List[ParsedItem]) -> List[Tuple[str, List[ParsedItem]]]:
        """
        One group per flight of stairs.

        Landings attach one per flight to the last N flights, ahead of the
        flight. Landings beyond the number of flights join the first
        flight; with no flights at all they form a single group.
        """
        flights = [i for i in items if i.item_type == ItemType.STAIRS_ON_GRADE]
        landings = [i for i in items if i.item_type != ItemType.STAIRS_ON_GRADE]
        if not flights:
            return [('LANDINGS', landings)] if landings else []

        offset = len(flights) - len(landings)
        groups = []
        for n, flight in enumerate(flights):
            members = []
            if n == 0 and offset < 0:
                members.extend(landings[:-offset])
            index = n - offset
            if 0 <= index < len(landings):
                members.append(landings[index])
            members.append(flight)
            groups.append((f"FLIGHT_{n + 1}", members))
        return groups

    # =========================================================================
    # ROWS
    # =========================================================================

    def _place(self, state: _SheetState, item: ParsedItem, refs: Optional[Dict[str, int]] = None) -> int:
        """Allocate a data row for an item and emit its writes."""
        index = state.next_row
        style = StyleIntent.MANUAL_INPUT if item.item_type in MANUAL_INPUT_TYPES else StyleIntent.DATA
        state.add_row(
            kind=RowKind.DATA,
            section=item.section,
            subsection=item.subsection,
            item_type=item.item_type,
            particulars=item.particulars,
            style=style,
            group_key=item.group_key,
        )
        placed = item.at_row(index)
        state.placed.append(placed)

        record = item.record
        if record is not None:
            state.literal(index, Column.ESTIMATE, record.estimate_category or item.section.value)
        state.literal(index, Column.PARTICULARS, item.particulars)
        if record is not None:
            state.literal(index, Column.TAKEOFF, item.takeoff)
            state.literal(index, Column.UNIT, item.unit)
            if record.raw_row:
                state.literal(index, Column.SOURCE_ROW, record.raw_row)

        rf = assign_row(index, item.item_type, item.parsed_data, refs=refs, section=item.section)
        state.immediate.extend(rf.writes())
        state.skipped.extend(rf.errors)
        return index

    def _refs_for(self, state: _SheetState, item: ParsedItem) -> Optional[Dict[str, int]]:
        if item.item_type == ItemType.BACKPACKING:
            return {'lagging_sum': state.sum_rows.get((item.section, "Timber lagging"))}
        return None

    def _build_sum(self, state: _SheetState, section: Section, subsection: str,
                   data_rows: List[int], group_key: Optional[str] = None) -> int:
        first, last = min(data_rows), max(data_rows)
        row = state.add_row(
            kind=RowKind.SUM, section=section, subsection=subsection, style=StyleIntent.SUM,
            first_data_row=first, last_data_row=last, group_key=group_key,
        )
        depends_on = tuple(sorted(data_rows))
        for write in assign_sum(row.index, section, subsection, first, last, self.rules):
            if self.rules.is_deferred(section, write.column):
                state.deferred.append(DeferredWrite(
                    row=write.row, column=write.column, formula=write.formula, depends_on=depends_on,
                ))
            else:
                state.immediate.append(write)
        return row.index

    def _build_total_cy(self, state: _SheetState, section: Section) -> None:
        """Section total of every sum row that totals CY."""
        sums = [
            r for r in state.rows
            if r.is_sum and r.section == section
            and Column.CY in self.rules.summed_columns(section, r.subsection)
        ]
        if not sums:
            return
        row = state.add_row(
            kind=RowKind.TOTAL, section=section, particulars=TOTAL_CY_LABEL, style=StyleIntent.TOTAL,
        )
        state.literal(row.index, Column.PARTICULARS, TOTAL_CY_LABEL)
        formula = "SUM(" + ",".join(f"L{r.index}" for r in sums) + ")"
        write = DeferredWrite(
            row=row.index, column=Column.CY, formula=formula,
            depends_on=tuple(r.index for r in sums),
        )
        if self.rules.is_deferred(section, Column.CY):
            state.deferred.append(write)
        else:
            state.immediate.append(write.resolve())
        state.blank(section)


def _derived(item_type: ItemType, section: Section, subsection: str, particulars: str) -> ParsedItem:
    """Layout-generated item with no source record."""
    return ParsedItem(
        section=section,
        subsection=subsection,
        item_type=item_type,
        parsed_data=PartialDimensions(),
        particulars=particulars,
        group_key=item_type.value,
    )

