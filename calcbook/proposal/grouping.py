"""
Grouping Engine - partitions laid-out items into proposal groups.

Boundaries come from the sheet itself: a blank row ends a group, a sum
row closes one. HP soldier piles are separated from drilled ones after
boundary grouping, keeping order and the sum row.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from ..items.records import ParsedItem
from ..items.types import ItemType, Section
from ..patterns import is_hp_section
from ..workbook.model import RowKind, WorkbookModel
from .templates import COUNTED_SUBSECTIONS, PILE_SUBSECTIONS, ProposalFamily

SOLDIER_PILE_SUBSECTION = "Drilled soldier pile"

# Data rows that summarize rather than describe work
NON_PROPOSAL_TYPES = frozenset({ItemType.EXCAVATION_HAVG})


@dataclass(frozen=True)
class Group:
    """Consecutive items that yield one proposal line."""
    section: Section
    subsection: str
    items: Tuple[ParsedItem, ...]
    sum_row_index: Optional[int] = None
    family: ProposalFamily = ProposalFamily.QUANTITY

    @property
    def is_hp(self) -> bool:
        return bool(self.items) and all(is_hp_section(i.particulars) for i in self.items)

    @property
    def data_rows(self) -> List[int]:
        return [i.row for i in self.items if i.row is not None]


def family_for(section: Section, subsection: str, items: Sequence[ParsedItem]) -> ProposalFamily:
    if subsection == SOLDIER_PILE_SUBSECTION:
        if items and all(is_hp_section(i.particulars) for i in items):
            return ProposalFamily.HP_SOLDIER_PILE
        if any(i.parsed_data.known('rock_socket') for i in items):
            return ProposalFamily.DRILLED_SOLDIER_PILE_RS
        return ProposalFamily.DRILLED_SOLDIER_PILE
    if subsection in PILE_SUBSECTIONS:
        return ProposalFamily.PILE
    if subsection in COUNTED_SUBSECTIONS:
        return ProposalFamily.COUNTED
    return ProposalFamily.QUANTITY


def _make_group(items: List[ParsedItem], sum_row_index: Optional[int] = None) -> Group:
    first = items[0]
    return Group(
        section=first.section,
        subsection=first.subsection,
        items=tuple(items),
        sum_row_index=sum_row_index,
        family=family_for(first.section, first.subsection, items),
    )


def group(items: Sequence[ParsedItem]) -> List[Group]:
    """
    Split items on blank-particulars boundaries.

    [A, B, blank, C] -> [[A, B], [C]]; consecutive blanks produce no
    empty groups and a trailing run closes a group.
    """
    groups: List[Group] = []
    run: List[ParsedItem] = []
    for item in items:
        if item.is_blank:
            if run:
                groups.append(_make_group(run))
                run = []
            continue
        run.append(item)
    if run:
        groups.append(_make_group(run))
    return groups


def split_hp(groups: Sequence[Group]) -> Tuple[List[Group], List[Group]]:
    """
    Separate HP soldier pile groups from the rest.

    A mixed group is split in two, each half keeping item order and the
    original sum row.
    """
    non_hp: List[Group] = []
    hp: List[Group] = []
    for g in groups:
        hp_items = [i for i in g.items if is_hp_section(i.particulars)]
        other_items = [i for i in g.items if not is_hp_section(i.particulars)]
        if other_items:
            non_hp.append(g if not hp_items else _regroup(g, other_items))
        if hp_items:
            hp.append(g if not other_items else _regroup(g, hp_items))
    return non_hp, hp


def _regroup(g: Group, items: List[ParsedItem]) -> Group:
    return replace(g, items=tuple(items), family=family_for(g.section, g.subsection, items))


def groups_from_workbook(workbook: WorkbookModel, items: Sequence[ParsedItem]) -> List[Group]:
    """
    Re-scan the finalized sheet into groups, subsection by subsection.

    A run owns a sum row only when the sum starts at the run's first row;
    runs that merely sit inside a wider subsection sum get none.
    """
    by_row: Dict[int, ParsedItem] = {i.row: i for i in items if i.row is not None}
    groups: List[Group] = []
    run: List[ParsedItem] = []

    def close(sum_row=None):
        nonlocal run
        if run:
            owned = sum_row if sum_row is not None and sum_row.first_data_row == run[0].row else None
            groups.append(_make_group(run, owned.index if owned is not None else None))
        run = []

    current: Optional[Tuple[Section, str]] = None
    for row in workbook.rows:
        key = (row.section, row.subsection) if row.subsection else None
        if key != current:
            close()
            current = key
        if key is None:
            continue
        if row.kind == RowKind.DATA:
            item = by_row.get(row.index)
            if item is not None and item.item_type not in NON_PROPOSAL_TYPES:
                run.append(item)
        elif row.kind == RowKind.BLANK:
            close()
        elif row.kind == RowKind.SUM:
            close(row)
    close()
    return groups
