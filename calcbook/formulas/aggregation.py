"""
Aggregation Rule Table.

Which columns a subsection's sum row totals is data, not code: a column
missing from a subsection's entry stays blank on the sum row even when
the data rows hold values there. The Excavation subsection name occurs
under two sections, so entries are keyed by (section, subsection).
"""

import logging
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..errors import UnknownSubsectionError
from ..items.types import Section, section_from_name
from ..workbook.model import Column

logger = logging.getLogger(__name__)

I, J, K, L, M = Column.FT, Column.SQFT, Column.LBS, Column.CY, Column.QTY_FINAL


def _cols(*columns: Column) -> FrozenSet[Column]:
    return frozenset(columns)


AGGREGATION_RULES: Dict[Section, Dict[str, FrozenSet[Column]]] = {
    Section.DEMOLITION: {
        "Demo slab on grade": _cols(J, L),
        "Demo Ramp on grade": _cols(J, L),
        "Demo strip footing": _cols(J, L),
        "Demo foundation wall": _cols(J, L),
        "Demo retaining wall": _cols(J, L),
        "Demo isolated footing": _cols(J, L, M),
        "Demo stair on grade": _cols(J, L),
        "Demo extra line items": _cols(J, L, M),
    },
    Section.EXCAVATION: {
        "Excavation": _cols(J, L),
        "Backfill": _cols(J, L),
        "Mud slab": _cols(J, L),
    },
    Section.ROCK_EXCAVATION: {
        "Excavation": _cols(J, L),
        "Line drill": _cols(I),
    },
    Section.SOE: {
        "Drilled soldier pile": _cols(I, K, M),
        "Primary secant piles": _cols(I, M),
        "Secondary secant piles": _cols(I, K, M),
        "Tangent piles": _cols(I, M),
        "Sheet pile": _cols(I, J, K),
        "Timber lagging": _cols(I, J),
        "Backpacking": _cols(J),
        "Timber sheeting": _cols(I, J),
        "Waler": _cols(I, K, M),
        "Raker": _cols(I, K, M),
        "Upper Raker": _cols(I, K, M),
        "Lower Raker": _cols(I, K, M),
        "Stand off": _cols(I, K, M),
        "Kicker": _cols(I, K, M),
        "Channel": _cols(I, K, M),
        "Roll chock": _cols(I, K, M),
        "Stud beam": _cols(I, K, M),
        "Inner corner brace": _cols(I, K, M),
        "Knee brace": _cols(I, K, M),
        "Supporting angle": _cols(I, K, M),
        "Parging": _cols(I, J),
        "Heel blocks": _cols(L, M),
        "Underpinning": _cols(I, J, L, M),
        "Rock anchors": _cols(I, M),
        "Rock bolts": _cols(I, M),
        "Anchor": _cols(I, M),
        "Tie back": _cols(I, M),
        "Concrete soil retention piers": _cols(J, L, M),
        "Guide wall": _cols(I, J, L),
        "Dowel bar": _cols(I, M),
        "Rock pins": _cols(I, M),
        "Shotcrete": _cols(I, J, L),
        "Permission grouting": _cols(I, J),
        "Buttons": _cols(J, L, M),
        "Rock stabilization": _cols(J, L),
        "Form board": _cols(I, J),
    },
    Section.FOUNDATION: {
        "Drilled foundation pile": _cols(I, K, M),
        "Helical foundation pile": _cols(I, K, M),
        "Driven foundation pile": _cols(I, K, M),
        "Stelcor drilled displacement pile": _cols(I, K, M),
        "CFA pile": _cols(I, M),
        "Pile caps": _cols(J, L, M),
        "Strip Footings": _cols(I, J, L),
        "Isolated Footings": _cols(J, L, M),
        "Pilaster": _cols(J, L, M),
        "Grade beams": _cols(I, J, L),
        "Tie beam": _cols(I, J, L),
        "Thickened slab": _cols(I, J, L),
        "Pier": _cols(J, L, M),
        "Corbel": _cols(I, J, L),
        "Foundation Wall": _cols(I, J, L),
        "Retaining walls": _cols(I, J, L),
        "Barrier wall": _cols(I, J, L),
        "Stem wall": _cols(I, J, L),
        "Elevator Pit": _cols(I, J, L, M),
        "Detention tank": _cols(I, J, L),
        "Mat slab": _cols(I, J, L),
        "Mud Slab": _cols(J, L),
        "SOG": _cols(J, L),
        "Stairs on grade Stairs": _cols(I, J, L, M),
        "Electric conduit": _cols(I),
    },
    Section.WATERPROOFING: {
        "Exterior side": _cols(I, J),
        "Negative side": _cols(I, J),
        "Horizontal": _cols(J),
    },
}

# Sum-row columns written only after the main pass (see workbook.scheduler)
DEFERRED_COLUMNS: Dict[Section, FrozenSet[Column]] = {
    Section.FOUNDATION: _cols(L),
}


class AggregationRuleTable:
    """
    Lookup over the aggregation rules, with optional overrides.

    Overrides come from the `aggregation_overrides` key of the rules
    YAML: {section name: {subsection: [column letters]}}.
    """

    def __init__(self,
                 rules: Optional[Mapping[Section, Mapping[str, Iterable[Column]]]] = None,
                 deferred: Optional[Mapping[Section, Iterable[Column]]] = None):
        source = AGGREGATION_RULES if rules is None else rules
        self._rules: Dict[Section, Dict[str, FrozenSet[Column]]] = {
            section: {name: frozenset(cols) for name, cols in subsections.items()}
            for section, subsections in source.items()
        }
        source_deferred = DEFERRED_COLUMNS if deferred is None else deferred
        self._deferred: Dict[Section, FrozenSet[Column]] = {
            section: frozenset(cols) for section, cols in source_deferred.items()
        }

    @classmethod
    def from_config(cls, overrides: Optional[Mapping[str, Mapping[str, List[str]]]]) -> 'AggregationRuleTable':
        table = cls()
        for section_name, subsections in (overrides or {}).items():
            section = section_from_name(section_name)
            for subsection, letters in (subsections or {}).items():
                columns = frozenset(Column.from_letter(letter) for letter in letters)
                table._rules.setdefault(section, {})[subsection] = columns
                logger.info(
                    f"Aggregation override: {section.value} / {subsection} -> "
                    f"{', '.join(sorted(c.value for c in columns))}"
                )
        return table

    def summed_columns(self, section: Section, subsection: str) -> FrozenSet[Column]:
        """
        Columns the sum row of a subsection totals.

        Raises:
            UnknownSubsectionError: no entry for (section, subsection)
        """
        try:
            return self._rules[section][subsection]
        except KeyError:
            raise UnknownSubsectionError(
                f"No aggregation rule for {section.value} / {subsection!r}"
            ) from None

    def has(self, section: Section, subsection: str) -> bool:
        return subsection in self._rules.get(section, {})

    def is_deferred(self, section: Section, column: Column) -> bool:
        return column in self._deferred.get(section, frozenset())

    def entries(self) -> Iterator[Tuple[Section, str, FrozenSet[Column]]]:
        """Every (section, subsection, columns) entry, in table order."""
        for section, subsections in self._rules.items():
            for name, columns in subsections.items():
                yield section, name, columns

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        return {
            section.value: {
                name: sorted(c.value for c in columns)
                for name, columns in subsections.items()
            }
            for section, subsections in self._rules.items()
        }
