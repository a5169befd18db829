"""
Takeoff records and parsed items.

A TakeoffRecord is one row of the raw digitizer export. A ParsedItem is
that record after recognition: typed, placed under a subsection, with the
dimensional tokens pulled out of its description.
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..patterns import PartialDimensions
from .types import ItemType, Section


@dataclass(frozen=True)
class TakeoffRecord:
    """One raw takeoff row (header is row 1, so data starts at raw_row 2)."""
    description: str
    estimate_category: str = ""
    takeoff: Optional[float] = None
    unit: str = ""
    page: str = ""
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    raw_row: int = 0
    count: Optional[float] = None


@dataclass(frozen=True)
class ParsedItem:
    """A recognized takeoff item, ready for layout."""
    section: Section
    subsection: str
    item_type: Optional[ItemType]
    parsed_data: PartialDimensions
    particulars: str = ""
    takeoff: Optional[float] = None
    unit: str = ""
    record: Optional[TakeoffRecord] = None
    group_key: str = "OTHER"
    row: Optional[int] = None

    @property
    def is_blank(self) -> bool:
        """Blank-particulars items mark group boundaries."""
        return not (self.particulars or "").strip()

    @property
    def weight(self) -> float:
        """Takeoff used when averaging over a group (0 when absent)."""
        return float(self.takeoff) if self.takeoff else 0.0

    def at_row(self, row: int) -> 'ParsedItem':
        return replace(self, row=row)

    @classmethod
    def blank(cls, section: Section, subsection: str, row: Optional[int] = None) -> 'ParsedItem':
        """Boundary marker standing in for an empty row."""
        return cls(
            section=section,
            subsection=subsection,
            item_type=None,
            parsed_data=PartialDimensions(),
            row=row,
        )
