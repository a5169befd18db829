"""
Item taxonomy, takeoff records and the recognizer that connects them.
"""

from .types import (
    Section,
    SECTION_ORDER,
    ItemType,
    ITEM_SUBSECTIONS,
    SUBSECTION_ORDER,
    GROUP_SUM_SUBSECTIONS,
    DERIVED_TYPES,
    MANUAL_INPUT_TYPES,
    section_of,
    subsection_of,
    section_from_name,
)
from .records import TakeoffRecord, ParsedItem
from .recognizer import ItemRecognizer, RecognitionRule, DEFAULT_RULES, normalize_unit

__all__ = [
    "Section",
    "SECTION_ORDER",
    "ItemType",
    "ITEM_SUBSECTIONS",
    "SUBSECTION_ORDER",
    "GROUP_SUM_SUBSECTIONS",
    "DERIVED_TYPES",
    "MANUAL_INPUT_TYPES",
    "section_of",
    "subsection_of",
    "section_from_name",
    "TakeoffRecord",
    "ParsedItem",
    "ItemRecognizer",
    "RecognitionRule",
    "DEFAULT_RULES",
    "normalize_unit",
]
