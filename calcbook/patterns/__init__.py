"""
Pattern extraction: dimension parsing and token extraction from takeoff text.
"""

from .units import (
    parse_feet_inches,
    convert_to_feet,
    format_feet_inches,
    round_up_to_multiple_of_5,
    parse_bracket_dimensions,
    normalize_fractions,
    format_page_refs,
)
from .extract import (
    UNKNOWN,
    PartialDimensions,
    extract,
    pile_weight,
    is_hp_section,
    grouping_key,
    soldier_pile_group_key,
)

__all__ = [
    "parse_feet_inches",
    "convert_to_feet",
    "format_feet_inches",
    "round_up_to_multiple_of_5",
    "parse_bracket_dimensions",
    "normalize_fractions",
    "format_page_refs",
    "UNKNOWN",
    "PartialDimensions",
    "extract",
    "pile_weight",
    "is_hp_section",
    "grouping_key",
    "soldier_pile_group_key",
]
