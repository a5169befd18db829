"""
Pattern Extraction Engine

Pulls dimensional tokens out of free-text takeoff descriptions:
- Diameter x thickness:  9.625"Øx0.545", 9-5/8" Ø x 0.545", 9.625 x0.545
- Height:                H=27'-10"
- Rock socket:           + RS=15'-0", RS=7'-0", H=32'-6"+ 7'-0" RS
- Embedment:             E=15'-0"
- Bar size:              #9
- HP section:            HP12x63
- Wide flange / channel: W12x58, MC18x42.7, WT4x17.5
- Spacing, bond length, LF=, bracket sizes, trailing thickness

A token that is not found is UNKNOWN, never zero, so averaging can skip it.
The engine is stateless; nothing here touches a workbook.
"""

import re
from dataclasses import dataclass, fields, replace
from typing import Any, Optional, Tuple

from .units import (
    normalize_fractions,
    parse_bracket_dimensions,
    parse_feet_inches,
    round_up_to_multiple_of_5,
)


class _Unknown:
    """Sentinel for a token the description does not carry."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'UNKNOWN'

    def __bool__(self):
        return False

    def __reduce__(self):
        return (_Unknown, ())


UNKNOWN = _Unknown()


# =============================================================================
# PATTERNS
# =============================================================================

# A single dimension: 27'-10", 30', 6'-6-1/2", 8", 10
DIM = r"""(\d+(?:\.\d+)?\s*'\s*-?\s*(?:\d+(?:\.\d+)?(?:-\d+/\d+)?"?)?|\d+(?:\.\d+)?(?:-\d+/\d+)?"?)"""

HP_PATTERN = re.compile(r'HP\s*(\d+)\s*[xX]\s*(\d+(?:\.\d+)?)', re.IGNORECASE)
SHAPE_WEIGHT_PATTERN = re.compile(r'(?<![A-Za-z])(?:W|MC|WT)(\d+(?:\.\d+)?)\s*[xX]\s*(\d+(?:\.\d+)?)')
DIA_THICK_MARKED = re.compile(
    r'(\d+(?:\.\d+)?(?:-\d+/\d+)?)\s*["\']?\s*(?:Ø|ø|Ã˜)\s*[xX]\s*(\d*\.?\d+)'
)
DIA_THICK_PLAIN = re.compile(
    r'(?<![A-Za-z\d.\'-])(\d+(?:\.\d+)?)\s*"?\s*[xX]\s*(0?\.\d+)'
)
SINGLE_DIAMETER = re.compile(r'(\d+(?:\.\d+)?(?:-\d+/\d+)?)\s*["\']?\s*(?:Ø|ø|Ã˜)(?!\s*[xX])')
HEIGHT_PATTERN = re.compile(r'(?<![A-Za-z])H\s*=\s*' + DIM)
EMBEDMENT_PATTERN = re.compile(r'(?<![A-Za-z])E\s*=\s*' + DIM)
ROCK_SOCKET_EQ = re.compile(r'(?<![A-Za-z])RS\s*=\s*' + DIM)
ROCK_SOCKET_PLUS = re.compile(r'\+\s*' + DIM + r'\s*RS\b')
LF_PATTERN = re.compile(r'(?<![A-Za-z])LF\s*=\s*' + DIM)
BAR_SIZE_PATTERN = re.compile(r'#\s*(\d+)')
SPACING_PATTERN = re.compile(r'@\s*' + DIM + r'\s*O\.?\s*C', re.IGNORECASE)
BOND_LENGTH_PATTERN = re.compile(r'bond\s+length\s*=\s*' + DIM, re.IGNORECASE)
THICKNESS_PATTERN = re.compile(r'(?<![\d.\'\-xX/])(\d+(?:\.\d+)?)\s*"\s*(?:thick|typ\.?)?\s*$', re.IGNORECASE)
THICK_WORD_PATTERN = re.compile(r'(\d+(?:\.\d+)?)\s*"\s*thick', re.IGNORECASE)
WIDTH_PATTERN = re.compile(DIM + r'\s*wide', re.IGNORECASE)


@dataclass(frozen=True)
class PartialDimensions:
    """
    Dimensional tokens extracted from one description.

    Lengths are decimal feet except diameter/thickness (inches, as
    written on pile schedules). Every field defaults to UNKNOWN.
    """
    diameter: Any = UNKNOWN
    thickness: Any = UNKNOWN
    diameter2: Any = UNKNOWN
    height: Any = UNKNOWN
    embedment: Any = UNKNOWN
    rock_socket: Any = UNKNOWN
    hp_type: Any = UNKNOWN
    weight: Any = UNKNOWN
    bar_size: Any = UNKNOWN
    spacing: Any = UNKNOWN
    bond_length: Any = UNKNOWN
    length_field: Any = UNKNOWN
    bracket: Any = UNKNOWN
    slab_thickness: Any = UNKNOWN
    width: Any = UNKNOWN

    def known(self, name: str) -> bool:
        """True if the named token was extracted."""
        return getattr(self, name) is not UNKNOWN

    def value_or(self, name: str, default=None):
        value = getattr(self, name)
        return default if value is UNKNOWN else value

    def bracket_value(self, index: int):
        """Bracket dimension by position, UNKNOWN if absent."""
        if self.bracket is UNKNOWN or index >= len(self.bracket):
            return UNKNOWN
        return self.bracket[index]

    @property
    def calculated_height(self):
        """Design height rounded up to 5 ft (height + rock socket when both known)."""
        if self.height is UNKNOWN:
            return UNKNOWN
        total = self.height
        if self.rock_socket is not UNKNOWN:
            total += self.rock_socket
        return round_up_to_multiple_of_5(total)

    def with_values(self, **values) -> 'PartialDimensions':
        """Copy with some tokens overridden (None means UNKNOWN)."""
        cleaned = {k: (UNKNOWN if v is None else v) for k, v in values.items()}
        return replace(self, **cleaned)

    def to_dict(self) -> dict:
        """Known tokens only."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not UNKNOWN:
                result[f.name] = list(value) if isinstance(value, tuple) else value
        return result


# =============================================================================
# EXTRACTION
# =============================================================================

def _dimension(pattern, text: str):
    match = pattern.search(text)
    if not match:
        return UNKNOWN
    value = parse_feet_inches(match.group(1))
    return UNKNOWN if value is None else value


def _inches(token: str) -> Optional[float]:
    """Parse an inch token like '9', '9.625' or '9-5/8'."""
    whole, _, fraction = token.partition('-')
    try:
        value = float(whole)
    except ValueError:
        return None
    if fraction:
        num, _, den = fraction.partition('/')
        if num.isdigit() and den.isdigit() and int(den):
            value += int(num) / int(den)
    return value


def _thickness(token: str) -> float:
    value = float(token)
    # "0545" written without the decimal point
    if 100 <= value < 1000 and value.is_integer():
        value = value / 1000
    return value


def _diameter_thickness(text: str) -> Tuple[Any, Any, Any]:
    diameter2 = UNKNOWN
    first, sep, second = text.partition('&')
    match = DIA_THICK_MARKED.search(first) or DIA_THICK_PLAIN.search(first)
    if sep:
        single = SINGLE_DIAMETER.search(second)
        if single:
            value = _inches(single.group(1))
            diameter2 = UNKNOWN if value is None else value
    if not match:
        return UNKNOWN, UNKNOWN, diameter2
    diameter = _inches(match.group(1))
    thickness = _thickness(match.group(2))
    return (UNKNOWN if diameter is None else diameter), thickness, diameter2


def extract(text: str) -> PartialDimensions:
    """
    Extract every recognizable dimensional token from a description.

    Args:
        text: Digitizer item description

    Returns:
        PartialDimensions with UNKNOWN for each token not found
    """
    if not text:
        return PartialDimensions()
    s = normalize_fractions(str(text))

    values = {}

    hp = HP_PATTERN.search(s)
    if hp:
        values['hp_type'] = f"HP{hp.group(1)}x{hp.group(2)}"
        values['weight'] = float(hp.group(2))
    else:
        shape = SHAPE_WEIGHT_PATTERN.search(s)
        if shape:
            values['weight'] = float(shape.group(2))

    diameter, thickness, diameter2 = _diameter_thickness(s)
    values['diameter'] = diameter
    values['thickness'] = thickness
    values['diameter2'] = diameter2

    values['height'] = _dimension(HEIGHT_PATTERN, s)
    values['embedment'] = _dimension(EMBEDMENT_PATTERN, s)
    rock_socket = _dimension(ROCK_SOCKET_EQ, s)
    if rock_socket is UNKNOWN:
        rock_socket = _dimension(ROCK_SOCKET_PLUS, s)
    values['rock_socket'] = rock_socket
    values['length_field'] = _dimension(LF_PATTERN, s)
    values['spacing'] = _dimension(SPACING_PATTERN, s)
    values['bond_length'] = _dimension(BOND_LENGTH_PATTERN, s)
    values['width'] = _dimension(WIDTH_PATTERN, s)

    bar = BAR_SIZE_PATTERN.search(s)
    if bar:
        values['bar_size'] = int(bar.group(1))

    bracket = parse_bracket_dimensions(s)
    if bracket:
        values['bracket'] = tuple(bracket)

    thick = THICK_WORD_PATTERN.search(s) or THICKNESS_PATTERN.search(s)
    if thick:
        values['slab_thickness'] = float(thick.group(1)) / 12

    return PartialDimensions(**values)


def pile_weight(diameter: float, thickness: float = 0.5) -> float:
    """Pipe pile weight in lbs/ft: (diameter - thickness) * thickness * 10.69."""
    return (diameter - thickness) * thickness * 10.69


def is_hp_section(text: str) -> bool:
    """True if the description names an HP section (HP12x63)."""
    return bool(text) and HP_PATTERN.search(str(text)) is not None


# =============================================================================
# GROUPING KEYS
# =============================================================================

def _inch_count(value) -> int:
    return int(round(value * 12)) if value is not UNKNOWN else 0


def soldier_pile_group_key(dims: PartialDimensions) -> str:
    """
    Group key for soldier piles.

    HP piles group by height; drilled piles by diameter, thickness and
    which of embedment / rock socket the description carries.
    """
    if dims.known('hp_type'):
        return f"HP-{dims.value_or('height', 0):g}"
    if dims.known('embedment') and dims.known('rock_socket'):
        pattern = 'E+RS'
    elif dims.known('embedment'):
        pattern = 'E'
    elif dims.known('rock_socket'):
        pattern = 'RS'
    else:
        pattern = 'H'
    return (
        f"{dims.value_or('diameter', 0):g}-{dims.value_or('thickness', 0):g}-{pattern}-"
        f"{_inch_count(dims.embedment)}-{_inch_count(dims.rock_socket)}"
    )


def grouping_key(description: str) -> str:
    """
    Generic group key for an item description.

    Order of precedence:
    1. Slab thickness ("Demo SOG 4\" thick", "... lid slab 8\"")  -> THICK_4
    2. Spacing ("Rock bolt @ 7'-0\" O.C.")                        -> SPACING_7'-0"
    3. Leading thickness ("1\" form board")                        -> THICK_1"
    4. Height parameter ("Shotcrete H=15'-0\"")                    -> H_15'-0"
    5. First bracket value ("FW (1'-0\"x10'-0\")")                 -> DIM_1'-0"
    """
    if not description:
        return 'OTHER'
    text = normalize_fractions(str(description)).strip()
    lower = text.lower()

    if 'slab' in lower or 'sog' in lower or 'rog' in lower:
        thick = THICK_WORD_PATTERN.search(text) or THICKNESS_PATTERN.search(text)
        if thick:
            return f"THICK_{thick.group(1)}"

    if '@' in text:
        spacing = re.search(r'@\s*([0-9\'"\-]+)\s*o\.?c', text, re.IGNORECASE)
        if spacing:
            return f"SPACING_{spacing.group(1).strip()}"

    leading = re.match(r'^(\d+["\'])', text)
    if leading and 'form board' in lower:
        return f"THICK_{leading.group(1)}"

    height = re.search(r'(?<![A-Za-z])H=([0-9\'"\-]+)', text, re.IGNORECASE)
    if height:
        return f"H_{height.group(1).strip()}"

    if '(' in text and 'x' in lower:
        bracket = re.search(r'\(([^x)]+)', text)
        if bracket:
            return f"DIM_{bracket.group(1).strip()}"

    return 'OTHER'
