"""
Unit Conversion Utilities
Handles US takeoff drawing conventions:
- Feet-inches (e.g., 27'-10", 4'-0")
- Inches only (e.g., 8", 6-1/2")
- Unicode fractions (e.g., 4½")
- Bracketed dimension sets (e.g., (4'-6"x4'-6"x3'-4"))
"""

import math
import re
from typing import List, Optional, Sequence

# Unicode vulgar fractions found in digitizer exports
UNICODE_FRACTIONS = {
    '½': '1/2',
    '⅓': '1/3',
    '⅔': '2/3',
    '¼': '1/4',
    '¾': '3/4',
    '⅕': '1/5',
    '⅖': '2/5',
    '⅗': '3/5',
    '⅘': '4/5',
    '⅙': '1/6',
    '⅚': '5/6',
    '⅛': '1/8',
    '⅜': '3/8',
    '⅝': '5/8',
    '⅞': '7/8',
}

# Curly quotes and primes normalised to ASCII
_QUOTE_MAP = str.maketrans({
    '’': "'",
    '′': "'",
    '”': '"',
    '″': '"',
    '“': '"',
})

_FEET_INCH = re.compile(
    r"^(\d+(?:\.\d+)?)\s*'\s*-?\s*"
    r"(?:(\d+(?:\.\d+)?)(?:[-\s](\d+)/(\d+))?\s*\"?)?$"
)
_INCH_ONLY = re.compile(r'^(\d+(?:\.\d+)?)(?:[-\s](\d+)/(\d+))?\s*"$')
_PLAIN = re.compile(r'^\d+(?:\.\d+)?$')

# Float noise allowed before rounding up to the next multiple
ROUNDING_TOLERANCE = 1e-9


def normalize_fractions(text: str) -> str:
    """
    Replace unicode fractions and curly quotes with ASCII forms.

    "4½\"" -> "4-1/2\"", "9⅝\"" -> "9-5/8\""
    """
    if not text:
        return text
    s = text.translate(_QUOTE_MAP)
    for char, fraction in UNICODE_FRACTIONS.items():
        s = re.sub(r'(\d+)' + re.escape(char), r'\1-' + fraction, s)
        s = s.replace(char, fraction)
    return s


def parse_feet_inches(text: str) -> Optional[float]:
    """
    Convert a dimension string to decimal feet.

    Formats supported:
    - "27'-10\"" -> 27.8333
    - "27'10\"" -> 27.8333
    - "27'" -> 27.0
    - "6'-6-1/2\"" -> 6.5417
    - "8\"" -> 0.6667
    - "12.5" -> 12.5 (bare numbers are feet)

    Returns:
        Decimal feet, or None if the string is not a dimension
    """
    if text is None:
        return None
    s = normalize_fractions(str(text)).strip()
    if not s:
        return None

    match = _FEET_INCH.match(s)
    if match:
        feet = float(match.group(1))
        inches = float(match.group(2)) if match.group(2) else 0.0
        if match.group(3):
            inches += int(match.group(3)) / int(match.group(4))
        if inches == 0:
            return feet
        return feet + inches / 12

    match = _INCH_ONLY.match(s)
    if match:
        inches = float(match.group(1))
        if match.group(2):
            inches += int(match.group(2)) / int(match.group(3))
        return inches / 12

    if _PLAIN.match(s):
        return float(s)

    return None


def convert_to_feet(text: str) -> float:
    """Lenient feet conversion for bracket values; unparseable text is 0."""
    value = parse_feet_inches(text)
    return value if value is not None else 0.0


def format_feet_inches(feet: float) -> str:
    """
    Convert decimal feet to a feet-inches string.

    27.833 -> "27'-10\"", 4.5 -> "4'-6\"", 11.99 -> "12'-0\""
    """
    sign = '-' if feet < 0 else ''
    feet = abs(feet)
    whole = int(math.floor(feet))
    inches = int(round((feet - whole) * 12))

    # Handle rounding to 12 inches
    if inches == 12:
        whole += 1
        inches = 0

    return f"{sign}{whole}'-{inches}\""


def round_up_to_multiple_of_5(value: float, step: int = 5):
    """
    Round up to the next multiple of step (5 ft by default).

    22.1 -> 25, 25.0 -> 25, 0 -> 0
    """
    return math.ceil(value / step - ROUNDING_TOLERANCE) * step


def parse_bracket_dimensions(text: str) -> List[float]:
    """
    Parse dimensions from the bracket of an item description.

    Prefers the last parenthesised group containing an 'x' separator, so
    "Pilaster (P3) (22\"x16\"x6'-0\")" reads the size group, not the mark.

    Returns:
        Values in feet, in bracket order; empty list if no bracket
    """
    if not text:
        return []
    candidates = [c.strip() for c in re.findall(r'\(([^)]+)\)', normalize_fractions(text))]
    candidates = [c for c in candidates if c]
    if not candidates:
        return []

    content = next((c for c in reversed(candidates) if 'x' in c.lower()), candidates[0])
    dims = []
    for part in re.split(r'[xX]', content):
        part = re.sub(r"^'+(?=\d)", '', part.strip())
        dims.append(convert_to_feet(part))
    return dims


def format_page_refs(refs: Sequence[str], placeholder: str = '##') -> str:
    """
    Format drawing page references for proposal text.

    ["102"] -> "102", ["102", "105"] -> "102 & 105",
    ["102", "103", "105"] -> "102, 103 & 105", [] -> "##"
    """
    items = [str(r) for r in refs if r not in (None, '')]
    if not items:
        return placeholder
    if len(items) == 1:
        return items[0]
    return ', '.join(items[:-1]) + ' & ' + items[-1]
