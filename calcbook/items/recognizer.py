"""
Item Recognizer - routes raw takeoff records to item types.

Recognition is keyword based and best effort: an ordered rule table is
scanned and the first match wins. A record the table does not recognize
is returned as unused, never raised. Records are scoped to a section by
their estimate category when one is given.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from ..patterns import extract, grouping_key, soldier_pile_group_key
from .records import ParsedItem, TakeoffRecord
from .types import GROUP_SUM_SUBSECTIONS, ITEM_SUBSECTIONS, SECTION_ORDER, ItemType, Section

logger = logging.getLogger(__name__)


# Estimate category aliases, longest first so "rock excavation" wins
CATEGORY_ALIASES: List[Tuple[str, Section]] = [
    ("support of excavation", Section.SOE),
    ("rock excavation", Section.ROCK_EXCAVATION),
    ("waterproofing", Section.WATERPROOFING),
    ("demolition", Section.DEMOLITION),
    ("foundation", Section.FOUNDATION),
    ("excavation", Section.EXCAVATION),
    ("demo", Section.DEMOLITION),
    ("soe", Section.SOE),
]

UNIT_ALIASES = {
    'sq ft': 'SQ FT', 'sqft': 'SQ FT', 'sf': 'SQ FT', 'sq. ft.': 'SQ FT',
    'ft': 'FT', 'lf': 'FT', 'lin ft': 'FT',
    'ea': 'EA', 'each': 'EA',
    'cy': 'CY',
}

PIT_PATTERN = (
    r'(?:elev\.?|elevator)(?:\s+pit)?|detention\s+tank|house\s+trap|grease\s+trap|'
    r'(?:deep|duplex)\s+sewage\s+ejector'
)


def normalize_unit(unit: str) -> str:
    key = (unit or '').strip().lower()
    return UNIT_ALIASES.get(key, (unit or '').strip().upper())


@dataclass(frozen=True)
class RecognitionRule:
    """One routing rule; a record may yield several item types."""
    section: Section
    item_types: Tuple[ItemType, ...]
    pattern: Pattern
    unit: Optional[str] = None
    exclude: Optional[Pattern] = None
    category: Optional[Pattern] = None
    scoped_only: bool = False

    def matches(self, text: str, unit: str, category: str) -> bool:
        if self.unit is not None and unit != self.unit:
            return False
        if self.exclude is not None and self.exclude.search(text):
            return False
        if self.category is not None:
            return bool(self.category.search(category)) or bool(self.pattern.search(text))
        return bool(self.pattern.search(text))


def _rule(section: Section, types, pattern: str, unit: Optional[str] = None,
          exclude: Optional[str] = None, category: Optional[str] = None,
          scoped_only: bool = False) -> RecognitionRule:
    if isinstance(types, ItemType):
        types = (types,)
    return RecognitionRule(
        section=section,
        item_types=tuple(types),
        pattern=re.compile(pattern, re.IGNORECASE),
        unit=unit,
        exclude=re.compile(exclude, re.IGNORECASE) if exclude else None,
        category=re.compile(category, re.IGNORECASE) if category else None,
        scoped_only=scoped_only,
    )


# =============================================================================
# RULE TABLE
# =============================================================================

_D, _E, _R = Section.DEMOLITION, Section.EXCAVATION, Section.ROCK_EXCAVATION
_S, _F, _W = Section.SOE, Section.FOUNDATION, Section.WATERPROOFING

DEFAULT_RULES: List[RecognitionRule] = [
    # Demolition
    _rule(_D, ItemType.DEMO_SLAB_ON_GRADE, r'\bdemo\w*\s+(?:sog\b|slab on grade)'),
    _rule(_D, ItemType.DEMO_RAMP_ON_GRADE, r'\bdemo\w*\s+(?:rog\b|ramp on grade)'),
    _rule(_D, ItemType.DEMO_STRIP_FOOTING, r'\bdemo\w*\s+(?:sf\b|strip footing)'),
    _rule(_D, ItemType.DEMO_FOUNDATION_WALL, r'\bdemo\w*\s+(?:fw\b|foundation wall)'),
    _rule(_D, ItemType.DEMO_RETAINING_WALL, r'\bdemo\w*\s+(?:rw\b|retaining wall)'),
    _rule(_D, ItemType.DEMO_ISOLATED_FOOTING, r'\bdemo\w*\s+(?:isolated footing|f-?\d)'),
    _rule(_D, ItemType.DEMO_STAIR_ON_GRADE, r'\bdemo\w*\s+stair'),
    _rule(_D, ItemType.DEMO_EXTRA_SQFT, r'\bdemo', unit='SQ FT'),
    _rule(_D, ItemType.DEMO_EXTRA_FT, r'\bdemo', unit='FT'),
    _rule(_D, ItemType.DEMO_EXTRA_EA, r'\bdemo', unit='EA'),

    # Excavation
    _rule(_E, ItemType.MUD_SLAB, r'mud\s*slab'),
    _rule(_E, ItemType.BACKFILL_LINEAR, r'backfill', unit='FT'),
    _rule(_E, ItemType.BACKFILL_AREA, r'backfill'),
    _rule(_E, ItemType.EXCAVATION_EACH, r'.', unit='EA', scoped_only=True),
    _rule(_E, ItemType.EXCAVATION_LINEAR, r'^(?:sf|wf|st)\b|underground piping|strip footing'),
    _rule(_E, ItemType.EXCAVATION_LINEAR, r'.', unit='FT', scoped_only=True),
    _rule(_E, ItemType.EXCAVATION_AREA, r'^(?:soil\s+)?exc|slope'),
    _rule(_E, ItemType.EXCAVATION_AREA, r'.', scoped_only=True),

    # Rock excavation
    _rule(_R, ItemType.LINE_DRILLING, r'line\s+drill'),
    _rule(_R, ItemType.ROCK_SUMP_PIT, r'sump\s+pit'),
    _rule(_R, ItemType.ROCK_CONCRETE_PIER, r'\bpier'),
    _rule(_R, ItemType.ROCK_EXCAVATION, r'rock\s+exc'),
    _rule(_R, ItemType.ROCK_EXCAVATION, r'rock|exc|slab|pit', scoped_only=True),

    # SOE
    _rule(_S, ItemType.SUPPORTING_ANGLE, r'supporting\s+angle'),
    _rule(_S, ItemType.PRIMARY_SECANT_PILE, r'primary\s+secant'),
    _rule(_S, ItemType.SECONDARY_SECANT_PILE, r'secondary\s+secant'),
    _rule(_S, ItemType.TANGENT_PILE, r'tangent\s+pile'),
    _rule(_S, ItemType.SOLDIER_PILE_HP, r'HP\s*\d+\s*x\s*\d+'),
    _rule(_S, ItemType.SOLDIER_PILE_DRILLED, r'soldier\s+pile|drilled\s+pile|Ø|ø'),
    _rule(_S, ItemType.SHEET_PILE, r'sheet\s+pil'),
    _rule(_S, ItemType.TIMBER_LAGGING, r'lagging'),
    _rule(_S, ItemType.TIMBER_SHEETING, r'timber\s+sheeting'),
    _rule(_S, ItemType.UPPER_RAKER, r'upper\s+raker'),
    _rule(_S, ItemType.LOWER_RAKER, r'lower\s+raker'),
    _rule(_S, ItemType.RAKER, r'raker'),
    _rule(_S, ItemType.INNER_CORNER_BRACE, r'corner\s+brace'),
    _rule(_S, ItemType.KNEE_BRACE, r'knee\s+brace'),
    _rule(_S, ItemType.WALER, r'waler'),
    _rule(_S, ItemType.STAND_OFF, r'stand\s*-?\s*off'),
    _rule(_S, ItemType.KICKER, r'kicker'),
    _rule(_S, ItemType.ROLL_CHOCK, r'roll\s+chock'),
    _rule(_S, ItemType.STUD_BEAM, r'stud\s+beam'),
    _rule(_S, ItemType.CHANNEL, r'channel|\bMC\d'),
    _rule(_S, ItemType.PARGING, r'parging'),
    _rule(_S, ItemType.HEEL_BLOCK, r'heel\s+block'),
    _rule(_S, ItemType.UNDERPINNING, r'underpinning'),
    _rule(_S, ItemType.ROCK_ANCHOR, r'rock\s+anchor'),
    _rule(_S, ItemType.ROCK_BOLT, r'rock\s+bolt'),
    _rule(_S, ItemType.TIE_BACK, r'tie\s*-?\s*back'),
    _rule(_S, ItemType.ANCHOR, r'anchor'),
    _rule(_S, ItemType.CONCRETE_SOIL_RETENTION_PIER, r'soil\s+retention\s+pier'),
    _rule(_S, ItemType.GUIDE_WALL, r'guide\s+wall'),
    _rule(_S, ItemType.DOWEL_BAR, r'dowel'),
    _rule(_S, ItemType.ROCK_PIN, r'rock\s+pin'),
    _rule(_S, ItemType.SHOTCRETE, r'shotcrete'),
    _rule(_S, ItemType.PERMISSION_GROUTING, r'grouting'),
    _rule(_S, ItemType.BUTTON, r'button'),
    _rule(_S, ItemType.ROCK_STABILIZATION, r'rock\s+stabili[sz]ation'),
    _rule(_S, ItemType.FORM_BOARD, r'form\s*board'),

    # Foundation
    _rule(_F, ItemType.STELCOR_PILE, r'stelcor'),
    _rule(_F, ItemType.HELICAL_FOUNDATION_PILE, r'helical'),
    _rule(_F, ItemType.CFA_PILE, r'\bcfa\b'),
    _rule(_F, ItemType.DRIVEN_FOUNDATION_PILE, r'driven|HP\s*\d+\s*x\s*\d+'),
    _rule(_F, ItemType.DRILLED_FOUNDATION_PILE, r'drilled|caisson|Ø|ø'),
    _rule(_F, ItemType.PILE_CAP, r'pile\s+cap|^pc-?\d'),
    _rule(_F, ItemType.STEP_FOOTING, r'^st\s*[-(\d]|step\s+footing'),
    _rule(_F, ItemType.STRIP_FOOTING, r'^(?:sf|wf)\b|strip\s+footing|wall\s+footing'),
    _rule(_F, ItemType.ISOLATED_FOOTING, r'isolated\s+footing|^f-?\d|^f\s*\('),
    _rule(_F, ItemType.PILASTER, r'pilaster'),
    _rule(_F, ItemType.GRADE_BEAM, r'grade\s+beam|^gb-?\d'),
    _rule(_F, ItemType.TIE_BEAM, r'tie\s+beam'),
    _rule(_F, ItemType.THICKENED_SLAB, r'thickened\s+slab'),
    _rule(_F, ItemType.CORBEL, r'corbel'),
    _rule(_F, ItemType.ELEVATOR_PIT_SUMP, r'sump'),
    _rule(_F, ItemType.DETENTION_TANK_SLAB, r'detention\s+tank.*slab'),
    _rule(_F, ItemType.DETENTION_TANK_WALL, r'detention\s+tank'),
    _rule(_F, ItemType.ELEVATOR_PIT_SLAB, r'(?:elev\.?|elevator)(?:\s+pit)?\s+(?:slab|mat)'),
    _rule(_F, ItemType.ELEVATOR_PIT_WALL, r'(?:elev\.?|elevator)(?:\s+pit)?'),
    _rule(_F, ItemType.PIER, r'\bpier'),
    _rule(_F, ItemType.RETAINING_WALL, r'retaining\s+wall|^rw\b'),
    _rule(_F, ItemType.BARRIER_WALL, r'barrier\s+wall'),
    _rule(_F, ItemType.STEM_WALL, r'stem\s+wall'),
    _rule(_F, ItemType.FOUNDATION_WALL, r'foundation\s+wall|^fw\b|liner\s+wall'),
    _rule(_F, ItemType.MAT_HAUNCH, r'haunch'),
    _rule(_F, ItemType.MAT_SLAB, r'\bmat\b'),
    _rule(_F, ItemType.MUD_SLAB_FOUNDATION, r'mud\s*slab'),
    _rule(_F, ItemType.SOG_GRAVEL, r'gravel'),
    _rule(_F, ItemType.SOG_GEOTEXTILE, r'geotextile|filter\s+fabric'),
    _rule(_F, ItemType.SOG_STEP, r'sog\s+step'),
    _rule(_F, ItemType.SOG_SLAB, r'\bsog\b|slab\s+on\s+grade|pressure\s+slab'),
    _rule(_F, ItemType.LANDINGS_ON_GRADE, r'landings?\b'),
    _rule(_F, ItemType.STAIRS_ON_GRADE, r'stairs?\b'),
    _rule(_F, ItemType.ELECTRIC_CONDUIT, r'conduit'),

    # Waterproofing
    _rule(_W, ItemType.WP_NEGATIVE_SLAB, r'(?:' + PIT_PATTERN + r')(?:\s+pit)?\s+(?:lid\s+)?slab'),
    _rule(_W, ItemType.WP_HORIZONTAL, r'horizontal'),
    _rule(_W, ItemType.WP_HORIZONTAL, r'\bsog\b|slab\s+on\s+grade|\bmat\b|slab', scoped_only=True),
    _rule(_W, (ItemType.WP_EXTERIOR_PIT_WALL, ItemType.WP_NEGATIVE_WALL), PIT_PATTERN),
    _rule(_W, ItemType.WP_NEGATIVE_WALL, r'negative', category=r'negative'),
    _rule(_W, ItemType.WP_EXTERIOR_WALL,
          r'^(?:fw|rw)\s*\(|barrier\s+wall\s*\(|liner\s+wall\s*\(|stem\s+wall\s*\('),
]


def section_for_category(category: str) -> Optional[Section]:
    """Section named by an estimate category, None when blank or unknown."""
    text = (category or '').strip().lower()
    if not text:
        return None
    for alias, section in CATEGORY_ALIASES:
        if alias in text:
            return section
    return None


class ItemRecognizer:
    """Turns TakeoffRecords into ParsedItems."""

    def __init__(self, rules: Optional[Sequence[RecognitionRule]] = None):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    def _candidate_rules(self, record: TakeoffRecord) -> List[RecognitionRule]:
        category = (record.estimate_category or '').strip()
        section = section_for_category(category)
        if section is not None:
            return [r for r in self.rules if r.section == section]
        if category:
            # Named trade outside the six sections
            return []
        order = {s: i for i, s in enumerate(SECTION_ORDER)}
        unscoped = [r for r in self.rules if not r.scoped_only]
        return sorted(unscoped, key=lambda r: order[r.section])

    def match(self, record: TakeoffRecord) -> Optional[RecognitionRule]:
        text = (record.description or '').strip()
        if not text:
            return None
        unit = normalize_unit(record.unit)
        category = record.estimate_category or ''
        for rule in self._candidate_rules(record):
            if rule.matches(text, unit, category):
                return rule
        return None

    def recognize(self, record: TakeoffRecord) -> List[ParsedItem]:
        """Items for one record; empty when nothing matches."""
        rule = self.match(record)
        if rule is None:
            return []

        dims = extract(record.description)
        if not dims.known('height') and record.height is not None:
            dims = dims.with_values(height=record.height)
        if not dims.known('width') and record.width is not None:
            dims = dims.with_values(width=record.width)

        items = []
        for item_type in rule.item_types:
            section, subsection = ITEM_SUBSECTIONS[item_type]
            if (section, subsection) in GROUP_SUM_SUBSECTIONS:
                key = soldier_pile_group_key(dims)
            else:
                key = grouping_key(record.description)
            items.append(ParsedItem(
                section=section,
                subsection=subsection,
                item_type=item_type,
                parsed_data=dims,
                particulars=record.description.strip(),
                takeoff=record.takeoff,
                unit=normalize_unit(record.unit),
                record=record,
                group_key=key,
            ))
        return items

    def recognize_all(self, records: Iterable[TakeoffRecord]) -> Tuple[List[ParsedItem], List[TakeoffRecord]]:
        """
        Recognize records in source order.

        Returns:
            (items, unused records)
        """
        items: List[ParsedItem] = []
        unused: List[TakeoffRecord] = []
        for record in records:
            recognized = self.recognize(record)
            if recognized:
                items.extend(recognized)
                for item in recognized:
                    logger.debug(f"Row {record.raw_row}: {item.item_type.value} ({item.subsection})")
            else:
                unused.append(record)
        if unused:
            logger.info(f"{len(unused)} takeoff records not recognized")
        logger.info(f"Recognized {len(items)} items")
        return items, unused
