"""
Item Taxonomy - sections, subsections and the closed set of item types.

Every data row in the calculation sheet carries exactly one ItemType.
ITEM_SUBSECTIONS maps each type to the (section, subsection) it is laid
out under; the builder registry and the aggregation rule table are keyed
on the same names, and tests check the three stay in sync.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Tuple


class Section(Enum):
    """Trade sections, in processing order."""
    DEMOLITION = "Demolition"
    EXCAVATION = "Excavation"
    ROCK_EXCAVATION = "Rock Excavation"
    SOE = "SOE"
    FOUNDATION = "Foundation"
    WATERPROOFING = "Waterproofing"


SECTION_ORDER: Tuple[Section, ...] = (
    Section.DEMOLITION,
    Section.EXCAVATION,
    Section.ROCK_EXCAVATION,
    Section.SOE,
    Section.FOUNDATION,
    Section.WATERPROOFING,
)


class ItemType(Enum):
    """Data-row item types."""
    # Demolition
    DEMO_SLAB_ON_GRADE = "demo_slab_on_grade"
    DEMO_RAMP_ON_GRADE = "demo_ramp_on_grade"
    DEMO_STRIP_FOOTING = "demo_strip_footing"
    DEMO_FOUNDATION_WALL = "demo_foundation_wall"
    DEMO_RETAINING_WALL = "demo_retaining_wall"
    DEMO_ISOLATED_FOOTING = "demo_isolated_footing"
    DEMO_STAIR_ON_GRADE = "demo_stair_on_grade"
    DEMO_EXTRA_SQFT = "demo_extra_sqft"
    DEMO_EXTRA_FT = "demo_extra_ft"
    DEMO_EXTRA_EA = "demo_extra_ea"

    # Excavation
    EXCAVATION_AREA = "excavation_area"
    EXCAVATION_LINEAR = "excavation_linear"
    EXCAVATION_EACH = "excavation_each"
    EXCAVATION_HAVG = "excavation_havg"
    BACKFILL_AREA = "backfill_area"
    BACKFILL_LINEAR = "backfill_linear"
    MUD_SLAB = "mud_slab"

    # Rock excavation
    ROCK_CONCRETE_PIER = "rock_concrete_pier"
    ROCK_EXCAVATION = "rock_excavation"
    ROCK_SUMP_PIT = "rock_sump_pit"
    LINE_DRILLING = "line_drilling"

    # SOE
    SOLDIER_PILE_DRILLED = "soldier_pile_drilled"
    SOLDIER_PILE_HP = "soldier_pile_hp"
    PRIMARY_SECANT_PILE = "primary_secant_pile"
    SECONDARY_SECANT_PILE = "secondary_secant_pile"
    TANGENT_PILE = "tangent_pile"
    SHEET_PILE = "sheet_pile"
    TIMBER_LAGGING = "timber_lagging"
    BACKPACKING = "backpacking"
    TIMBER_SHEETING = "timber_sheeting"
    WALER = "waler"
    RAKER = "raker"
    UPPER_RAKER = "upper_raker"
    LOWER_RAKER = "lower_raker"
    STAND_OFF = "stand_off"
    KICKER = "kicker"
    CHANNEL = "channel"
    ROLL_CHOCK = "roll_chock"
    STUD_BEAM = "stud_beam"
    INNER_CORNER_BRACE = "inner_corner_brace"
    KNEE_BRACE = "knee_brace"
    SUPPORTING_ANGLE = "supporting_angle"
    PARGING = "parging"
    HEEL_BLOCK = "heel_block"
    UNDERPINNING = "underpinning"
    ROCK_ANCHOR = "rock_anchor"
    ROCK_BOLT = "rock_bolt"
    ANCHOR = "anchor"
    TIE_BACK = "tie_back"
    CONCRETE_SOIL_RETENTION_PIER = "concrete_soil_retention_pier"
    GUIDE_WALL = "guide_wall"
    DOWEL_BAR = "dowel_bar"
    ROCK_PIN = "rock_pin"
    SHOTCRETE = "shotcrete"
    PERMISSION_GROUTING = "permission_grouting"
    BUTTON = "button"
    ROCK_STABILIZATION = "rock_stabilization"
    FORM_BOARD = "form_board"

    # Foundation
    DRILLED_FOUNDATION_PILE = "drilled_foundation_pile"
    HELICAL_FOUNDATION_PILE = "helical_foundation_pile"
    DRIVEN_FOUNDATION_PILE = "driven_foundation_pile"
    STELCOR_PILE = "stelcor_drilled_displacement_pile"
    CFA_PILE = "cfa_pile"
    PILE_CAP = "pile_cap"
    STRIP_FOOTING = "strip_footing"
    STEP_FOOTING = "step_footing"
    ISOLATED_FOOTING = "isolated_footing"
    PILASTER = "pilaster"
    GRADE_BEAM = "grade_beam"
    TIE_BEAM = "tie_beam"
    THICKENED_SLAB = "thickened_slab"
    PIER = "pier"
    CORBEL = "corbel"
    FOUNDATION_WALL = "foundation_wall"
    RETAINING_WALL = "retaining_wall"
    BARRIER_WALL = "barrier_wall"
    STEM_WALL = "stem_wall"
    ELEVATOR_PIT_WALL = "elevator_pit_wall"
    ELEVATOR_PIT_SLAB = "elevator_pit_slab"
    ELEVATOR_PIT_SUMP = "elevator_pit_sump"
    DETENTION_TANK_WALL = "detention_tank_wall"
    DETENTION_TANK_SLAB = "detention_tank_slab"
    MAT_SLAB = "mat_slab"
    MAT_HAUNCH = "mat_haunch"
    MUD_SLAB_FOUNDATION = "mud_slab_foundation"
    SOG_SLAB = "sog_slab"
    SOG_GRAVEL = "sog_gravel"
    SOG_GEOTEXTILE = "sog_geotextile"
    SOG_STEP = "sog_step"
    STAIRS_ON_GRADE = "stairs_on_grade"
    LANDINGS_ON_GRADE = "landings_on_grade"
    STAIR_SLAB = "stair_slab"
    ELECTRIC_CONDUIT = "electric_conduit"

    # Waterproofing
    WP_EXTERIOR_WALL = "waterproofing_exterior_side"
    WP_EXTERIOR_PIT_WALL = "waterproofing_exterior_side_pit"
    WP_NEGATIVE_WALL = "waterproofing_negative_side_wall"
    WP_NEGATIVE_SLAB = "waterproofing_negative_side_slab"
    WP_HORIZONTAL = "waterproofing_horizontal"


# =============================================================================
# SUBSECTIONS
# =============================================================================

SUBSECTION_ORDER: Dict[Section, List[str]] = {
    Section.DEMOLITION: [
        "Demo slab on grade",
        "Demo Ramp on grade",
        "Demo strip footing",
        "Demo foundation wall",
        "Demo retaining wall",
        "Demo isolated footing",
        "Demo stair on grade",
        "Demo extra line items",
    ],
    Section.EXCAVATION: [
        "Excavation",
        "Backfill",
        "Mud slab",
    ],
    Section.ROCK_EXCAVATION: [
        "Excavation",
        "Line drill",
    ],
    Section.SOE: [
        "Drilled soldier pile",
        "Primary secant piles",
        "Secondary secant piles",
        "Tangent piles",
        "Sheet pile",
        "Timber lagging",
        "Backpacking",
        "Timber sheeting",
        "Waler",
        "Raker",
        "Upper Raker",
        "Lower Raker",
        "Stand off",
        "Kicker",
        "Channel",
        "Roll chock",
        "Stud beam",
        "Inner corner brace",
        "Knee brace",
        "Supporting angle",
        "Parging",
        "Heel blocks",
        "Underpinning",
        "Rock anchors",
        "Rock bolts",
        "Anchor",
        "Tie back",
        "Concrete soil retention piers",
        "Guide wall",
        "Dowel bar",
        "Rock pins",
        "Shotcrete",
        "Permission grouting",
        "Buttons",
        "Rock stabilization",
        "Form board",
    ],
    Section.FOUNDATION: [
        "Drilled foundation pile",
        "Helical foundation pile",
        "Driven foundation pile",
        "Stelcor drilled displacement pile",
        "CFA pile",
        "Pile caps",
        "Strip Footings",
        "Isolated Footings",
        "Pilaster",
        "Grade beams",
        "Tie beam",
        "Thickened slab",
        "Pier",
        "Corbel",
        "Foundation Wall",
        "Retaining walls",
        "Barrier wall",
        "Stem wall",
        "Elevator Pit",
        "Detention tank",
        "Mat slab",
        "Mud Slab",
        "SOG",
        "Stairs on grade Stairs",
        "Electric conduit",
    ],
    Section.WATERPROOFING: [
        "Exterior side",
        "Negative side",
        "Horizontal",
    ],
}


def _entries(section: Section, pairs) -> Dict[ItemType, Tuple[Section, str]]:
    return {item_type: (section, name) for item_type, name in pairs}


ITEM_SUBSECTIONS: Dict[ItemType, Tuple[Section, str]] = {}

ITEM_SUBSECTIONS.update(_entries(Section.DEMOLITION, [
    (ItemType.DEMO_SLAB_ON_GRADE, "Demo slab on grade"),
    (ItemType.DEMO_RAMP_ON_GRADE, "Demo Ramp on grade"),
    (ItemType.DEMO_STRIP_FOOTING, "Demo strip footing"),
    (ItemType.DEMO_FOUNDATION_WALL, "Demo foundation wall"),
    (ItemType.DEMO_RETAINING_WALL, "Demo retaining wall"),
    (ItemType.DEMO_ISOLATED_FOOTING, "Demo isolated footing"),
    (ItemType.DEMO_STAIR_ON_GRADE, "Demo stair on grade"),
    (ItemType.DEMO_EXTRA_SQFT, "Demo extra line items"),
    (ItemType.DEMO_EXTRA_FT, "Demo extra line items"),
    (ItemType.DEMO_EXTRA_EA, "Demo extra line items"),
]))

ITEM_SUBSECTIONS.update(_entries(Section.EXCAVATION, [
    (ItemType.EXCAVATION_AREA, "Excavation"),
    (ItemType.EXCAVATION_LINEAR, "Excavation"),
    (ItemType.EXCAVATION_EACH, "Excavation"),
    (ItemType.EXCAVATION_HAVG, "Excavation"),
    (ItemType.BACKFILL_AREA, "Backfill"),
    (ItemType.BACKFILL_LINEAR, "Backfill"),
    (ItemType.MUD_SLAB, "Mud slab"),
]))

ITEM_SUBSECTIONS.update(_entries(Section.ROCK_EXCAVATION, [
    (ItemType.ROCK_CONCRETE_PIER, "Excavation"),
    (ItemType.ROCK_EXCAVATION, "Excavation"),
    (ItemType.ROCK_SUMP_PIT, "Excavation"),
    (ItemType.LINE_DRILLING, "Line drill"),
]))

ITEM_SUBSECTIONS.update(_entries(Section.SOE, [
    (ItemType.SOLDIER_PILE_DRILLED, "Drilled soldier pile"),
    (ItemType.SOLDIER_PILE_HP, "Drilled soldier pile"),
    (ItemType.PRIMARY_SECANT_PILE, "Primary secant piles"),
    (ItemType.SECONDARY_SECANT_PILE, "Secondary secant piles"),
    (ItemType.TANGENT_PILE, "Tangent piles"),
    (ItemType.SHEET_PILE, "Sheet pile"),
    (ItemType.TIMBER_LAGGING, "Timber lagging"),
    (ItemType.BACKPACKING, "Backpacking"),
    (ItemType.TIMBER_SHEETING, "Timber sheeting"),
    (ItemType.WALER, "Waler"),
    (ItemType.RAKER, "Raker"),
    (ItemType.UPPER_RAKER, "Upper Raker"),
    (ItemType.LOWER_RAKER, "Lower Raker"),
    (ItemType.STAND_OFF, "Stand off"),
    (ItemType.KICKER, "Kicker"),
    (ItemType.CHANNEL, "Channel"),
    (ItemType.ROLL_CHOCK, "Roll chock"),
    (ItemType.STUD_BEAM, "Stud beam"),
    (ItemType.INNER_CORNER_BRACE, "Inner corner brace"),
    (ItemType.KNEE_BRACE, "Knee brace"),
    (ItemType.SUPPORTING_ANGLE, "Supporting angle"),
    (ItemType.PARGING, "Parging"),
    (ItemType.HEEL_BLOCK, "Heel blocks"),
    (ItemType.UNDERPINNING, "Underpinning"),
    (ItemType.ROCK_ANCHOR, "Rock anchors"),
    (ItemType.ROCK_BOLT, "Rock bolts"),
    (ItemType.ANCHOR, "Anchor"),
    (ItemType.TIE_BACK, "Tie back"),
    (ItemType.CONCRETE_SOIL_RETENTION_PIER, "Concrete soil retention piers"),
    (ItemType.GUIDE_WALL, "Guide wall"),
    (ItemType.DOWEL_BAR, "Dowel bar"),
    (ItemType.ROCK_PIN, "Rock pins"),
    (ItemType.SHOTCRETE, "Shotcrete"),
    (ItemType.PERMISSION_GROUTING, "Permission grouting"),
    (ItemType.BUTTON, "Buttons"),
    (ItemType.ROCK_STABILIZATION, "Rock stabilization"),
    (ItemType.FORM_BOARD, "Form board"),
]))

ITEM_SUBSECTIONS.update(_entries(Section.FOUNDATION, [
    (ItemType.DRILLED_FOUNDATION_PILE, "Drilled foundation pile"),
    (ItemType.HELICAL_FOUNDATION_PILE, "Helical foundation pile"),
    (ItemType.DRIVEN_FOUNDATION_PILE, "Driven foundation pile"),
    (ItemType.STELCOR_PILE, "Stelcor drilled displacement pile"),
    (ItemType.CFA_PILE, "CFA pile"),
    (ItemType.PILE_CAP, "Pile caps"),
    (ItemType.STRIP_FOOTING, "Strip Footings"),
    (ItemType.STEP_FOOTING, "Strip Footings"),
    (ItemType.ISOLATED_FOOTING, "Isolated Footings"),
    (ItemType.PILASTER, "Pilaster"),
    (ItemType.GRADE_BEAM, "Grade beams"),
    (ItemType.TIE_BEAM, "Tie beam"),
    (ItemType.THICKENED_SLAB, "Thickened slab"),
    (ItemType.PIER, "Pier"),
    (ItemType.CORBEL, "Corbel"),
    (ItemType.FOUNDATION_WALL, "Foundation Wall"),
    (ItemType.RETAINING_WALL, "Retaining walls"),
    (ItemType.BARRIER_WALL, "Barrier wall"),
    (ItemType.STEM_WALL, "Stem wall"),
    (ItemType.ELEVATOR_PIT_WALL, "Elevator Pit"),
    (ItemType.ELEVATOR_PIT_SLAB, "Elevator Pit"),
    (ItemType.ELEVATOR_PIT_SUMP, "Elevator Pit"),
    (ItemType.DETENTION_TANK_WALL, "Detention tank"),
    (ItemType.DETENTION_TANK_SLAB, "Detention tank"),
    (ItemType.MAT_SLAB, "Mat slab"),
    (ItemType.MAT_HAUNCH, "Mat slab"),
    (ItemType.MUD_SLAB_FOUNDATION, "Mud Slab"),
    (ItemType.SOG_SLAB, "SOG"),
    (ItemType.SOG_GRAVEL, "SOG"),
    (ItemType.SOG_GEOTEXTILE, "SOG"),
    (ItemType.SOG_STEP, "SOG"),
    (ItemType.STAIRS_ON_GRADE, "Stairs on grade Stairs"),
    (ItemType.LANDINGS_ON_GRADE, "Stairs on grade Stairs"),
    (ItemType.STAIR_SLAB, "Stairs on grade Stairs"),
    (ItemType.ELECTRIC_CONDUIT, "Electric conduit"),
]))

ITEM_SUBSECTIONS.update(_entries(Section.WATERPROOFING, [
    (ItemType.WP_EXTERIOR_WALL, "Exterior side"),
    (ItemType.WP_EXTERIOR_PIT_WALL, "Exterior side"),
    (ItemType.WP_NEGATIVE_WALL, "Negative side"),
    (ItemType.WP_NEGATIVE_SLAB, "Negative side"),
    (ItemType.WP_HORIZONTAL, "Horizontal"),
]))


# Subsections where every group gets its own sum row
GROUP_SUM_SUBSECTIONS: FrozenSet[Tuple[Section, str]] = frozenset({
    (Section.SOE, "Drilled soldier pile"),
    (Section.FOUNDATION, "Drilled foundation pile"),
    (Section.FOUNDATION, "Helical foundation pile"),
    (Section.FOUNDATION, "Driven foundation pile"),
    (Section.FOUNDATION, "Stelcor drilled displacement pile"),
    (Section.FOUNDATION, "CFA pile"),
})

# Rows produced by the layout rather than by a takeoff record
DERIVED_TYPES: FrozenSet[ItemType] = frozenset({
    ItemType.EXCAVATION_HAVG,
    ItemType.BACKPACKING,
    ItemType.STAIR_SLAB,
})

# Rows whose blank dimension cells are expected to be filled in by hand
MANUAL_INPUT_TYPES: FrozenSet[ItemType] = frozenset({
    ItemType.EXCAVATION_LINEAR,
    ItemType.MUD_SLAB,
    ItemType.MUD_SLAB_FOUNDATION,
    ItemType.SOG_GRAVEL,
    ItemType.SHOTCRETE,
    ItemType.WALER,
    ItemType.RAKER,
    ItemType.UPPER_RAKER,
    ItemType.LOWER_RAKER,
    ItemType.STAND_OFF,
    ItemType.KICKER,
    ItemType.INNER_CORNER_BRACE,
})


def section_of(item_type: ItemType) -> Section:
    return ITEM_SUBSECTIONS[item_type][0]


def subsection_of(item_type: ItemType) -> str:
    return ITEM_SUBSECTIONS[item_type][1]


def section_from_name(name: str) -> Section:
    """Look up a section by its display name (case-insensitive)."""
    key = (name or '').strip().lower()
    for section in Section:
        if section.value.lower() == key:
            return section
    raise ValueError(f"Unknown section: {name!r}")


def subsection_position(section: Section, subsection: str) -> int:
    """Template position of a subsection; unknown names sort last."""
    names = SUBSECTION_ORDER.get(section, [])
    try:
        return names.index(subsection)
    except ValueError:
        return len(names)
