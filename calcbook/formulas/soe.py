"""
SOE (support of excavation) formulas.

Piles:      H = design height rounded up to 5 ft, I = H*C, K = I*weight, M = C
Steel:      I from takeoff (rakers +15%), K = I*weight, M from QTY
Concrete:   J = C*H*G, L = J*F/27 for block-type items
Sheeting:   I = C, J = I*H
"""

from ..items.types import ItemType
from ..patterns import UNKNOWN, PartialDimensions, pile_weight
from ..workbook.model import Column
from .base import RowFormulas, bracket_lwh

RAKER_FACTOR = 1.15
ROCK_BOLT_EXTRA_LENGTH = 5


def _weight(dims: PartialDimensions):
    """Weight per foot: from the section designator, else from pipe size."""
    if dims.known('weight'):
        return dims.weight
    if dims.known('diameter') and dims.known('thickness'):
        return pile_weight(dims.diameter, dims.thickness)
    return UNKNOWN


def _design_height(dims: PartialDimensions):
    if dims.known('height'):
        return dims.calculated_height
    if dims.known('length_field'):
        return dims.length_field
    return UNKNOWN


# =============================================================================
# PILES
# =============================================================================

def build_soldier_pile(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, _design_height(dims))
    rf.formula(Column.FT, f"H{r}*C{r}")
    rf.weighted(Column.LBS, Column.FT, _weight(dims))
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_unweighted_pile(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Concrete piles (primary secant, tangent): no steel weight."""
    r = rf.row
    rf.value(Column.HEIGHT, _design_height(dims))
    rf.formula(Column.FT, f"H{r}*C{r}")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_sheet_pile(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, _design_height(dims))
    rf.formula(Column.FT, f"C{r}")
    rf.formula(Column.SQFT, f"I{r}*H{r}")
    rf.weighted(Column.LBS, Column.SQFT, dims.weight)


# =============================================================================
# SHEETING
# =============================================================================

def build_sheeting(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Lagging, timber sheeting, parging: I=C, J=I*H."""
    r = rf.row
    rf.value(Column.HEIGHT, dims.height)
    rf.formula(Column.FT, f"C{r}")
    rf.formula(Column.SQFT, f"I{r}*H{r}")


def build_backpacking(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.ref_formula(Column.TAKEOFF, "J{lagging_sum}", "lagging_sum")
    rf.formula(Column.SQFT, f"C{r}")


# =============================================================================
# STEEL BRACING
# =============================================================================

def build_bracing(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Waler, stand off, kicker, inner corner brace: I=C, K=I*wt, M=E."""
    r = rf.row
    rf.formula(Column.FT, f"C{r}")
    rf.weighted(Column.LBS, Column.FT, dims.weight)
    rf.formula(Column.QTY_FINAL, f"E{r}")


def build_raker(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.formula(Column.FT, f"C{r}*{RAKER_FACTOR}")
    rf.weighted(Column.LBS, Column.FT, dims.weight)
    rf.formula(Column.QTY_FINAL, f"E{r}")


def build_member(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Channel, roll chock, stud beam, knee brace: I=C*H, K=I*wt, M=C."""
    r = rf.row
    rf.value(Column.HEIGHT, dims.height)
    rf.formula(Column.FT, f"C{r}*H{r}")
    rf.weighted(Column.LBS, Column.FT, dims.weight)
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_supporting_angle(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, dims.height)
    rf.formula(Column.FT, f"H{r}*E{r}*C{r}")
    rf.weighted(Column.LBS, Column.FT, dims.weight)
    rf.formula(Column.QTY_FINAL, f"C{r}*E{r}")


# =============================================================================
# CONCRETE BLOCKS
# =============================================================================

def build_block(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Heel blocks, soil retention piers, buttons: J=C*H*G, L=J*F/27, M=C."""
    r = rf.row
    length, width, height = bracket_lwh(dims)
    rf.value(Column.LENGTH, length)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.SQFT, f"C{r}*H{r}*G{r}")
    rf.formula(Column.CY, f"J{r}*F{r}/27")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_underpinning(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    length, width, height = bracket_lwh(dims)
    rf.value(Column.LENGTH, length)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.FT, f"F{r}*C{r}")
    rf.formula(Column.SQFT, f"C{r}*H{r}*G{r}")
    rf.formula(Column.CY, f"J{r}*F{r}/27")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_guide_wall(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    _, width, height = bracket_lwh(dims)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.FT, f"C{r}")
    rf.formula(Column.SQFT, f"I{r}*G{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_shotcrete(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.WIDTH, dims.slab_thickness)
    rf.value(Column.HEIGHT, dims.height)
    rf.formula(Column.FT, f"C{r}")
    rf.formula(Column.SQFT, f"C{r}*H{r}")
    rf.formula(Column.CY, f"J{r}*G{r}/27")


def build_area_by_height(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Permission grouting, form board: I=C, J=C*H."""
    r = rf.row
    rf.value(Column.HEIGHT, dims.height)
    rf.formula(Column.FT, f"C{r}")
    rf.formula(Column.SQFT, f"C{r}*H{r}")


def build_rock_stabilization(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, dims.value_or('height', dims.slab_thickness))
    rf.formula(Column.SQFT, f"C{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


# =============================================================================
# ANCHORS, BOLTS, PINS
# =============================================================================

def build_rock_anchor(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.LENGTH, _design_height(dims))
    rf.formula(Column.FT, f"F{r}*C{r}")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_rock_bolt(rf: RowFormulas, dims: PartialDimensions) -> None:
    """E = bolts along the run at the O.C. spacing, F = bond length + 5 ft."""
    r = rf.row
    if dims.known('spacing') and dims.spacing > 0:
        rf.formula(Column.QTY, f"ROUNDUP(C{r}/{dims.spacing:g},0)+1")
    if dims.known('bond_length'):
        rf.value(Column.LENGTH, dims.bond_length + ROCK_BOLT_EXTRA_LENGTH)
    rf.formula(Column.FT, f"F{r}*E{r}")
    rf.formula(Column.QTY_FINAL, f"E{r}")


def build_tie_back(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Anchors and tie backs: H = free + bond length, I=H*C, M=C."""
    r = rf.row
    rf.value(Column.HEIGHT, _design_height(dims))
    rf.formula(Column.FT, f"H{r}*C{r}")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_pin(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Dowel bars, rock pins: one per takeoff point."""
    r = rf.row
    rf.value(Column.QTY, 1)
    rf.value(Column.HEIGHT, _design_height(dims))
    rf.formula(Column.FT, f"C{r}*E{r}*H{r}")
    rf.formula(Column.QTY_FINAL, f"C{r}*E{r}")


BUILDERS = {
    ItemType.SOLDIER_PILE_DRILLED: build_soldier_pile,
    ItemType.SOLDIER_PILE_HP: build_soldier_pile,
    ItemType.SECONDARY_SECANT_PILE: build_soldier_pile,
    ItemType.PRIMARY_SECANT_PILE: build_unweighted_pile,
    ItemType.TANGENT_PILE: build_unweighted_pile,
    ItemType.SHEET_PILE: build_sheet_pile,
    ItemType.TIMBER_LAGGING: build_sheeting,
    ItemType.TIMBER_SHEETING: build_sheeting,
    ItemType.PARGING: build_sheeting,
    ItemType.BACKPACKING: build_backpacking,
    ItemType.WALER: build_bracing,
    ItemType.STAND_OFF: build_bracing,
    ItemType.KICKER: build_bracing,
    ItemType.INNER_CORNER_BRACE: build_bracing,
    ItemType.RAKER: build_raker,
    ItemType.UPPER_RAKER: build_raker,
    ItemType.LOWER_RAKER: build_raker,
    ItemType.CHANNEL: build_member,
    ItemType.ROLL_CHOCK: build_member,
    ItemType.STUD_BEAM: build_member,
    ItemType.KNEE_BRACE: build_member,
    ItemType.SUPPORTING_ANGLE: build_supporting_angle,
    ItemType.HEEL_BLOCK: build_block,
    ItemType.CONCRETE_SOIL_RETENTION_PIER: build_block,
    ItemType.BUTTON: build_block,
    ItemType.UNDERPINNING: build_underpinning,
    ItemType.GUIDE_WALL: build_guide_wall,
    ItemType.SHOTCRETE: build_shotcrete,
    ItemType.PERMISSION_GROUTING: build_area_by_height,
    ItemType.FORM_BOARD: build_area_by_height,
    ItemType.ROCK_STABILIZATION: build_rock_stabilization,
    ItemType.ROCK_ANCHOR: build_rock_anchor,
    ItemType.ROCK_BOLT: build_rock_bolt,
    ItemType.ANCHOR: build_tie_back,
    ItemType.TIE_BACK: build_tie_back,
    ItemType.DOWEL_BAR: build_pin,
    ItemType.ROCK_PIN: build_pin,
}
