"""
Foundation formulas.

Pile families follow the SOE pile algebra. Concrete members come in
three shapes:
- Strips (I=C, J=I*H, L=J*G/27): walls, beams, thickened slabs
- Blocks (J=C*H*G, L=J*F/27, M=C): pile caps, pilasters
- Slabs (J=C, L=J*H/27): mat, pit and slab on grade
"""

from ..items.types import ItemType
from ..patterns import UNKNOWN, PartialDimensions, pile_weight
from ..workbook.model import Column
from .base import RowFormulas, bracket_lwh, height_or_thickness

STAIR_TREAD = "11/12"
STAIR_RISER = "7/12"
LANDING_THICKNESS = 0.67
STAIR_SLAB_FACTOR = 1.3
SUMP_AREA = 16
SUMP_CY = 1.3


def _pile_height(dims: PartialDimensions):
    if dims.known('height'):
        return dims.calculated_height
    return dims.length_field


def _pile_weight(dims: PartialDimensions, diameter=None):
    if dims.known('weight'):
        return dims.weight
    diameter = dims.diameter if diameter is None else diameter
    if diameter is not UNKNOWN and dims.known('thickness'):
        return pile_weight(diameter, dims.thickness)
    return UNKNOWN


# =============================================================================
# PILES
# =============================================================================

def build_drilled_pile(rf: RowFormulas, dims: PartialDimensions) -> None:
    """
    Drilled caisson. A dual-diameter casing ("24"Øx0.5" & 20"Ø") carries
    the second casing length in E and both weights in K.
    """
    r = rf.row
    rf.value(Column.HEIGHT, _pile_height(dims))
    rf.formula(Column.FT, f"H{r}*C{r}")
    rf.formula(Column.QTY_FINAL, f"C{r}")
    if dims.known('diameter2'):
        rf.formula(Column.SQFT, f"E{r}*C{r}")
        weight1 = _pile_weight(dims)
        weight2 = _pile_weight(dims, dims.diameter2)
        if weight1 is not UNKNOWN and weight2 is not UNKNOWN:
            rf.formula(Column.LBS, f"(I{r}*{weight1:.3f})+(J{r}*{weight2:.3f})")
        return
    rf.weighted(Column.LBS, Column.FT, _pile_weight(dims))


def build_steel_pile(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Helical, driven and Stelcor piles."""
    r = rf.row
    rf.value(Column.HEIGHT, _pile_height(dims))
    rf.formula(Column.FT, f"H{r}*C{r}")
    rf.weighted(Column.LBS, Column.FT, _pile_weight(dims))
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_cfa_pile(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, _pile_height(dims))
    rf.formula(Column.FT, f"H{r}*C{r}")
    rf.formula(Column.QTY_FINAL, f"C{r}")


# =============================================================================
# CONCRETE MEMBERS
# =============================================================================

def build_block(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    length, width, height = bracket_lwh(dims)
    rf.value(Column.LENGTH, length)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.SQFT, f"C{r}*H{r}*G{r}")
    rf.formula(Column.CY, f"J{r}*F{r}/27")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_strip_footing(rf: RowFormulas, dims: PartialDimensions) -> None:
    """SF / WF: bracket is (width x depth)."""
    r = rf.row
    _, width, height = bracket_lwh(dims)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.FT, f"C{r}")
    rf.formula(Column.SQFT, f"G{r}*I{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_strip(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Walls and beams: bracket is (thickness x height)."""
    r = rf.row
    _, width, height = bracket_lwh(dims)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.FT, f"C{r}")
    rf.formula(Column.SQFT, f"H{r}*I{r}")
    rf.formula(Column.CY, f"J{r}*G{r}/27")


def build_isolated(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Isolated footings and piers: J=C*F*G, L=J*H/27, M=C."""
    r = rf.row
    length, width, height = bracket_lwh(dims)
    rf.value(Column.LENGTH, length)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.SQFT, f"C{r}*F{r}*G{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_slab(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, height_or_thickness(dims))
    rf.formula(Column.SQFT, f"C{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_sump(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.formula(Column.SQFT, f"{SUMP_AREA}*C{r}")
    rf.formula(Column.CY, f"C{r}*{SUMP_CY}")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_geotextile(rf: RowFormulas, dims: PartialDimensions) -> None:
    rf.formula(Column.SQFT, f"C{rf.row}")


def build_electric_conduit(rf: RowFormulas, dims: PartialDimensions) -> None:
    rf.formula(Column.FT, f"C{rf.row}")


# =============================================================================
# STAIRS
# =============================================================================

def build_stairs(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Stairs on grade: takeoff is the riser count, G the stair width."""
    r = rf.row
    rf.formula(Column.LENGTH, STAIR_TREAD)
    rf.value(Column.WIDTH, dims.width)
    rf.formula(Column.HEIGHT, STAIR_RISER)
    rf.formula(Column.SQFT, f"C{r}*G{r}*F{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")
    rf.formula(Column.QTY_FINAL, f"C{r}")


def build_landings(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, LANDING_THICKNESS)
    rf.formula(Column.SQFT, f"C{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_stair_slab(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Inclined slab under a flight, sized from the stairs row."""
    r = rf.row
    rf.ref_formula(Column.TAKEOFF, "C{stairs_row}*" + str(STAIR_SLAB_FACTOR), "stairs_row")
    rf.ref_formula(Column.WIDTH, "G{stairs_row}", "stairs_row")
    rf.value(Column.HEIGHT, LANDING_THICKNESS)
    rf.formula(Column.FT, f"C{r}")
    rf.formula(Column.SQFT, f"I{r}*H{r}")
    rf.formula(Column.CY, f"J{r}*G{r}/27")


BUILDERS = {
    ItemType.DRILLED_FOUNDATION_PILE: build_drilled_pile,
    ItemType.HELICAL_FOUNDATION_PILE: build_steel_pile,
    ItemType.DRIVEN_FOUNDATION_PILE: build_steel_pile,
    ItemType.STELCOR_PILE: build_steel_pile,
    ItemType.CFA_PILE: build_cfa_pile,
    ItemType.PILE_CAP: build_block,
    ItemType.PILASTER: build_block,
    ItemType.STRIP_FOOTING: build_strip_footing,
    ItemType.STEP_FOOTING: build_strip,
    ItemType.ISOLATED_FOOTING: build_isolated,
    ItemType.PIER: build_isolated,
    ItemType.GRADE_BEAM: build_strip,
    ItemType.TIE_BEAM: build_strip,
    ItemType.THICKENED_SLAB: build_strip,
    ItemType.CORBEL: build_strip,
    ItemType.FOUNDATION_WALL: build_strip,
    ItemType.RETAINING_WALL: build_strip,
    ItemType.BARRIER_WALL: build_strip,
    ItemType.STEM_WALL: build_strip,
    ItemType.ELEVATOR_PIT_WALL: build_strip,
    ItemType.DETENTION_TANK_WALL: build_strip,
    ItemType.MAT_HAUNCH: build_strip,
    ItemType.SOG_STEP: build_strip,
    ItemType.ELEVATOR_PIT_SLAB: build_slab,
    ItemType.DETENTION_TANK_SLAB: build_slab,
    ItemType.MAT_SLAB: build_slab,
    ItemType.MUD_SLAB_FOUNDATION: build_slab,
    ItemType.SOG_SLAB: build_slab,
    ItemType.SOG_GRAVEL: build_slab,
    ItemType.ELEVATOR_PIT_SUMP: build_sump,
    ItemType.SOG_GEOTEXTILE: build_geotextile,
    ItemType.STAIRS_ON_GRADE: build_stairs,
    ItemType.LANDINGS_ON_GRADE: build_landings,
    ItemType.STAIR_SLAB: build_stair_slab,
    ItemType.ELECTRIC_CONDUIT: build_electric_conduit,
}
