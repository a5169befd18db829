"""
Waterproofing formulas.

Exterior side height is the second bracket value plus 2 ft of lap above
grade; negative side walls use the bracket height as is.
"""

from ..items.types import ItemType
from ..patterns import UNKNOWN, PartialDimensions
from ..workbook.model import Column
from .base import RowFormulas

EXTERIOR_LAP = 2


def _second_bracket(dims: PartialDimensions):
    return dims.bracket_value(1)


def build_exterior_wall(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    height = _second_bracket(dims)
    rf.formula(Column.FT, f"C{r}")
    rf.value(Column.HEIGHT, height + EXTERIOR_LAP if height is not UNKNOWN else UNKNOWN)
    rf.formula(Column.SQFT, f"H{r}*I{r}")


def build_exterior_pit_wall(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Pit walls also carry CY; G is left for manual input."""
    build_exterior_wall(rf, dims)
    r = rf.row
    rf.formula(Column.CY, f"J{r}*G{r}/27")


def build_negative_wall(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.formula(Column.FT, f"C{r}")
    rf.value(Column.HEIGHT, _second_bracket(dims))
    rf.formula(Column.SQFT, f"I{r}*H{r}")


def build_area(rf: RowFormulas, dims: PartialDimensions) -> None:
    rf.formula(Column.SQFT, f"C{rf.row}")


BUILDERS = {
    ItemType.WP_EXTERIOR_WALL: build_exterior_wall,
    ItemType.WP_EXTERIOR_PIT_WALL: build_exterior_pit_wall,
    ItemType.WP_NEGATIVE_WALL: build_negative_wall,
    ItemType.WP_NEGATIVE_SLAB: build_area,
    ItemType.WP_HORIZONTAL: build_area,
}
