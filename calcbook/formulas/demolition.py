"""
Demolition formulas.

Slab-type items are measured in SQ FT, wall and footing strips in FT and
isolated footings in EA; all convert to CY through the height column.
"""

from ..items.types import ItemType
from ..patterns import PartialDimensions
from ..workbook.model import Column
from .base import RowFormulas, bracket_lwh


def build_slab(rf: RowFormulas, dims: PartialDimensions) -> None:
    """SQ FT item: J=C, L=J*H/27."""
    r = rf.row
    rf.value(Column.HEIGHT, dims.slab_thickness)
    rf.formula(Column.SQFT, f"C{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_linear(rf: RowFormulas, dims: PartialDimensions) -> None:
    """FT item with a (width x height) bracket: J=C*G, L=J*H/27."""
    r = rf.row
    _, width, height = bracket_lwh(dims)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.SQFT, f"C{r}*G{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_each(rf: RowFormulas, dims: PartialDimensions) -> None:
    """EA item with an (L x W x H) bracket: J=F*G*C, L=J*H/27, M=C."""
    r = rf.row
    length, width, height = bracket_lwh(dims)
    rf.value(Column.LENGTH, length)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.SQFT, f"F{r}*G{r}*C{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")
    rf.formula(Column.QTY_FINAL, f"C{r}")


BUILDERS = {
    ItemType.DEMO_SLAB_ON_GRADE: build_slab,
    ItemType.DEMO_RAMP_ON_GRADE: build_slab,
    ItemType.DEMO_STAIR_ON_GRADE: build_slab,
    ItemType.DEMO_EXTRA_SQFT: build_slab,
    ItemType.DEMO_STRIP_FOOTING: build_linear,
    ItemType.DEMO_FOUNDATION_WALL: build_linear,
    ItemType.DEMO_RETAINING_WALL: build_linear,
    ItemType.DEMO_EXTRA_FT: build_linear,
    ItemType.DEMO_ISOLATED_FOOTING: build_each,
    ItemType.DEMO_EXTRA_EA: build_each,
}
