"""
Excavation formulas.

K holds bank CY, L the swelled quantity (1.3 * CY) the section header
advertises. Backfill and mud slab only carry CY in L.
"""

from ..items.types import ItemType
from ..patterns import PartialDimensions
from ..workbook.model import Column
from .base import RowFormulas, bracket_lwh, height_or_thickness

SWELL_FACTOR = 1.3
MUD_SLAB_WASTE = 1.2


def _volume(rf: RowFormulas) -> None:
    r = rf.row
    rf.formula(Column.LBS, f"J{r}*H{r}/27")
    rf.formula(Column.CY, f"K{r}*{SWELL_FACTOR}")


def build_area(rf: RowFormulas, dims: PartialDimensions) -> None:
    rf.value(Column.HEIGHT, dims.height)
    rf.formula(Column.SQFT, f"C{rf.row}")
    _volume(rf)


def build_linear(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    _, width, height = bracket_lwh(dims)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, dims.height if dims.known('height') else height)
    rf.formula(Column.SQFT, f"C{r}*G{r}")
    _volume(rf)


def build_each(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    length, width, height = bracket_lwh(dims)
    rf.value(Column.LENGTH, length)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.SQFT, f"F{r}*G{r}*C{r}")
    _volume(rf)


def build_havg(rf: RowFormulas, dims: PartialDimensions) -> None:
    """Average excavation height from the subsection sum row."""
    rf.ref_formula(Column.TAKEOFF, "(L{sum_row}*27)/J{sum_row}", "sum_row")


def build_backfill_area(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, dims.height)
    rf.formula(Column.SQFT, f"C{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_backfill_linear(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    _, width, height = bracket_lwh(dims)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, dims.height if dims.known('height') else height)
    rf.formula(Column.SQFT, f"C{r}*G{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_mud_slab(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, height_or_thickness(dims))
    rf.formula(Column.SQFT, f"C{r}*{MUD_SLAB_WASTE}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


BUILDERS = {
    ItemType.EXCAVATION_AREA: build_area,
    ItemType.EXCAVATION_LINEAR: build_linear,
    ItemType.EXCAVATION_EACH: build_each,
    ItemType.EXCAVATION_HAVG: build_havg,
    ItemType.BACKFILL_AREA: build_backfill_area,
    ItemType.BACKFILL_LINEAR: build_backfill_linear,
    ItemType.MUD_SLAB: build_mud_slab,
}
