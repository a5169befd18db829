"""Rock excavation formulas."""

from ..items.types import ItemType
from ..patterns import PartialDimensions
from ..workbook.model import Column
from .base import RowFormulas, bracket_lwh, height_or_thickness


def build_concrete_pier(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    length, width, height = bracket_lwh(dims)
    rf.value(Column.LENGTH, length)
    rf.value(Column.WIDTH, width)
    rf.value(Column.HEIGHT, height)
    rf.formula(Column.SQFT, f"C{r}*F{r}*G{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_rock_excavation(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.value(Column.HEIGHT, height_or_thickness(dims))
    rf.formula(Column.SQFT, f"C{r}")
    rf.formula(Column.CY, f"J{r}*H{r}/27")


def build_sump_pit(rf: RowFormulas, dims: PartialDimensions) -> None:
    r = rf.row
    rf.formula(Column.SQFT, f"16*C{r}")
    rf.formula(Column.CY, f"1.3*C{r}")


def build_line_drilling(rf: RowFormulas, dims: PartialDimensions) -> None:
    """One drill line per 2 ft of rock depth."""
    r = rf.row
    rf.value(Column.HEIGHT, dims.height)
    rf.formula(Column.QTY, f"ROUNDUP(H{r}/2,0)")
    rf.formula(Column.FT, f"E{r}*C{r}")


BUILDERS = {
    ItemType.ROCK_CONCRETE_PIER: build_concrete_pier,
    ItemType.ROCK_EXCAVATION: build_rock_excavation,
    ItemType.ROCK_SUMP_PIT: build_sump_pit,
    ItemType.LINE_DRILLING: build_line_drilling,
}
