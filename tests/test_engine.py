"""Tests for formula assignment."""

import pytest

from calcbook.formulas import AggregationRuleTable, RowFormulas, assign, assign_row, assign_sum
from calcbook.items import ItemType, Section
from calcbook.patterns import extract
from calcbook.workbook import Column


def _by_address(writes):
    return {w.address: w.content for w in writes}


def test_hp_soldier_pile_row():
    writes = assign(6, ItemType.SOLDIER_PILE_HP, extract("HP12x63 H=24'-9\""))
    assert _by_address(writes) == {
        "H6": 25,
        "I6": "=H6*C6",
        "K6": "=I6*63.000",
        "M6": "=C6",
    }


def test_drilled_soldier_pile_weight_from_pipe_size():
    writes = _by_address(assign(
        6, ItemType.SOLDIER_PILE_DRILLED, extract('9.625"Øx0.545" H=27\'-10" E=15\'-0"')
    ))
    assert writes["H6"] == 30
    assert writes["K6"] == "=I6*52.901"


def test_missing_value_leaves_cell_blank():
    writes = _by_address(assign(6, ItemType.DEMO_SLAB_ON_GRADE, extract("Demo SOG")))
    assert "H6" not in writes
    assert writes == {"J6": "=C6", "L6": "=J6*H6/27"}


def test_excavation_area_row():
    writes = _by_address(assign(6, ItemType.EXCAVATION_AREA, extract("Soil excavation H=10'-0\"")))
    assert writes == {
        "H6": 10.0,
        "J6": "=C6",
        "K6": "=J6*H6/27",
        "L6": "=K6*1.3",
    }


def test_rock_bolt_row():
    writes = _by_address(assign(
        6, ItemType.ROCK_BOLT, extract("Rock bolt @ 7'-0\" O.C. bond length=10'-0\"")
    ))
    assert writes == {
        "E6": "=ROUNDUP(C6/7,0)+1",
        "F6": 15.0,
        "I6": "=F6*E6",
        "M6": "=E6",
    }


def test_heel_block_row_reads_bracket():
    writes = _by_address(assign(6, ItemType.HEEL_BLOCK, extract("Heel block (2'-0\"x2'-0\"x3'-0\")")))
    assert writes["F6"] == 2.0
    assert writes["G6"] == 2.0
    assert writes["H6"] == 3.0
    assert writes["J6"] == "=C6*H6*G6"
    assert writes["L6"] == "=J6*F6/27"


def test_waterproofing_exterior_height_adds_lap():
    writes = _by_address(assign(6, ItemType.WP_EXTERIOR_WALL, extract("FW (1'-0\"x10'-0\")")))
    assert writes == {"H6": 12.0, "I6": "=C6", "J6": "=H6*I6"}


def test_stairs_use_tread_and_riser_formulas():
    writes = _by_address(assign(6, ItemType.STAIRS_ON_GRADE, extract("Stairs (5'-0\" wide)")))
    assert writes["F6"] == "=11/12"
    assert writes["G6"] == 5.0
    assert writes["H6"] == "=7/12"


def test_missing_reference_is_recoverable():
    rf = assign_row(20, ItemType.STAIR_SLAB, extract(""), refs={})
    assert [e.address for e in rf.errors] == ["C20", "G20"]
    assert Column.TAKEOFF not in rf.columns()
    assert Column.FT in rf.columns()


def test_reference_formula():
    rf = assign_row(8, ItemType.EXCAVATION_HAVG, extract(""), refs={'sum_row': 7})
    assert _by_address(rf.writes()) == {"C8": "=(L7*27)/J7"}
    assert rf.errors == []


def test_row_formulas_rounds_floats():
    rf = RowFormulas(3)
    rf.value(Column.HEIGHT, 1 / 3)
    rf.value(Column.WIDTH, None)
    assert _by_address(rf.writes()) == {"H3": 0.333333}


def test_assign_sum_writes_only_ruled_columns():
    writes = assign_sum(12, Section.SOE, "Heel blocks", 10, 11, AggregationRuleTable())
    assert _by_address(writes) == {"L12": "=SUM(L10:L11)", "M12": "=SUM(M10:M11)"}


def test_assign_sum_rejects_empty_range():
    with pytest.raises(ValueError):
        assign_sum(12, Section.SOE, "Heel blocks", 11, 10, AggregationRuleTable())
