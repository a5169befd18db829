"""Tests for dimensional token extraction and grouping keys."""

import pytest

from calcbook.patterns import (
    UNKNOWN,
    PartialDimensions,
    extract,
    grouping_key,
    is_hp_section,
    pile_weight,
    soldier_pile_group_key,
)


def test_hp_pile():
    dims = extract("HP12x63 H=24'-9\"")
    assert dims.hp_type == "HP12x63"
    assert dims.weight == 63.0
    assert dims.height == pytest.approx(24.75)
    assert dims.diameter is UNKNOWN
    assert dims.calculated_height == 25


def test_drilled_pile_with_embedment():
    dims = extract('9.625"Øx0.545" drilled soldier pile H=27\'-10" E=15\'-0"')
    assert dims.diameter == pytest.approx(9.625)
    assert dims.thickness == pytest.approx(0.545)
    assert dims.height == pytest.approx(27 + 10 / 12)
    assert dims.embedment == pytest.approx(15.0)
    assert dims.rock_socket is UNKNOWN
    assert dims.weight is UNKNOWN


def test_fractional_diameter():
    dims = extract('9-5/8" Ø x 0.545" soldier pile')
    assert dims.diameter == pytest.approx(9.625)
    assert dims.thickness == pytest.approx(0.545)


def test_rock_socket_written_after_height():
    dims = extract('H=32\'-6"+ 7\'-0" RS')
    assert dims.height == pytest.approx(32.5)
    assert dims.rock_socket == pytest.approx(7.0)
    assert dims.calculated_height == 40


def test_rock_socket_equals_form():
    dims = extract('H=20\'-0" RS=5\'-0"')
    assert dims.rock_socket == pytest.approx(5.0)


def test_rock_bolt_tokens():
    dims = extract("Rock bolt @ 7'-0\" O.C. bond length=10'-0\" #9")
    assert dims.spacing == pytest.approx(7.0)
    assert dims.bond_length == pytest.approx(10.0)
    assert dims.bar_size == 9


def test_wide_flange_weight():
    assert extract("Waler W12x58").weight == 58.0


def test_slab_thickness_in_feet():
    assert extract('Demo SOG 4" thick').slab_thickness == pytest.approx(4 / 12)


def test_missing_tokens_are_unknown_not_zero():
    dims = extract("Timber lagging")
    assert dims.height is UNKNOWN
    assert not dims.known('height')
    assert dims.value_or('height') is None
    assert dims.calculated_height is UNKNOWN
    assert dims.to_dict() == {}


def test_empty_description():
    assert extract("") == PartialDimensions()


def test_with_values_and_to_dict():
    dims = extract("HP12x63").with_values(height=20.0, width=None)
    assert dims.height == 20.0
    assert dims.width is UNKNOWN
    assert dims.to_dict() == {'hp_type': 'HP12x63', 'weight': 63.0, 'height': 20.0}


def test_bracket_value():
    dims = extract("FW (1'-0\"x10'-0\")")
    assert dims.bracket_value(0) == pytest.approx(1.0)
    assert dims.bracket_value(1) == pytest.approx(10.0)
    assert dims.bracket_value(2) is UNKNOWN


def test_pile_weight():
    assert pile_weight(9.625, 0.545) == pytest.approx(52.900534)


def test_is_hp_section():
    assert is_hp_section("HP12x63 soldier pile")
    assert not is_hp_section("9.625\"Øx0.545\" soldier pile")
    assert not is_hp_section("")


@pytest.mark.parametrize("description,key", [
    ('Demo SOG 4" thick', "THICK_4"),
    ("Rock bolt @ 7'-0\" O.C.", "SPACING_7'-0\""),
    ("1\" form board", "THICK_1\""),
    ("Shotcrete H=15'-0\"", "H_15'-0\""),
    ("FW (1'-0\"x10'-0\")", "DIM_1'-0\""),
    ("Timber lagging", "OTHER"),
    ("", "OTHER"),
])
def test_grouping_key(description, key):
    assert grouping_key(description) == key


def test_soldier_pile_group_key():
    assert soldier_pile_group_key(extract("HP12x63 H=24'-9\"")) == "HP-24.75"
    drilled = extract('9.625"Øx0.545" H=27\'-10" E=15\'-0"')
    assert soldier_pile_group_key(drilled) == "9.625-0.545-E-180-0"
    socket = extract('9.625"Øx0.545" H=27\'-10" RS=5\'-0"')
    assert soldier_pile_group_key(socket) == "9.625-0.545-RS-0-60"
