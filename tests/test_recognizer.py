"""Tests for takeoff record recognition."""

import re

import pytest

from calcbook.items import ItemRecognizer, ItemType, RecognitionRule, Section, normalize_unit
from calcbook.items.recognizer import section_for_category


@pytest.mark.parametrize("description,category,unit,item_type", [
    ('Heel block (2\'-0"x2\'-0"x3\'-0")', "SOE", "EA", ItemType.HEEL_BLOCK),
    ('HP12x63 soldier pile H=24\'-9"', "SOE", "EA", ItemType.SOLDIER_PILE_HP),
    ('9.625"Øx0.545" drilled soldier pile H=27\'-10"', "SOE", "EA", ItemType.SOLDIER_PILE_DRILLED),
    ("Timber lagging H=10'-0\"", "SOE", "SQ FT", ItemType.TIMBER_LAGGING),
    ("Waler W12x58", "SOE", "FT", ItemType.WALER),
    ("Upper raker W14x90", "SOE", "FT", ItemType.UPPER_RAKER),
    ('SF (2\'-0"x1\'-0")', "Foundation", "FT", ItemType.STRIP_FOOTING),
    ("Stairs on grade (5'-0\" wide)", "Foundation", "EA", ItemType.STAIRS_ON_GRADE),
    ('SOG 6" thick', "Foundation", "SQ FT", ItemType.SOG_SLAB),
    ("Soil excavation H=10'-0\"", "Excavation", "SQ FT", ItemType.EXCAVATION_AREA),
    ('Demo SOG 4" thick', "Demolition", "SQ FT", ItemType.DEMO_SLAB_ON_GRADE),
    ("Demo curb", "Demolition", "FT", ItemType.DEMO_EXTRA_FT),
    ("Line drilling", "Rock Excavation", "FT", ItemType.LINE_DRILLING),
])
def test_recognize(recognizer, make_record, description, category, unit, item_type):
    items = recognizer.recognize(make_record(description, category, 1, unit))
    assert [i.item_type for i in items] == [item_type]


def test_recognized_item_carries_record_data(recognizer, make_record):
    record = make_record("Heel block (2'-0\"x2'-0\"x3'-0\")", "SOE", 4, "ea", "SOE-200", raw_row=7)
    (item,) = recognizer.recognize(record)
    assert item.section == Section.SOE
    assert item.subsection == "Heel blocks"
    assert item.unit == "EA"
    assert item.takeoff == 4
    assert item.record is record
    assert item.group_key == "DIM_2'-0\""
    assert item.parsed_data.bracket == (2.0, 2.0, 3.0)


def test_blank_category_searches_every_section(recognizer, make_record):
    (item,) = recognizer.recognize(make_record("Rock excavation", "", 100, "CY"))
    assert item.section == Section.ROCK_EXCAVATION
    assert item.item_type == ItemType.ROCK_EXCAVATION


def test_unknown_category_is_unused(recognizer, make_record):
    items, unused = recognizer.recognize_all([
        make_record("Conduit run", "Electrical", 50, "FT"),
        make_record("Heel block (2'-0\"x2'-0\"x3'-0\")", "SOE", 2, "EA"),
    ])
    assert [i.item_type for i in items] == [ItemType.HEEL_BLOCK]
    assert [r.description for r in unused] == ["Conduit run"]


def test_unmatched_description_is_unused(recognizer, make_record):
    items, unused = recognizer.recognize_all([make_record("Coffee break", "SOE", 1, "EA")])
    assert items == []
    assert len(unused) == 1


def test_pit_record_yields_exterior_and_negative_walls(recognizer, make_record):
    items = recognizer.recognize(make_record("Elevator pit (8\"x10'-0\")", "Waterproofing", 40, "FT"))
    assert [(i.item_type, i.subsection) for i in items] == [
        (ItemType.WP_EXTERIOR_PIT_WALL, "Exterior side"),
        (ItemType.WP_NEGATIVE_WALL, "Negative side"),
    ]


def test_soldier_piles_group_by_dimensions(recognizer, make_record):
    (item,) = recognizer.recognize(make_record('HP12x63 soldier pile H=24\'-9"', "SOE", 8, "EA"))
    assert item.group_key == "HP-24.75"


def test_record_height_fills_missing_token(recognizer, make_record):
    (item,) = recognizer.recognize(make_record("Timber lagging", "SOE", 100, "SQ FT", height=12.0))
    assert item.parsed_data.height == 12.0


def test_section_for_category():
    assert section_for_category("Rock Excavation") == Section.ROCK_EXCAVATION
    assert section_for_category("Support of Excavation") == Section.SOE
    assert section_for_category("Excavation") == Section.EXCAVATION
    assert section_for_category("") is None
    assert section_for_category("Electrical") is None


def test_normalize_unit():
    assert normalize_unit("sf") == "SQ FT"
    assert normalize_unit("lf") == "FT"
    assert normalize_unit("ea") == "EA"
    assert normalize_unit("Ton") == "TON"
    assert normalize_unit("") == ""


def test_custom_rules(make_record):
    rule = RecognitionRule(section=Section.SOE, item_types=(ItemType.BUTTON,), pattern=re.compile(r"nub", re.I))
    recognizer = ItemRecognizer([rule])
    (item,) = recognizer.recognize(make_record("Concrete nub", "SOE", 3, "EA"))
    assert item.item_type == ItemType.BUTTON
