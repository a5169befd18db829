"""Tests for proposal grouping."""

from calcbook.items import ItemType, ParsedItem, Section
from calcbook.patterns import PartialDimensions
from calcbook.proposal import Group, ProposalFamily, family_for, group, groups_from_workbook, split_hp

SOLDIER_PILE = '9.625"Øx0.545" drilled soldier pile H=27\'-10" E=15\'-0"'
HP_PILE = 'HP12x63 soldier pile H=24\'-9"'
HEEL_BLOCK = 'Heel block (2\'-0"x2\'-0"x3\'-0")'


def _item(particulars, row):
    return ParsedItem(
        section=Section.SOE,
        subsection="Heel blocks",
        item_type=ItemType.HEEL_BLOCK,
        parsed_data=PartialDimensions(),
        particulars=particulars,
        row=row,
    )


def _blank():
    return ParsedItem.blank(Section.SOE, "Heel blocks")


def test_blank_items_split_groups():
    a, b, c = _item("A", 6), _item("B", 7), _item("C", 9)
    groups = group([a, b, _blank(), c])
    assert [g.items for g in groups] == [(a, b), (c,)]
    assert groups[0].data_rows == [6, 7]
    assert groups[0].family == ProposalFamily.COUNTED


def test_consecutive_blanks_make_no_empty_group():
    a, b = _item("A", 6), _item("B", 9)
    groups = group([_blank(), a, _blank(), _blank(), b, _blank()])
    assert [g.items for g in groups] == [(a,), (b,)]


def test_split_hp_keeps_order_and_sum_row(parse):
    drilled = parse(SOLDIER_PILE, "SOE", 10, "EA", row=6)
    hp = parse(HP_PILE, "SOE", 8, "EA", row=7)
    drilled2 = parse(SOLDIER_PILE, "SOE", 5, "EA", row=8)
    mixed = Group(
        section=Section.SOE,
        subsection="Drilled soldier pile",
        items=(drilled, hp, drilled2),
        sum_row_index=9,
    )
    non_hp, hp_groups = split_hp([mixed])
    assert [g.items for g in non_hp] == [(drilled, drilled2)]
    assert [g.items for g in hp_groups] == [(hp,)]
    assert non_hp[0].sum_row_index == 9
    assert hp_groups[0].sum_row_index == 9
    assert hp_groups[0].family == ProposalFamily.HP_SOLDIER_PILE
    assert hp_groups[0].is_hp


def test_split_hp_passes_pure_groups_through(parse):
    drilled = Group(Section.SOE, "Drilled soldier pile", (parse(SOLDIER_PILE, "SOE", row=6),))
    non_hp, hp = split_hp([drilled])
    assert non_hp == [drilled]
    assert hp == []


def test_family_for(parse):
    socket = parse('9.625"Øx0.545" soldier pile H=27\'-10" RS=5\'-0"', "SOE")
    assert family_for(Section.SOE, "Drilled soldier pile", [socket]) == ProposalFamily.DRILLED_SOLDIER_PILE_RS
    assert family_for(Section.FOUNDATION, "CFA pile", []) == ProposalFamily.PILE
    assert family_for(Section.SOE, "Heel blocks", []) == ProposalFamily.COUNTED
    assert family_for(Section.SOE, "Timber lagging", []) == ProposalFamily.QUANTITY


def test_groups_from_workbook_group_sums(run, soldier_pile_records):
    result = run(soldier_pile_records)
    groups = result.groups
    assert [g.data_rows for g in groups] == [[6, 7], [10]]
    assert [g.sum_row_index for g in groups] == [8, 11]
    assert [g.family for g in groups] == [
        ProposalFamily.DRILLED_SOLDIER_PILE,
        ProposalFamily.HP_SOLDIER_PILE,
    ]


def test_groups_inside_subsection_sum_own_no_sum_row(run, make_record):
    result = run([
        make_record(HEEL_BLOCK, "SOE", 2, "EA"),
        make_record('Heel block (3\'-0"x3\'-0"x3\'-0")', "SOE", 1, "EA"),
        make_record(HEEL_BLOCK, "SOE", 3, "EA"),
        make_record('Heel block (3\'-0"x3\'-0"x3\'-0")', "SOE", 1, "EA"),
    ])
    assert [g.data_rows for g in result.groups] == [[6, 7], [9, 10]]
    assert [g.sum_row_index for g in result.groups] == [None, None]


def test_havg_row_is_not_a_proposal_item(run, make_record):
    result = run([make_record("Soil excavation H=10'-0\"", "Excavation", 1000, "SQ FT")])
    assert len(result.groups) == 1
    assert result.groups[0].data_rows == [6]
    assert result.groups[0].sum_row_index == 7


def test_stair_flights_make_separate_proposal_groups(run, make_record):
    stairs = "Stairs on grade (5'-0\" wide)"
    result = run([
        make_record(stairs, "Foundation", 10, "EA", "FO-101"),
        make_record(stairs, "Foundation", 8, "EA", "FO-101"),
        make_record('Landings on grade 8" thick', "Foundation", 40, "SQ FT", "FO-101"),
    ])
    assert [g.data_rows for g in result.groups] == [[6, 7], [9, 10, 11]]
    assert [g.sum_row_index for g in result.groups] == [None, None]
    assert [dict(line.cells) for line in result.proposal] == [
        {'FT': "SUM('Calculations Sheet'!I6:I7)", 'QTY': "SUM('Calculations Sheet'!M6:M7)"},
        {'FT': "SUM('Calculations Sheet'!I9:I11)", 'QTY': "SUM('Calculations Sheet'!M9:M11)"},
    ]
