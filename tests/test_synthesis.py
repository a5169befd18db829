"""Tests for proposal line synthesis."""

import pytest

from calcbook.items import Section
from calcbook.patterns import UNKNOWN
from calcbook.pipeline import PipelineContext
from calcbook.proposal import ProposalFamily, ProposalRuleSet, group, synthesize, synthesize_all, weighted_average

SOLDIER_PILE = '9.625"Øx0.545" drilled soldier pile H=27\'-10" E=15\'-0"'


def test_weighted_average():
    assert weighted_average([24.75, 20.25], [8, 8]) == pytest.approx(22.5)
    assert weighted_average([10.0, 20.0], [3, 1]) == pytest.approx(12.5)
    assert weighted_average([10.0, 20.0], [0, 0]) == pytest.approx(15.0)
    assert weighted_average([], []) is UNKNOWN


def test_weighted_average_ignores_non_positive_takeoffs():
    assert weighted_average([10.0, 20.0], [3, -1]) == pytest.approx(10.0)
    assert weighted_average([24.75, 20.25], [5, -5]) == pytest.approx(22.5)
    assert weighted_average([10.0, 20.0, 30.0], [0, 2, -2]) == pytest.approx(20.0)


def test_offsetting_takeoffs_still_synthesize(parse):
    items = [
        parse('HP12x63 soldier pile H=24\'-9"', "SOE", 5, "EA", "SOE-101.00", row=10),
        parse('HP12x63 soldier pile H=24\'-9"', "SOE", -5, "EA", "SOE-101.00", row=11),
    ]
    line = synthesize(group(items)[0])
    assert line.text == 'F&I new (0)no [HP12x63] soldier piles (H=25\'-0") as per SOE-101.00'
    assert line.is_complete


def test_hp_heights_average_and_round_up(parse):
    items = [
        parse('HP12x63 soldier pile H=24\'-9"', "SOE", 8, "EA", "SOE-101.00", row=10),
        parse('HP12x63 soldier pile H=20\'-3"', "SOE", 8, "EA", "SOE-101.00", row=11),
    ]
    (g,) = group(items)
    line = synthesize(g)
    assert line.family == ProposalFamily.HP_SOLDIER_PILE
    assert line.text == 'F&I new (16)no [HP12x63] soldier piles (H=25\'-0") as per SOE-101.00'
    assert line.is_complete
    assert line.cells == {
        'FT': "SUM('Calculations Sheet'!I10:I11)",
        'LBS': "SUM('Calculations Sheet'!K10:K11)",
        'QTY': "SUM('Calculations Sheet'!M10:M11)",
    }


def test_line_cells_are_read_only(parse):
    line = synthesize(group([parse(SOLDIER_PILE, "SOE", 10, "EA", "SOE-101", row=6)])[0])
    with pytest.raises(TypeError):
        line.cells['FT'] = "'Calculations Sheet'!I99"
    assert line.cells['FT'] == "SUM('Calculations Sheet'!I6:I6)"


def test_missing_token_renders_placeholder(parse):
    item = parse('9.625"Øx0.545" soldier pile H=27\'-10"', "SOE", 10, "EA", row=6)
    line = synthesize(group([item])[0])
    assert line.text == (
        'F&I new (10)no [9.625" Øx0.545" thick] drilled soldier piles '
        '(H=30\'-0", # embedment) as per ##'
    )
    assert line.unresolved == ('embedment',)
    assert not line.is_complete


def test_rock_socket_template(parse):
    item = parse('9.625"Øx0.545" soldier pile H=27\'-10" RS=5\'-0"', "SOE", 4, "EA", "SOE-101", row=6)
    line = synthesize(group([item])[0])
    assert line.family == ProposalFamily.DRILLED_SOLDIER_PILE_RS
    assert "5'-0\" rock socket" in line.text
    assert line.text.endswith("as per SOE-101")


def test_reference_falls_back_to_other_records(parse, make_record):
    item = parse(SOLDIER_PILE, "SOE", 10, "EA", row=6)
    context = PipelineContext.create([
        make_record("Site plan", page="A-100"),
        make_record("Lagging", page="SOE-300"),
    ])
    line = synthesize(group([item])[0], context=context)
    assert line.reference == "SOE-300"


def test_custom_template_and_placeholder(parse):
    ruleset = ProposalRuleSet.from_config({
        'placeholder': '?',
        'templates': {
            'hp_soldier_pile': '{count} x {hp_type} E={embedment}',
            'not_a_family': 'ignored',
        },
    })
    item = parse('HP12x63 soldier pile H=24\'-9"', "SOE", 8, "EA", row=6)
    line = synthesize(group([item])[0], ruleset)
    assert line.text == '8 x HP12x63 E=?'
    assert line.unresolved == ('embedment',)


def test_synthesize_all_puts_hp_after_drilled(parse):
    hp = group([parse('HP12x63 soldier pile H=24\'-9"', "SOE", 8, "EA", row=6)])
    drilled = group([parse(SOLDIER_PILE, "SOE", 10, "EA", row=9)])
    lines = synthesize_all(hp + drilled)
    assert [line.family for line in lines] == [
        ProposalFamily.DRILLED_SOLDIER_PILE,
        ProposalFamily.HP_SOLDIER_PILE,
    ]


def test_pipeline_proposal_lines(run, soldier_pile_records):
    lines = run(soldier_pile_records).proposal
    assert [line.text for line in lines] == [
        'F&I new (15)no [9.625" Øx0.545" thick] drilled soldier piles '
        '(H=30\'-0", 15\'-0" embedment) as per SOE-101.00',
        'F&I new (8)no [HP12x63] soldier piles (H=25\'-0") as per SOE-101.00',
    ]
    assert lines[0].cells == {
        'FT': "'Calculations Sheet'!I8",
        'LBS': "'Calculations Sheet'!K8",
        'QTY': "'Calculations Sheet'!M8",
    }
    assert lines[1].sum_row_index == 11
    assert all(line.section == Section.SOE for line in lines)


def test_counted_groups_reference_their_own_rows(run, make_record):
    lines = run([
        make_record('Heel block (2\'-0"x2\'-0"x3\'-0")', "SOE", 2, "EA", "SOE-200"),
        make_record('Heel block (3\'-0"x3\'-0"x3\'-0")', "SOE", 1, "EA", "SOE-200"),
        make_record('Heel block (2\'-0"x2\'-0"x3\'-0")', "SOE", 3, "EA", "SOE-200"),
        make_record('Heel block (3\'-0"x3\'-0"x3\'-0")', "SOE", 1, "EA", "SOE-200"),
    ]).proposal
    assert [line.text for line in lines] == [
        'F&I new (5)no heel blocks as per SOE-200',
        'F&I new (2)no heel blocks as per SOE-200',
    ]
    assert lines[0].cells == {'QTY': "SUM('Calculations Sheet'!M6:M7)"}
    assert lines[1].cells == {'QTY': "SUM('Calculations Sheet'!M9:M10)"}
