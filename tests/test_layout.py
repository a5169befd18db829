"""Tests for calculation sheet layout (the main pass)."""

import pytest

from calcbook.errors import UnknownSubsectionError
from calcbook.formulas import AggregationRuleTable
from calcbook.items import ItemType, ParsedItem, Section
from calcbook.patterns import PartialDimensions
from calcbook.workbook import Column, RowKind, StyleIntent
from calcbook.workbook.layout import CalculationSheetBuilder

HEEL_BLOCK = 'Heel block (2\'-0"x2\'-0"x3\'-0")'
STAIRS = "Stairs on grade (5'-0\" wide)"
LANDING = 'Landings on grade 8" thick'
STAIRS_SUB = "Stairs on grade Stairs"


def _item(key, particulars="Heel block", subsection="Heel blocks", item_type=ItemType.HEEL_BLOCK):
    return ParsedItem(
        section=Section.SOE,
        subsection=subsection,
        item_type=item_type,
        parsed_data=PartialDimensions(),
        particulars=particulars,
        group_key=key,
    )


def test_title_row_and_section_header(run, heel_block_records):
    wb = run(heel_block_records).workbook
    assert wb.content(1, Column.ESTIMATE) == "Estimate"
    assert wb.content(1, Column.SOURCE_ROW) == "Source Row"
    assert wb.row(2).kind == RowKind.BLANK
    assert wb.content(3, Column.ESTIMATE) == "SOE"
    assert wb.row(3).style == StyleIntent.SECTION
    assert wb.content(5, Column.PARTICULARS) == "Heel blocks:"


def test_heel_block_sum_row_writes_only_cy_and_qty(run, heel_block_records):
    wb = run(heel_block_records).workbook
    assert [r.index for r in wb.data_rows()] == [6, 7]
    sums = wb.sum_rows()
    assert [r.index for r in sums] == [8]
    assert {w.address: w.content for w in wb.writes_in_row(8)} == {
        "L8": "=SUM(L6:L7)",
        "M8": "=SUM(M6:M7)",
    }
    assert wb.get(8, Column.SQFT) is None


def test_data_row_literals(run, heel_block_records):
    wb = run(heel_block_records).workbook
    assert wb.content(6, Column.ESTIMATE) == "SOE"
    assert wb.content(6, Column.PARTICULARS) == HEEL_BLOCK
    assert wb.content(6, Column.TAKEOFF) == 4
    assert wb.content(6, Column.UNIT) == "EA"
    assert wb.content(6, Column.SOURCE_ROW) == 2


def test_group_sum_subsection(run, soldier_pile_records):
    wb = run(soldier_pile_records).workbook
    sums = wb.sum_rows()
    assert [(r.index, r.first_data_row, r.last_data_row) for r in sums] == [(8, 6, 7), (11, 10, 10)]
    assert wb.content(8, Column.FT) == "=SUM(I6:I7)"
    assert wb.content(8, Column.LBS) == "=SUM(K6:K7)"
    assert wb.content(8, Column.QTY_FINAL) == "=SUM(M6:M7)"
    assert wb.content(11, Column.LBS) == "=SUM(K10:K10)"
    assert wb.row(9).kind == RowKind.BLANK
    assert wb.content(10, Column.LBS) == "=I10*63.000"


def test_foundation_cy_sums_are_deferred(make_record, recognizer):
    items, _ = recognizer.recognize_all([
        make_record('SF (2\'-0"x1\'-0")', "Foundation", 100, "FT", "FO-101"),
    ])
    plan = CalculationSheetBuilder().build(items)
    assert sorted(d.address for d in plan.deferred) == ["L7", "L9"]
    assert "L7" not in {w.address for w in plan.immediate}
    assert {"I7", "J7"} <= {w.address for w in plan.immediate}


def test_foundation_total_row(run, make_record):
    wb = run([make_record('SF (2\'-0"x1\'-0")', "Foundation", 100, "FT", "FO-101")]).workbook
    assert wb.content(7, Column.CY) == "=SUM(L6:L6)"
    assert wb.row(9).kind == RowKind.TOTAL
    assert wb.content(9, Column.PARTICULARS) == "Total CY"
    assert wb.content(9, Column.CY) == "=SUM(L7)"


def test_excavation_header_and_havg(run, make_record):
    wb = run([make_record("Soil excavation H=10'-0\"", "Excavation", 1000, "SQ FT")]).workbook
    assert wb.content(3, Column.LBS) == "CY"
    assert wb.content(3, Column.CY) == "1.3*CY"
    assert wb.content(7, Column.SQFT) == "=SUM(J6:J6)"
    assert wb.content(7, Column.CY) == "=SUM(L6:L6)"
    assert wb.row(8).item_type == ItemType.EXCAVATION_HAVG
    assert wb.content(8, Column.PARTICULARS) == "Havg"
    assert wb.content(8, Column.TAKEOFF) == "=(L7*27)/J7"


def test_backpacking_reads_lagging_sum(run, make_record):
    wb = run([make_record("Timber lagging w/ backpacking H=10'-0\"", "SOE", 500, "SQ FT")]).workbook
    assert wb.content(7, Column.SQFT) == "=SUM(J6:J6)"
    assert wb.content(9, Column.PARTICULARS) == "Backpacking:"
    assert wb.content(10, Column.TAKEOFF) == "=J7"
    assert wb.content(10, Column.SQFT) == "=C10"
    assert wb.content(11, Column.SQFT) == "=SUM(J10:J10)"


def test_lagging_without_backpacking_has_no_backpacking_rows(run, make_record):
    wb = run([make_record("Timber lagging H=10'-0\"", "SOE", 500, "SQ FT")]).workbook
    assert all(r.subsection != "Backpacking" for r in wb.rows)


def test_stair_slab_follows_stairs(run, make_record):
    wb = run([make_record("Stairs on grade (5'-0\" wide)", "Foundation", 10, "EA", "FO-101")]).workbook
    assert wb.row(6).item_type == ItemType.STAIRS_ON_GRADE
    assert wb.row(7).item_type == ItemType.STAIR_SLAB
    assert wb.content(7, Column.TAKEOFF) == "=C6*1.3"
    assert wb.content(7, Column.WIDTH) == "=G6"
    assert wb.content(8, Column.FT) == "=SUM(I6:I7)"
    assert wb.content(8, Column.CY) == "=SUM(L6:L7)"


def test_each_flight_groups_with_its_landing_and_slab(run, make_record):
    wb = run([
        make_record(STAIRS, "Foundation", 10, "EA", "FO-101"),
        make_record(STAIRS, "Foundation", 8, "EA", "FO-101"),
        make_record(LANDING, "Foundation", 40, "SQ FT", "FO-101"),
    ]).workbook
    assert [(r.index, r.item_type) for r in wb.data_rows()] == [
        (6, ItemType.STAIRS_ON_GRADE),
        (7, ItemType.STAIR_SLAB),
        (9, ItemType.LANDINGS_ON_GRADE),
        (10, ItemType.STAIRS_ON_GRADE),
        (11, ItemType.STAIR_SLAB),
    ]
    assert wb.row(8).kind == RowKind.BLANK
    assert wb.content(7, Column.TAKEOFF) == "=C6*1.3"
    assert wb.content(11, Column.TAKEOFF) == "=C10*1.3"
    assert wb.content(11, Column.WIDTH) == "=G10"
    assert wb.content(12, Column.FT) == "=SUM(I6:I11)"
    assert wb.content(12, Column.CY) == "=SUM(L6:L11)"


def test_stair_groups_attach_landings_to_last_flights():
    builder = CalculationSheetBuilder()
    flights = [_item(None, f"Stairs {n}", STAIRS_SUB, ItemType.STAIRS_ON_GRADE) for n in range(3)]
    landing = _item(None, "Landing", STAIRS_SUB, ItemType.LANDINGS_ON_GRADE)
    groups = builder.stair_groups(flights + [landing])
    assert [g for _, g in groups] == [[flights[0]], [flights[1]], [landing, flights[2]]]


def test_stair_groups_keep_extra_landings():
    builder = CalculationSheetBuilder()
    flight = _item(None, "Stairs", STAIRS_SUB, ItemType.STAIRS_ON_GRADE)
    landings = [_item(None, f"Landing {n}", STAIRS_SUB, ItemType.LANDINGS_ON_GRADE) for n in range(2)]
    groups = builder.stair_groups([flight] + landings)
    assert [g for _, g in groups] == [[landings[0], landings[1], flight]]
    assert builder.stair_groups(landings) == [("LANDINGS", landings)]


def test_writes_target_the_configured_sheet(make_record, recognizer):
    items, _ = recognizer.recognize_all([
        make_record('SF (2\'-0"x1\'-0")', "Foundation", 100, "FT", "FO-101"),
    ])
    plan = CalculationSheetBuilder(sheet_name="Calc").build(items)
    assert {w.sheet for w in plan.immediate} == {"Calc"}
    assert {d.sheet for d in plan.deferred} == {"Calc"}
    assert plan.deferred[0].resolve().cross_sheet_ref() == f"'Calc'!{plan.deferred[0].address}"


def test_groups_separated_by_blank_rows_under_one_sum(run, make_record):
    wb = run([
        make_record(HEEL_BLOCK, "SOE", 2, "EA", "SOE-200"),
        make_record('Heel block (3\'-0"x3\'-0"x3\'-0")', "SOE", 1, "EA", "SOE-200"),
        make_record(HEEL_BLOCK, "SOE", 3, "EA", "SOE-200"),
        make_record('Heel block (3\'-0"x3\'-0"x3\'-0")', "SOE", 1, "EA", "SOE-200"),
    ]).workbook
    assert [r.index for r in wb.data_rows()] == [6, 7, 9, 10]
    assert wb.row(8).kind == RowKind.BLANK
    assert wb.content(11, Column.CY) == "=SUM(L6:L10)"


def test_subsections_follow_template_order(run, make_record):
    wb = run([
        make_record(HEEL_BLOCK, "SOE", 2, "EA"),
        make_record("Timber lagging H=10'-0\"", "SOE", 500, "SQ FT"),
    ]).workbook
    headers = [r.subsection for r in wb.rows if r.kind == RowKind.HEADER and r.subsection]
    assert headers == ["Timber lagging", "Heel blocks"]


def test_merge_singletons():
    builder = CalculationSheetBuilder()
    items = [_item("A"), _item("B"), _item("C"), _item("C")]
    groups = builder.group_items(Section.SOE, "Heel blocks", items)
    assert [k for k, _ in groups] == ["C", "MERGED"]
    assert [len(g) for _, g in groups] == [2, 2]


def test_single_singleton_is_not_merged():
    builder = CalculationSheetBuilder()
    groups = builder.group_items(Section.SOE, "Heel blocks", [_item("A"), _item("C"), _item("C")])
    assert [k for k, _ in groups] == ["A", "C"]


def test_merge_singletons_can_be_disabled():
    builder = CalculationSheetBuilder(merge_singletons=False)
    groups = builder.group_items(Section.SOE, "Heel blocks", [_item("A"), _item("B")])
    assert [k for k, _ in groups] == ["A", "B"]


def test_unknown_subsection_fails_the_build():
    builder = CalculationSheetBuilder(rules=AggregationRuleTable(rules={Section.SOE: {}}))
    with pytest.raises(UnknownSubsectionError):
        builder.build([_item("A")])


def test_manual_input_rows_are_flagged(run, make_record):
    wb = run([make_record("Waler W12x58", "SOE", 120, "FT")]).workbook
    assert wb.row(6).style == StyleIntent.MANUAL_INPUT
