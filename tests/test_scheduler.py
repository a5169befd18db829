"""Tests for deferred write scheduling."""

import pytest

from calcbook.errors import ScheduleConflictError, UnresolvedDependencyError
from calcbook.workbook import CellWrite, Column, DeferredWrite, WritePlan, flush
from calcbook.workbook.scheduler import defer_all


def _plan(immediate, deferred=()):
    return WritePlan(rows=(), immediate=tuple(immediate), deferred=tuple(deferred))


def test_flush_resolves_deferred_writes():
    plan = _plan(
        [CellWrite.literal(5, Column.PARTICULARS, "a"), CellWrite.literal(6, Column.PARTICULARS, "b")],
        [DeferredWrite(row=7, column=Column.CY, formula="SUM(L5:L6)", depends_on=(5, 6))],
    )
    writes = flush(plan)
    assert [w.address for w in writes] == ["B5", "B6", "L7"]
    assert writes[-1].formula == "SUM(L5:L6)"


def test_flush_accepts_dependency_on_another_deferred_row():
    plan = _plan(
        [CellWrite.literal(5, Column.PARTICULARS, "a")],
        [
            DeferredWrite(row=7, column=Column.CY, formula="SUM(L5:L5)", depends_on=(5,)),
            DeferredWrite(row=9, column=Column.CY, formula="SUM(L7)", depends_on=(7,)),
        ],
    )
    assert [w.address for w in flush(plan)] == ["B5", "L7", "L9"]


def test_unresolved_dependency():
    plan = _plan(
        [CellWrite.literal(5, Column.PARTICULARS, "a")],
        [DeferredWrite(row=7, column=Column.CY, formula="SUM(L5:L6)", depends_on=(5, 6))],
    )
    with pytest.raises(UnresolvedDependencyError) as exc_info:
        flush(plan)
    assert exc_info.value.missing_rows == (6,)


def test_deferred_write_cannot_overwrite_main_pass():
    plan = _plan(
        [CellWrite.literal(5, Column.PARTICULARS, "a"), CellWrite.of_formula(7, Column.CY, "1")],
        [DeferredWrite(row=7, column=Column.CY, formula="SUM(L5:L5)", depends_on=(5,))],
    )
    with pytest.raises(ScheduleConflictError):
        flush(plan)


def test_flush_sorts_by_row_then_column():
    plan = _plan([
        CellWrite.literal(6, Column.PARTICULARS, "b"),
        CellWrite.literal(6, Column.ESTIMATE, "a"),
        CellWrite.literal(5, Column.TAKEOFF, 1),
    ])
    assert [w.address for w in flush(plan)] == ["C5", "A6", "B6"]


def test_defer_all_reads_dependencies_from_formula():
    deferred = defer_all([CellWrite.of_formula(12, Column.CY, "SUM(L10:L11)")])
    assert deferred[0].depends_on == (10, 11)
    with pytest.raises(ValueError):
        defer_all([CellWrite.literal(12, Column.CY, 1)])


def test_cell_write_requires_exactly_one_of_value_or_formula():
    with pytest.raises(ValueError):
        CellWrite(row=1, column=Column.FT)
    with pytest.raises(ValueError):
        CellWrite(row=1, column=Column.FT, value=1, formula="A1")
    with pytest.raises(ValueError):
        CellWrite.literal(0, Column.FT, 1)
    assert CellWrite.of_formula(1, Column.FT, "=C1").formula == "C1"
