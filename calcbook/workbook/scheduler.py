"""
Dependency Scheduler.

Some sum-row cells read ranges whose content only exists once the main
pass is complete (Foundation CY sums and the Foundation total row).
Those are recorded as DeferredWrites with the rows they depend on; flush()
checks every dependency resolves and returns the complete write set. The
main pass never mutates a write it has already emitted.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set, Tuple

from ..errors import CellWriteError, ScheduleConflictError, UnresolvedDependencyError
from .model import CALCULATIONS_SHEET, CalculationRow, CellWrite, Column, referenced_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeferredWrite:
    """A formula write resolved after the main pass."""
    row: int
    column: Column
    formula: str
    depends_on: Tuple[int, ...] = ()
    sheet: str = CALCULATIONS_SHEET

    @classmethod
    def for_formula(cls, row: int, column: Column, formula: str) -> 'DeferredWrite':
        """Deferred write whose dependencies are the rows its formula reads."""
        return cls(row=row, column=column, formula=formula,
                   depends_on=tuple(sorted(referenced_rows(formula))))

    @property
    def address(self) -> str:
        return f"{self.column.value}{self.row}"

    def resolve(self) -> CellWrite:
        return CellWrite.of_formula(self.row, self.column, self.formula, sheet=self.sheet)


@dataclass(frozen=True)
class WritePlan:
    """Output of the main pass: rows, writes, and the items placed on data rows."""
    rows: Tuple[CalculationRow, ...]
    immediate: Tuple[CellWrite, ...]
    deferred: Tuple[DeferredWrite, ...] = ()
    skipped: Tuple[CellWriteError, ...] = field(default_factory=tuple)
    items: Tuple[Any, ...] = field(default_factory=tuple)


def flush(plan: WritePlan) -> Tuple[CellWrite, ...]:
    """
    Resolve deferred writes and return every write, sorted by address.

    A dependency row counts as resolved when it holds at least one
    immediate write or is itself the target of a deferred write.

    Raises:
        UnresolvedDependencyError: a deferred write depends on a row
            nothing writes
        ScheduleConflictError: a deferred write targets a cell already
            written in the main pass, or two deferred writes collide
    """
    written_rows: Set[int] = {w.row for w in plan.immediate}
    deferred_rows: Set[int] = {d.row for d in plan.deferred}
    resolved_rows = written_rows | deferred_rows

    occupied: Dict[Tuple[int, Column], str] = {
        (w.row, w.column): 'immediate' for w in plan.immediate
    }

    resolved: List[CellWrite] = []
    for deferred in plan.deferred:
        missing = [r for r in deferred.depends_on if r not in resolved_rows]
        if missing:
            raise UnresolvedDependencyError(deferred, missing)
        key = (deferred.row, deferred.column)
        if key in occupied:
            raise ScheduleConflictError(
                f"Deferred write {deferred.address} collides with an existing "
                f"{occupied[key]} write"
            )
        occupied[key] = 'deferred'
        resolved.append(deferred.resolve())

    if plan.deferred:
        logger.debug(f"Flushed {len(resolved)} deferred writes")

    return tuple(sorted(list(plan.immediate) + resolved, key=lambda w: w.sort_key))


def defer_all(writes: Iterable[CellWrite]) -> List[DeferredWrite]:
    """Turn formula writes into deferred writes (literals are not deferrable)."""
    deferred = []
    for write in writes:
        if not write.is_formula:
            raise ValueError(f"Cannot defer literal write {write.address}")
        deferred.append(DeferredWrite.for_formula(write.row, write.column, write.formula))
    return deferred
