"""
Calculation Sheet Quality Control
Checks a finalized workbook - never crash, warn and continue.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .errors import CalcbookError
from .formulas.aggregation import AggregationRuleTable
from .formulas.engine import sum_formula
from .workbook.model import AGGREGATE_COLUMNS, RowKind, WorkbookModel, referenced_rows

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of workbook validation."""
    is_valid: bool
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class WorkbookValidator:
    """
    Validate a finalized calculation sheet.

    Validates:
    - Every sum row sums exactly its rule-table columns over its own range
    - No formula reads a row outside the sheet
    - Sum ranges only cover rows of their own subsection
    - Proposal lines carry no unresolved placeholders (warning)
    """

    def __init__(self, rules: Optional[AggregationRuleTable] = None):
        self.rules = rules or AggregationRuleTable()

    def validate(self, workbook: WorkbookModel, proposal: Optional[Sequence] = None) -> ValidationResult:
        warnings: List[str] = []
        errors: List[str] = []

        try:
            self._check_sum_rows(workbook, errors)
            self._check_references(workbook, errors)
        except CalcbookError as e:
            errors.append(f"Validation aborted: {e}")
        except Exception as e:
            logger.exception("Unexpected error during workbook validation")
            errors.append(f"Validation failed: {e}")

        for line in proposal or []:
            if getattr(line, 'unresolved', None):
                warnings.append(
                    f"Proposal line for {line.subsection} has unresolved "
                    f"{', '.join(line.unresolved)}: {line.text}"
                )

        for message in errors:
            logger.warning(f"QC error: {message}")

        return ValidationResult(is_valid=len(errors) == 0, warnings=warnings, errors=errors)

    def _check_sum_rows(self, workbook: WorkbookModel, errors: List[str]) -> None:
        for row in workbook.sum_rows():
            if row.first_data_row is None or row.last_data_row is None:
                errors.append(f"Sum row {row.index} has no data range")
                continue
            expected = self.rules.summed_columns(row.section, row.subsection)
            for column in AGGREGATE_COLUMNS:
                write = workbook.get(row.index, column)
                if column in expected:
                    formula = sum_formula(column, row.first_data_row, row.last_data_row)
                    if write is None or write.formula != formula:
                        actual = write.content if write is not None else 'blank'
                        errors.append(
                            f"Sum row {row.index} ({row.subsection}): expected ={formula}, got {actual}"
                        )
                elif write is not None:
                    errors.append(
                        f"Sum row {row.index} ({row.subsection}): column {column.value} "
                        f"must be blank, got {write.content}"
                    )
            for index in range(row.first_data_row, row.last_data_row + 1):
                covered = workbook.row(index)
                if covered is None or covered.subsection != row.subsection or covered.section != row.section:
                    errors.append(f"Sum row {row.index} range covers row {index} outside {row.subsection}")
                    break
                if covered.kind not in (RowKind.DATA, RowKind.BLANK):
                    errors.append(f"Sum row {row.index} range covers {covered.kind.value} row {index}")
                    break

    def _check_references(self, workbook: WorkbookModel, errors: List[str]) -> None:
        last = workbook.max_row
        for write in workbook.writes:
            if not write.is_formula:
                continue
            for referenced in referenced_rows(write.formula):
                if referenced < 1 or referenced > last:
                    errors.append(f"{write.address} references row {referenced} outside the sheet")
                    break
