"""
Calcbook error types.

Two families:
- Structural errors: rule tables out of sync with the recognizer, or a
  deferred write whose source range never resolves. These propagate.
- Recoverable errors: a single cell write that cannot be produced. These
  are logged, collected and skipped.
"""


class CalcbookError(Exception):
    """Base class for all calcbook errors."""


# =============================================================================
# STRUCTURAL
# =============================================================================

class RegistryError(CalcbookError):
    """Builder registry does not cover every item type."""


class UnknownItemTypeError(CalcbookError):
    """No builder is registered for an item type."""

    def __init__(self, item_type, section=None):
        self.item_type = item_type
        self.section = section
        where = f" in section {section}" if section is not None else ""
        super().__init__(f"No formula builder registered for item type {item_type!r}{where}")


class SectionMismatchError(CalcbookError):
    """An item type was dispatched under a section it does not belong to."""


class UnknownSubsectionError(KeyError, CalcbookError):
    """Aggregation rule table has no entry for a subsection."""

    def __str__(self):
        return str(self.args[0]) if self.args else "unknown subsection"


class UnresolvedDependencyError(CalcbookError):
    """A deferred write references rows that were never written."""

    def __init__(self, write, missing_rows):
        self.write = write
        self.missing_rows = tuple(missing_rows)
        super().__init__(
            f"Deferred write {write.column.value}{write.row} depends on unwritten rows "
            f"{list(self.missing_rows)}"
        )


class ScheduleConflictError(CalcbookError):
    """A deferred write targets a cell that already has an immediate write."""


class TakeoffSchemaError(CalcbookError):
    """Raw takeoff input is missing required header columns."""


# =============================================================================
# RECOVERABLE
# =============================================================================

class CellWriteError(CalcbookError):
    """A single cell could not be written; the row and pass continue."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"{address}: {reason}")
