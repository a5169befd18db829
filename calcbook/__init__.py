"""
Calcbook - takeoff export to calculation workbook and proposal.

Reads a digitizer takeoff, recognizes each row as a typed construction
item, lays out a formula-driven calculation sheet grouped by section and
subsection, and synthesizes proposal lines that reference its totals.
"""

__version__ = "0.1.0"

from .config import RULES_DIR, CalcbookConfig, load_config
from .errors import (
    CalcbookError,
    CellWriteError,
    RegistryError,
    ScheduleConflictError,
    SectionMismatchError,
    TakeoffSchemaError,
    UnknownItemTypeError,
    UnknownSubsectionError,
    UnresolvedDependencyError,
)
from .items import ItemType, ParsedItem, Section, TakeoffRecord
from .patterns import UNKNOWN, PartialDimensions, extract
from .workbook import CellWrite, Column, WorkbookModel
from .pipeline import CalculationPipeline, PipelineResult, run_pipeline

__all__ = [
    "__version__",
    "RULES_DIR",
    "CalcbookConfig",
    "load_config",
    "CalcbookError",
    "CellWriteError",
    "RegistryError",
    "ScheduleConflictError",
    "SectionMismatchError",
    "TakeoffSchemaError",
    "UnknownItemTypeError",
    "UnknownSubsectionError",
    "UnresolvedDependencyError",
    "ItemType",
    "ParsedItem",
    "Section",
    "TakeoffRecord",
    "UNKNOWN",
    "PartialDimensions",
    "extract",
    "CellWrite",
    "Column",
    "WorkbookModel",
    "CalculationPipeline",
    "PipelineResult",
    "run_pipeline",
]
