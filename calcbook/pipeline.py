"""
Calculation Pipeline - takeoff records to calculation sheet and proposal.

Stages:
1. Recognize records into typed items (unrecognized records are kept aside)
2. Lay out rows and assign formulas (main pass)
3. Flush deferred writes and freeze the workbook model
4. Group the finalized sheet and synthesize proposal lines

Structural errors from any stage propagate; recoverable per-cell errors
are logged and returned in the result.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .config import CalcbookConfig, load_config
from .errors import CellWriteError
from .formulas.aggregation import AggregationRuleTable
from .ingest import read_takeoff
from .items.recognizer import ItemRecognizer
from .items.records import ParsedItem, TakeoffRecord
from .proposal.grouping import Group, groups_from_workbook
from .proposal.synthesis import ProposalLine, synthesize_all
from .proposal.templates import ProposalRuleSet
from .workbook.layout import CalculationSheetBuilder
from .workbook.model import WorkbookModel
from .workbook.scheduler import flush

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Everything one run needs; built per run, never shared."""
    records: List[TakeoffRecord]
    config: CalcbookConfig
    rules: AggregationRuleTable
    ruleset: ProposalRuleSet

    @classmethod
    def create(cls, records: Sequence[TakeoffRecord], config: Optional[CalcbookConfig] = None) -> 'PipelineContext':
        config = config or CalcbookConfig()
        return cls(
            records=list(records),
            config=config,
            rules=AggregationRuleTable.from_config(config.aggregation_overrides),
            ruleset=ProposalRuleSet.from_config(config.proposal),
        )

    def records_matching(self, pattern: str) -> List[TakeoffRecord]:
        """Raw records whose description matches, in source order."""
        regex = re.compile(pattern, re.IGNORECASE)
        return [r for r in self.records if regex.search(r.description or '')]


@dataclass
class PipelineResult:
    """Output of one pipeline run."""
    workbook: WorkbookModel
    items: List[ParsedItem] = field(default_factory=list)
    unused_records: List[TakeoffRecord] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    proposal: List[ProposalLine] = field(default_factory=list)
    skipped_writes: List[CellWriteError] = field(default_factory=list)

    @property
    def unresolved(self) -> List[ProposalLine]:
        """Proposal lines still carrying placeholders."""
        return [line for line in self.proposal if line.unresolved]

    def summary(self) -> dict:
        return {
            'rows': self.workbook.max_row,
            'writes': len(self.workbook),
            'items': len(self.items),
            'unused_records': len(self.unused_records),
            'groups': len(self.groups),
            'proposal_lines': len(self.proposal),
            'unresolved_lines': len(self.unresolved),
            'skipped_writes': len(self.skipped_writes),
        }


class CalculationPipeline:
    """Runs the full takeoff-to-proposal pass for one set of records."""

    def __init__(self, config: Optional[CalcbookConfig] = None,
                 recognizer: Optional[ItemRecognizer] = None):
        self.config = config or CalcbookConfig()
        self.recognizer = recognizer or ItemRecognizer()

    def run(self, records: Sequence[TakeoffRecord]) -> PipelineResult:
        context = PipelineContext.create(records, self.config)
        logger.info(f"Running calculation pipeline on {len(context.records)} records")

        # Step 1: Recognition
        items, unused = self.recognizer.recognize_all(context.records)
        for record in unused:
            logger.info(f"Unused takeoff row {record.raw_row}: {record.description}")

        # Step 2: Main pass
        builder = CalculationSheetBuilder(
            rules=context.rules,
            merge_singletons=context.config.merge_singletons,
            sheet_name=context.config.calculations_sheet,
        )
        plan = builder.build(items)

        # Step 3: Deferred writes
        writes = flush(plan)
        workbook = WorkbookModel.finalize(context.config.calculations_sheet, plan.rows, writes)

        # Step 4: Proposal
        placed = list(plan.items)
        groups = groups_from_workbook(workbook, placed)
        proposal = synthesize_all(groups, context.ruleset, context)

        result = PipelineResult(
            workbook=workbook,
            items=placed,
            unused_records=unused,
            groups=groups,
            proposal=proposal,
            skipped_writes=list(plan.skipped),
        )
        logger.info(f"Pipeline complete: {result.summary()}")
        return result


def run_pipeline(source: Union[str, Path, Sequence[TakeoffRecord]],
                 config_path: Optional[Union[str, Path]] = None) -> PipelineResult:
    """
    Convenience entry: a takeoff file path or a list of records.
    """
    config = load_config(config_path)
    if isinstance(source, (str, Path)):
        records = read_takeoff(source, aliases=config.header_aliases)
    else:
        records = list(source)
    return CalculationPipeline(config).run(records)
