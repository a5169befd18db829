"""
Proposal Synthesis Engine - one proposal line per group.

Heights, embedments and rock sockets are averaged over the group
weighted by takeoff, rounded up to the next 5 ft and shown as F'-I".
Quantity cells reference the calculation sheet rather than copying
values, so the proposal follows any manual edit made there.
"""

import logging
import string
from collections import OrderedDict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..items.types import Section
from ..patterns import UNKNOWN, format_feet_inches, round_up_to_multiple_of_5
from ..workbook.model import Column
from .grouping import Group, split_hp
from .templates import ProposalFamily, ProposalRuleSet

logger = logging.getLogger(__name__)

# Proposal cell name -> calculation sheet column
PROPOSAL_CELLS: Dict[str, Column] = OrderedDict([
    ('FT', Column.FT),
    ('LBS', Column.LBS),
    ('QTY', Column.QTY_FINAL),
])

AVERAGED_FIELDS = ('height', 'embedment', 'rock_socket')


@dataclass(frozen=True)
class ProposalLine:
    """One synthesized proposal line."""
    text: str
    cells: Mapping[str, str] = field(default_factory=dict)
    family: ProposalFamily = ProposalFamily.QUANTITY
    section: Optional[Section] = None
    subsection: str = ""
    sum_row_index: Optional[int] = None
    reference: str = ""
    unresolved: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'cells', MappingProxyType(dict(self.cells)))

    @property
    def is_complete(self) -> bool:
        return not self.unresolved


# =============================================================================
# VALUES
# =============================================================================

def weighted_average(values: Sequence[float], weights: Sequence[float]):
    """
    Takeoff-weighted mean over the items with a positive takeoff.

    Falls back to the plain mean of every value when no takeoff is positive.
    """
    if not values:
        return UNKNOWN
    w = np.asarray(weights, dtype=float)
    v = np.asarray(values, dtype=float)
    positive = w > 0
    if not np.any(positive):
        return float(np.mean(v))
    return float(np.average(v[positive], weights=w[positive]))


def averaged_dimension(group: Group, name: str, step: int = 5):
    """Rounded-up weighted average of a token over items that carry it."""
    values, weights = [], []
    for item in group.items:
        value = item.parsed_data.value_or(name)
        if value is None:
            continue
        values.append(value)
        weights.append(item.weight)
    average = weighted_average(values, weights)
    if average is UNKNOWN:
        return UNKNOWN
    return round_up_to_multiple_of_5(average, step)


def _first_known(group: Group, name: str):
    for item in group.items:
        value = item.parsed_data.value_or(name)
        if value is not None:
            return value
    return UNKNOWN


def _number(value) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def _total_takeoff(group: Group):
    values = [i.takeoff for i in group.items if i.takeoff is not None]
    if not values:
        return UNKNOWN
    return float(np.sum(values))


def find_reference(group: Group, ruleset: ProposalRuleSet, context=None) -> str:
    """
    Drawing reference for a group.

    The group's own records are searched first, then every raw record in
    source order; the default reference is used when nothing matches.
    """
    pattern = ruleset.reference_patterns.get(group.section)
    if pattern is None:
        return ruleset.default_reference
    records = [i.record for i in group.items if i.record is not None]
    if context is not None:
        records += list(context.records)
    for record in records:
        for text in (record.page, record.description):
            match = pattern.search(str(text or ''))
            if match:
                return match.group(0)
    return ruleset.default_reference


# =============================================================================
# SYNTHESIS
# =============================================================================

def _cells(group: Group, ruleset: ProposalRuleSet, context=None) -> Dict[str, str]:
    """Cross-sheet formulas for the quantity cells the group's sums carry."""
    rules = getattr(context, 'rules', None)
    if rules is not None:
        summed = rules.summed_columns(group.section, group.subsection)
    else:
        summed = frozenset(PROPOSAL_CELLS.values())
    sheet = ruleset.sheet_name
    cells: Dict[str, str] = {}
    for name, column in PROPOSAL_CELLS.items():
        if column not in summed:
            continue
        if group.sum_row_index is not None:
            cells[name] = f"'{sheet}'!{column.value}{group.sum_row_index}"
        elif group.data_rows:
            first, last = min(group.data_rows), max(group.data_rows)
            cells[name] = f"SUM('{sheet}'!{column.value}{first}:{column.value}{last})"
    return cells


def template_values(group: Group, ruleset: ProposalRuleSet) -> Dict[str, Any]:
    """Every template field, UNKNOWN where the group lacks the data."""
    values: Dict[str, Any] = {}
    takeoff = _total_takeoff(group)
    values['count'] = _number(takeoff) if takeoff is not UNKNOWN else UNKNOWN
    values['takeoff'] = values['count']
    units = [i.unit for i in group.items if i.unit]
    values['unit'] = units[0] if units else UNKNOWN

    for name in ('diameter', 'thickness'):
        value = _first_known(group, name)
        values[name] = _number(value) if value is not UNKNOWN else UNKNOWN
    values['hp_type'] = _first_known(group, 'hp_type')

    for name in AVERAGED_FIELDS:
        value = averaged_dimension(group, name, ruleset.rounding_step)
        values[name] = format_feet_inches(value) if value is not UNKNOWN else UNKNOWN

    values['subsection'] = group.subsection
    values['subsection_lower'] = group.subsection.lower()
    values['description'] = group.items[0].particulars if group.items else UNKNOWN
    return values


def synthesize(group: Group, ruleset: Optional[ProposalRuleSet] = None, context=None) -> ProposalLine:
    """
    Render one proposal line for a group.

    Template fields the group cannot fill render as the placeholder and
    are listed in ProposalLine.unresolved.
    """
    ruleset = ruleset or ProposalRuleSet()
    template = ruleset.template_for(group.family)
    values = template_values(group, ruleset)
    reference = find_reference(group, ruleset, context)
    values['reference'] = reference

    used = [f for _, f, _, _ in string.Formatter().parse(template) if f]
    unresolved = []
    rendered: Dict[str, Any] = {}
    for name in used:
        value = values.get(name, UNKNOWN)
        if value is UNKNOWN:
            unresolved.append(name)
            rendered[name] = ruleset.placeholder
        else:
            rendered[name] = value

    text = template.format(**rendered)
    if unresolved:
        logger.warning(f"{group.subsection}: unresolved {', '.join(unresolved)} in '{text}'")

    return ProposalLine(
        text=text,
        cells=_cells(group, ruleset, context),
        family=group.family,
        section=group.section,
        subsection=group.subsection,
        sum_row_index=group.sum_row_index,
        reference=reference,
        unresolved=tuple(unresolved),
    )


def synthesize_all(groups: Sequence[Group], ruleset: Optional[ProposalRuleSet] = None,
                   context=None) -> List[ProposalLine]:
    """
    Proposal lines for every group, in group order.

    Within a subsection, HP soldier pile lines follow the drilled ones.
    """
    ruleset = ruleset or ProposalRuleSet()
    buckets: "OrderedDict[Tuple[Section, str], List[Group]]" = OrderedDict()
    for g in groups:
        buckets.setdefault((g.section, g.subsection), []).append(g)

    lines: List[ProposalLine] = []
    for bucket in buckets.values():
        non_hp, hp = split_hp(bucket)
        for g in non_hp + hp:
            lines.append(synthesize(g, ruleset, context))
    logger.info(f"Synthesized {len(lines)} proposal lines")
    return lines
