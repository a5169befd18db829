"""
Proposal templates and reference-code rules.

Templates are str.format strings. Fields a group cannot fill render as
the placeholder ('#') and are reported back as unresolved.

Available fields:
    count, takeoff, unit, diameter, thickness, hp_type, height,
    embedment, rock_socket, subsection, subsection_lower, description,
    reference
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Pattern

from ..items.types import Section
from ..workbook.model import CALCULATIONS_SHEET

logger = logging.getLogger(__name__)


class ProposalFamily(Enum):
    DRILLED_SOLDIER_PILE = "drilled_soldier_pile"
    DRILLED_SOLDIER_PILE_RS = "drilled_soldier_pile_rock_socket"
    HP_SOLDIER_PILE = "hp_soldier_pile"
    PILE = "pile"
    COUNTED = "counted"
    QUANTITY = "quantity"


DEFAULT_TEMPLATES: Dict[ProposalFamily, str] = {
    ProposalFamily.DRILLED_SOLDIER_PILE: (
        'F&I new ({count})no [{diameter}" Øx{thickness}" thick] drilled soldier piles '
        '(H={height}, {embedment} embedment) as per {reference}'
    ),
    ProposalFamily.DRILLED_SOLDIER_PILE_RS: (
        'F&I new ({count})no [{diameter}" Øx{thickness}" thick] drilled soldier piles '
        '(H={height}, {rock_socket} rock socket) as per {reference}'
    ),
    ProposalFamily.HP_SOLDIER_PILE: (
        'F&I new ({count})no [{hp_type}] soldier piles (H={height}) as per {reference}'
    ),
    ProposalFamily.PILE: (
        'F&I new ({count})no {diameter}" Ø {subsection_lower} (H={height}) as per {reference}'
    ),
    ProposalFamily.COUNTED: (
        'F&I new ({count})no {subsection_lower} as per {reference}'
    ),
    ProposalFamily.QUANTITY: (
        'F&I new {subsection_lower} ({takeoff} {unit}) as per {reference}'
    ),
}

PILE_SUBSECTIONS = {
    "Primary secant piles",
    "Secondary secant piles",
    "Tangent piles",
    "Drilled foundation pile",
    "Helical foundation pile",
    "Driven foundation pile",
    "Stelcor drilled displacement pile",
    "CFA pile",
}

COUNTED_SUBSECTIONS = {
    "Heel blocks",
    "Rock anchors",
    "Rock bolts",
    "Anchor",
    "Tie back",
    "Dowel bar",
    "Rock pins",
    "Concrete soil retention piers",
    "Buttons",
    "Pile caps",
    "Isolated Footings",
    "Pier",
    "Pilaster",
}

DEFAULT_REFERENCE_PATTERNS: Dict[Section, str] = {
    Section.DEMOLITION: r'\bD(?:M)?-\d+(?:\.\d+)?',
    Section.EXCAVATION: r'\b(?:SOE|FO)-\d+(?:\.\d+)?',
    Section.ROCK_EXCAVATION: r'\b(?:SOE|FO)-\d+(?:\.\d+)?',
    Section.SOE: r'\bSOE-\d+(?:\.\d+)?',
    Section.FOUNDATION: r'\bFO-\d+(?:\.\d+)?',
    Section.WATERPROOFING: r'\b(?:WP|A)-\d+(?:\.\d+)?',
}


@dataclass
class ProposalRuleSet:
    """Templates, reference-code patterns and placeholders for synthesis."""
    templates: Dict[ProposalFamily, str] = field(default_factory=lambda: dict(DEFAULT_TEMPLATES))
    reference_patterns: Dict[Section, Pattern] = field(default_factory=lambda: {
        section: re.compile(pattern) for section, pattern in DEFAULT_REFERENCE_PATTERNS.items()
    })
    default_reference: str = '##'
    placeholder: str = '#'
    sheet_name: str = CALCULATIONS_SHEET
    rounding_step: int = 5

    @classmethod
    def from_config(cls, config: Optional[Mapping] = None) -> 'ProposalRuleSet':
        """
        Build from the `proposal` block of the rules YAML.

        Unknown family or section names are logged and ignored.
        """
        ruleset = cls()
        config = config or {}
        for name, template in (config.get('templates') or {}).items():
            try:
                ruleset.templates[ProposalFamily(name)] = str(template)
            except ValueError:
                logger.warning(f"Ignoring template for unknown proposal family: {name}")
        for name, pattern in (config.get('reference_patterns') or {}).items():
            section = next((s for s in Section if s.value.lower() == str(name).lower()), None)
            if section is None:
                logger.warning(f"Ignoring reference pattern for unknown section: {name}")
                continue
            ruleset.reference_patterns[section] = re.compile(pattern)
        ruleset.default_reference = str(config.get('default_reference', ruleset.default_reference))
        ruleset.placeholder = str(config.get('placeholder', ruleset.placeholder))
        ruleset.sheet_name = str(config.get('sheet_name', ruleset.sheet_name))
        ruleset.rounding_step = int(config.get('rounding_step', ruleset.rounding_step))
        return ruleset

    def template_for(self, family: ProposalFamily) -> str:
        return self.templates.get(family, DEFAULT_TEMPLATES[family])
