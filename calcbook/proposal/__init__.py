"""
Proposal: grouping of calculation rows and proposal text synthesis.
"""

from .templates import ProposalFamily, ProposalRuleSet, DEFAULT_TEMPLATES
from .grouping import Group, group, split_hp, groups_from_workbook, family_for
from .synthesis import ProposalLine, synthesize, synthesize_all, weighted_average

__all__ = [
    "ProposalFamily",
    "ProposalRuleSet",
    "DEFAULT_TEMPLATES",
    "Group",
    "group",
    "split_hp",
    "groups_from_workbook",
    "family_for",
    "ProposalLine",
    "synthesize",
    "synthesize_all",
    "weighted_average",
]
