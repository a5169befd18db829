"""
Formula assignment: item classifier, per-trade builders and the
aggregation rule table.
"""

from .base import RowFormulas
from .aggregation import AGGREGATION_RULES, DEFERRED_COLUMNS, AggregationRuleTable
from .registry import BUILDERS, classify, verify_registry
from .engine import assign, assign_row, assign_sum, sum_formula

__all__ = [
    "RowFormulas",
    "AGGREGATION_RULES",
    "DEFERRED_COLUMNS",
    "AggregationRuleTable",
    "BUILDERS",
    "classify",
    "verify_registry",
    "assign",
    "assign_row",
    "assign_sum",
    "sum_formula",
]
