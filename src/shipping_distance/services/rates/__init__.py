"""Rate table validation and rate resolution."""

from .formula import evaluate_formula
from .models import CostBreakdown, RateRule, RateTable
from .resolver import compute_cost, find_rule
from .validator import RateTableValidator, validate_table_rates

__all__ = [
    "CostBreakdown",
    "RateRule",
    "RateTable",
    "RateTableValidator",
    "compute_cost",
    "evaluate_formula",
    "find_rule",
    "validate_table_rates",
]
