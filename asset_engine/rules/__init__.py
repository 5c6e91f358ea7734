"""Workload classification: field resolution, operators, rule matching and rule testing."""

from .engine import RuleSet, classify, classify_batch, classify_match
from .explain import test_rule, validate_rule_definition
from .operators import evaluate
from .resolver import resolve_field

__all__ = [
    "resolve_field",
    "evaluate",
    "RuleSet",
    "classify",
    "classify_match",
    "classify_batch",
    "test_rule",
    "validate_rule_definition",
]
