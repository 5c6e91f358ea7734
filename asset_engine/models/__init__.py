"""Domain models for the asset import & classification engine.

This package contains the row, result, rule and run-summary types shared by
the source transformers, the rule engine and the command-line harness.
"""

from .config_models import EngineConfig
from .raw_row import RawRow
from .rules import (
    ClassificationMatch,
    Operator,
    RuleDefinitionError,
    RuleTestResult,
    WorkloadCategory,
    WorkloadCategoryRule,
)
from .transformation_result import TransformationResult, ValidationOutcome

__all__ = [
    # Configuration models
    "EngineConfig",
    # Import models
    "RawRow",
    "TransformationResult",
    "ValidationOutcome",
    # Classification models
    "Operator",
    "WorkloadCategory",
    "WorkloadCategoryRule",
    "ClassificationMatch",
    "RuleTestResult",
    "RuleDefinitionError",
]
