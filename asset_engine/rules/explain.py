from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.rules import Operator, RuleTestResult, WorkloadCategoryRule
from .operators import evaluate, parse_leading_number, pattern_error, render_value
from .resolver import MAX_DEPTH, resolve_field, split_path

"""Rule test / explain facility.

Lets an operator try a single rule against a sample asset before saving it.
Authoring problems (uncompilable pattern, unknown operator, non-numeric
threshold) are reported in ``error`` instead of silently evaluating to False.
"""

__all__ = [
    "test_rule",
    "validate_rule_definition",
    "explain_rule",
]

_VERBS = {
    Operator.EQ: "equals",
    Operator.NE: "differs from",
    Operator.GE: "is >=",
    Operator.LE: "is <=",
    Operator.GT: "is >",
    Operator.LT: "is <",
    Operator.INCLUDES: "includes",
    Operator.REGEX: "regex-matches",
}


def validate_rule_definition(source_field: Any, operator: Any, value: Any) -> list[str]:
    """Authoring-time problems of a rule; empty when the rule is well formed."""
    problems: list[str] = []
    field_text = "" if source_field is None else str(source_field).strip()
    if not field_text:
        problems.append("Source field is required")
    else:
        parts = split_path(field_text)
        if len(parts) > MAX_DEPTH:
            problems.append(f'Source field "{field_text}" nests deeper than one level')
        elif any(not p for p in parts):
            problems.append(f'Source field "{field_text}" is not a valid field path')

    op = Operator.parse(operator)
    literal = "" if value is None else str(value).strip()
    if op is None:
        problems.append(f'Unsupported operator "{operator}"')
    elif op is Operator.REGEX:
        message = pattern_error(literal)
        if message is not None:
            problems.append(f"Invalid regular expression: {message}")
    elif op.is_numeric and parse_leading_number(literal) is None:
        problems.append(f'Value "{literal}" is not numeric; operator {op.value} compares numbers')
    return problems


def _render_actual(actual: Any) -> str:
    if actual is None:
        return "(absent)"
    text = render_value(actual)
    if text is None:
        return "(not a scalar)"
    return f'"{text}"'


def explain_rule(source_field: str, operator: Any, value: Any, actual: Any, result: bool) -> str:
    op = Operator.parse(operator)
    verb = _VERBS[op] if op is not None else str(operator)
    outcome = "true" if result else "false"
    return f'{source_field} ({_render_actual(actual)}) {verb} "{value}"? → {outcome}'


def _rule_parts(rule: WorkloadCategoryRule | Mapping[str, Any]) -> tuple[str, Any, Any]:
    if isinstance(rule, WorkloadCategoryRule):
        return rule.source_field, rule.operator, rule.value
    source_field = rule.get("sourceField", rule.get("source_field"))
    return ("" if source_field is None else str(source_field)), rule.get("operator"), rule.get("value", "")


def test_rule(rule: WorkloadCategoryRule | Mapping[str, Any], sample_fields: Mapping[str, Any]) -> RuleTestResult:
    """Evaluate one rule against a sample field bag and explain the outcome."""
    source_field, operator, value = _rule_parts(rule)
    problems = validate_rule_definition(source_field, operator, value)
    actual = resolve_field(sample_fields, source_field)
    result = False if problems else evaluate(actual, operator, value)
    return RuleTestResult(
        result=result,
        explanation=explain_rule(source_field, operator, "" if value is None else value, actual, result),
        error="; ".join(problems) if problems else None,
    )


# テストモジュールへ import されても pytest に収集させない
test_rule.__test__ = False  # type: ignore[attr-defined]
