from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from ..models.rules import ClassificationMatch, WorkloadCategoryRule
from .operators import evaluate
from .resolver import resolve_field

"""Rule matching engine.

Winner-take-all classification: active rules are evaluated in ascending
priority order and the first match decides the category. Equal priorities keep
the order in which the rules were supplied. Assets matching nothing stay
unclassified (None).
"""

__all__ = [
    "RuleSet",
    "classify",
    "classify_match",
    "classify_batch",
]

logger = logging.getLogger(__name__)

RuleLike = WorkloadCategoryRule | Mapping[str, Any]


def _coerce(rule: RuleLike) -> WorkloadCategoryRule:
    if isinstance(rule, WorkloadCategoryRule):
        return rule
    return WorkloadCategoryRule.from_dict(rule)


class RuleSet:
    """Active rules in evaluation order, built once per classification run."""

    def __init__(self, rules: Iterable[RuleLike]) -> None:
        parsed = [_coerce(r) for r in rules]
        active = [r for r in parsed if r.is_active]
        # sorted は安定ソート: 同一 priority は入力順を維持
        self._rules: tuple[WorkloadCategoryRule, ...] = tuple(sorted(active, key=lambda r: r.priority))
        self.inactive_count = len(parsed) - len(active)

    @classmethod
    def of(cls, rules: RuleSet | Iterable[RuleLike]) -> RuleSet:
        return rules if isinstance(rules, RuleSet) else cls(rules)

    @property
    def rules(self) -> tuple[WorkloadCategoryRule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[WorkloadCategoryRule]:
        return iter(self._rules)

    def match(self, fields: Mapping[str, Any]) -> ClassificationMatch | None:
        for rule in self._rules:
            actual = resolve_field(fields, rule.source_field)
            if evaluate(actual, rule.operator, rule.value):
                logger.debug(f"rule matched id={rule.id} category={rule.category_id} ({rule.label})")
                return ClassificationMatch(category_id=rule.category_id, rule=rule)
        return None

    def classify(self, fields: Mapping[str, Any]) -> str | None:
        found = self.match(fields)
        return found.category_id if found is not None else None


def classify(fields: Mapping[str, Any], rules: RuleSet | Iterable[RuleLike]) -> str | None:
    """Category id of the first matching active rule, or None."""
    return RuleSet.of(rules).classify(fields)


def classify_match(fields: Mapping[str, Any], rules: RuleSet | Iterable[RuleLike]) -> ClassificationMatch | None:
    return RuleSet.of(rules).match(fields)


def classify_batch(
    assets: Sequence[Mapping[str, Any]],
    rules: RuleSet | Iterable[RuleLike],
    *,
    max_workers: int | None = None,
) -> list[str | None]:
    """Classify many assets against one rule set, preserving input order."""
    rule_set = RuleSet.of(rules)
    if not max_workers or max_workers <= 1 or len(assets) < 2:
        return [rule_set.classify(a) for a in assets]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(rule_set.classify, assets))
