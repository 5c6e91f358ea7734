from __future__ import annotations

import functools
import logging
import math
import re
from collections.abc import Mapping
from typing import Any

from ..models.rules import Operator

"""Operator evaluator for classification rules.

``evaluate`` is total: it never raises, whatever the rule author typed.
Comparisons are case-insensitive and ignore surrounding whitespace. Numeric
operators compare the leading numeric portion of both sides ("64GB" -> 64).
An absent actual value never matches, including for ``!=``.
"""

__all__ = [
    "evaluate",
    "compile_pattern",
    "pattern_error",
    "parse_leading_number",
    "render_value",
    "PATTERN_CACHE_SIZE",
]

logger = logging.getLogger(__name__)

PATTERN_CACHE_SIZE = 1024

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def render_value(value: Any) -> str | None:
    """String form of a field value as rules see it.

    Booleans render as true/false, integral floats without a trailing ".0".
    Mappings and lists have no scalar form and render as None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value == int(value):
            return str(int(value))
        return repr(value)
    if isinstance(value, (Mapping, list, tuple, set)):
        return None
    return str(value)


def parse_leading_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return float(value) if math.isfinite(value) else None
        except OverflowError:
            return None
    m = _LEADING_NUMBER.match(str(value).strip())
    if not m:
        return None
    return float(m.group(0))


@functools.lru_cache(maxsize=PATTERN_CACHE_SIZE)
def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compiled case-insensitive pattern, or None when it does not compile.

    Failures are cached too, so a broken pattern costs one compile per run.
    """
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        return None


def pattern_error(pattern: str) -> str | None:
    """Compiler message for an invalid pattern, None when it is valid."""
    if compile_pattern(pattern) is not None:
        return None
    try:
        re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        return str(e)
    return None


def evaluate(actual: Any, operator: Any, literal: Any) -> bool:
    op = Operator.parse(operator)
    if op is None:
        logger.warning(f"unsupported rule operator {operator!r}; treating as no match")
        return False

    try:
        text = render_value(actual)
        wanted = "" if literal is None else str(literal).strip()
    except (ValueError, OverflowError):
        # 4300 桁を超える int など文字列にできない値
        return False
    if text is None:
        return False
    text = text.strip()

    if op is Operator.REGEX:
        compiled = compile_pattern(wanted)
        if compiled is None:
            return False
        return compiled.search(text) is not None

    if op.is_numeric:
        left = parse_leading_number(text)
        right = parse_leading_number(wanted)
        if left is None or right is None:
            return False
        if op is Operator.GE:
            return left >= right
        if op is Operator.LE:
            return left <= right
        if op is Operator.GT:
            return left > right
        return left < right

    left_text = text.lower()
    right_text = wanted.lower()
    if op is Operator.EQ:
        return left_text == right_text
    if op is Operator.NE:
        return left_text != right_text
    return right_text in left_text  # includes
