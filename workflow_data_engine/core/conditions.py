"""Safe condition evaluation for filter and conditional transformations.

Conditions are plain strings authored in the workflow editor, e.g.
``status == "active"`` or ``amount >= 100``. They are tokenized and
interpreted here; user strings are never handed to ``eval``/``exec``.

Supported forms:
- ``field``                      truthiness of the nested value
- ``field <op> literal``         typed comparison, op in == != > >= < <=

Anything longer (``&&``, ``||``, parentheses) is not interpreted and
evaluates to True with a warning.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, List

from ..utils.values import deep_equals, is_number, is_truthy
from .expr import get_path

logger = logging.getLogger(__name__)

NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
OPERATORS = ("&&", "||", "==", "!=", ">=", "<=", "(", ")", ">", "<")
TWO_CHAR_OPERATORS = ("&&", "||", "==", "!=", ">=", "<=")


def compare_values(a: Any, b: Any, operation: str) -> bool:
    """Ordered comparison for operands of the same kind; False otherwise.

    ``operation`` is one of ``gt``, ``gte``, ``lt``, ``lte``.
    """
    if is_number(a) and is_number(b):
        pass
    elif isinstance(a, str) and isinstance(b, str):
        pass
    elif isinstance(a, datetime) and isinstance(b, datetime):
        try:
            a, b = a.timestamp(), b.timestamp()
        except (OverflowError, ValueError, OSError):
            return False
    else:
        return False

    if operation == "gt":
        return a > b
    if operation == "gte":
        return a >= b
    if operation == "lt":
        return a < b
    if operation == "lte":
        return a <= b
    return False


_RELATIONAL = {">": "gt", ">=": "gte", "<": "lt", "<=": "lte"}


class ConditionEvaluator:
    """Evaluates condition strings against a single data object."""

    def evaluate(self, condition: str, data: Any) -> bool:
        try:
            tokens = self.tokenize(condition)
            return self.evaluate_tokens(tokens, data)
        except Exception as e:
            logger.warning(f"Safe condition evaluation failed: {e}")
            return False

    def tokenize(self, condition: str) -> List[str]:
        tokens: List[str] = []
        current = ""
        quote = None
        i = 0
        while i < len(condition):
            char = condition[i]
            if quote is None and char in ('"', "'"):
                if current.strip():
                    tokens.append(current.strip())
                quote = char
                current = char
            elif quote is not None and char == quote:
                tokens.append(current + char)
                current = ""
                quote = None
            elif quote is not None:
                current += char
            elif char.isspace():
                if current.strip():
                    tokens.append(current.strip())
                current = ""
            elif condition.startswith(OPERATORS, i):
                if current.strip():
                    tokens.append(current.strip())
                current = ""
                pair = condition[i : i + 2]
                if pair in TWO_CHAR_OPERATORS:
                    tokens.append(pair)
                    i += 1
                else:
                    tokens.append(char)
            else:
                current += char
            i += 1

        if current.strip():
            tokens.append(current.strip())
        return [token for token in tokens if token]

    def evaluate_tokens(self, tokens: List[str], data: Any) -> bool:
        if not tokens:
            return True
        if len(tokens) == 1:
            return is_truthy(get_path(data, tokens[0]))

        if len(tokens) == 3:
            field, operator, value_token = tokens
            field_value = get_path(data, field)
            compare_value = self.parse_value(value_token)
            if operator == "==":
                return deep_equals(field_value, compare_value)
            if operator == "!=":
                return not deep_equals(field_value, compare_value)
            if operator in _RELATIONAL:
                return compare_values(field_value, compare_value, _RELATIONAL[operator])
            logger.warning(f"Unknown condition operator: {operator}")
            return False

        # TODO: replace with a recursive-descent parser once fail-closed
        # semantics for compound conditions are agreed with workflow authors.
        logger.warning(f"Complex condition evaluation not fully supported: {' '.join(tokens)}")
        return True

    @staticmethod
    def parse_value(token: str) -> Any:
        if token and token[0] == token[-1] and token[0] in ('"', "'"):
            return token[1:-1]
        if NUMBER_RE.match(token):
            return float(token) if "." in token else int(token)
        if token == "true":
            return True
        if token == "false":
            return False
        if token in ("null", "undefined"):
            return None
        return token


condition_evaluator = ConditionEvaluator()


def evaluate_condition(condition: str, data: Any) -> bool:
    return condition_evaluator.evaluate(condition, data)


__all__ = ["ConditionEvaluator", "compare_values", "condition_evaluator", "evaluate_condition"]
