"""Data transformation executor for workflow payloads.

Every transformation kind is a predefined operation looked up in a registry;
no user-provided code is ever executed.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import random
import re
import string
import time
from datetime import date, datetime, timezone
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Optional

from ..config import settings
from ..models import DataTransformation, TransformationType
from ..utils.values import deep_equals, is_number, is_truthy
from .conditions import ConditionEvaluator, compare_values
from .exceptions import SchemaValidationError, TransformationError, UnsupportedOperationError
from .expr import MISSING, delete_path, get_path, set_path
from .schemas import as_schema

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase
_WORD_RE = re.compile(r"\w\S*")


def _to_str(x: Any) -> str:
    return x.value if hasattr(x, "value") else str(x)


def _as_object(data: Any) -> Dict[str, Any]:
    """Shallow copy of ``data`` as a dict, the way object spread treats it."""
    if isinstance(data, dict):
        return dict(data)
    if isinstance(data, list):
        return {str(index): item for index, item in enumerate(data)}
    return {}


def _to_number(value: Any) -> Any:
    if is_number(value):
        return value
    if isinstance(value, bool):
        return int(value)
    if value is None:
        return 0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return float("nan")
    return float("nan")


def _to_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if item is None else _to_text(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _to_iso(value: Any) -> str:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif is_number(value):
        moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as e:
            raise TransformationError(f"Invalid time value: {value!r}") from e
    else:
        raise TransformationError(f"Invalid time value: {value!r}")

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _now_iso() -> str:
    return _to_iso(datetime.now(timezone.utc))


def _short_id() -> str:
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


class DataTransformer:
    """Applies a single ``DataTransformation`` to a payload."""

    def __init__(self, evaluator: Optional[ConditionEvaluator] = None):
        self.evaluator = evaluator or ConditionEvaluator()
        self.transformers: Dict[str, Callable] = {
            TransformationType.MAP.value: self._map,
            TransformationType.FILTER.value: self._filter,
            TransformationType.AGGREGATE.value: self._aggregate,
            TransformationType.FORMAT.value: self._format,
            TransformationType.EXTRACT.value: self._extract,
            TransformationType.COMBINE.value: self._combine,
            TransformationType.VALIDATE.value: self._validate,
            TransformationType.ENRICH.value: self._enrich,
            TransformationType.CONDITIONAL.value: self._conditional,
            TransformationType.LOOP.value: self._loop,
            TransformationType.SORT.value: self._sort,
        }
        self.filter_operations: Dict[str, Callable[[Any, Any], bool]] = {
            "exists": lambda v, _: v is not None,
            "not_exists": lambda v, _: v is None,
            "equals": deep_equals,
            "not_equals": lambda v, target: not deep_equals(v, target),
            "greater_than": lambda v, target: compare_values(v, target, "gt"),
            "greater_than_equal": lambda v, target: compare_values(v, target, "gte"),
            "less_than": lambda v, target: compare_values(v, target, "lt"),
            "less_than_equal": lambda v, target: compare_values(v, target, "lte"),
            "contains": lambda v, target: isinstance(v, str) and isinstance(target, str) and target in v,
            "starts_with": lambda v, target: isinstance(v, str) and isinstance(target, str) and v.startswith(target),
            "ends_with": lambda v, target: isinstance(v, str) and isinstance(target, str) and v.endswith(target),
            "regex": self._regex_match,
            "in": self._value_in,
            "not_in": lambda v, target: not self._value_in(v, target),
        }

    async def transform(self, data: Any, transformation: DataTransformation) -> Any:
        """Apply one transformation; errors propagate to the caller."""
        kind = _to_str(transformation.type)
        try:
            handler = self.transformers.get(kind)
            if handler is None:
                raise UnsupportedOperationError(f"Unsupported transformation type: {kind}")
            result = handler(data, transformation)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            logger.error(
                f"Transformation failed: {e}",
                extra={"transformation_id": transformation.id},
            )
            raise

    # ------------------------------------------------------------------
    # predicates
    # ------------------------------------------------------------------

    def evaluate_predicate(self, data: Any, t: DataTransformation) -> bool:
        """Condition string first, then operation on ``source_field``; errors mean no match."""
        try:
            if t.condition:
                return self.evaluator.evaluate(t.condition, data)

            if t.operation and t.source_field:
                value = get_path(data, t.source_field)
                check = self.filter_operations.get(t.operation)
                if check is None:
                    logger.warning(f"Unknown filter operation: {t.operation}")
                    return True
                return bool(check(value, t.value))

            return True
        except Exception as e:
            logger.warning(
                f"Filter condition evaluation failed: {e}",
                extra={"transformation_id": t.id},
            )
            return False

    @staticmethod
    def _regex_match(value: Any, pattern: Any) -> bool:
        if not isinstance(value, str) or not isinstance(pattern, str):
            return False
        try:
            return re.search(pattern, value) is not None
        except re.error:
            logger.warning(f"Invalid regex pattern: {pattern}")
            return False

    @staticmethod
    def _value_in(value: Any, candidates: Any) -> bool:
        if not isinstance(candidates, list):
            return False
        return any(deep_equals(value, item) for item in candidates)

    # ------------------------------------------------------------------
    # transformation kinds
    # ------------------------------------------------------------------

    def _map(self, data: Any, t: DataTransformation) -> Any:
        if not t.source_field or not t.target_field:
            raise TransformationError("Map transformation requires sourceField and targetField")

        result = _as_object(data)
        source_value = get_path(data, t.source_field, MISSING)
        if source_value is not MISSING:
            set_path(result, t.target_field, source_value)
            if t.operation == "rename":
                delete_path(result, t.source_field)
        return result

    def _filter(self, data: Any, t: DataTransformation) -> Any:
        if not t.condition and not t.operation:
            raise TransformationError("Filter transformation requires condition or operation")

        if isinstance(data, list):
            return [item for item in data if self.evaluate_predicate(item, t)]
        return data if self.evaluate_predicate(data, t) else None

    def _aggregate(self, data: Any, t: DataTransformation) -> Any:
        if not isinstance(data, list) or not t.operation:
            raise TransformationError("Aggregate transformation requires array data and operation")

        def values(fallback: float) -> List[Any]:
            picked = [get_path(item, t.source_field) if t.source_field else item for item in data]
            return [v if is_number(v) else fallback for v in picked]

        op = t.operation
        if op == "sum":
            return sum(values(0))
        if op == "avg":
            return sum(values(0)) / len(data) if data else float("nan")
        if op == "count":
            return len(data)
        if op == "max":
            return max(values(float("-inf")), default=float("-inf"))
        if op == "min":
            return min(values(float("inf")), default=float("inf"))
        raise UnsupportedOperationError(f"Unsupported aggregation operation: {op}")

    def _format(self, data: Any, t: DataTransformation) -> Any:
        result = _as_object(data)
        value = get_path(data, t.source_field) if t.source_field else data
        operand = t.value
        op = t.operation

        if op == "uppercase":
            formatted = value.upper() if isinstance(value, str) else value
        elif op == "lowercase":
            formatted = value.lower() if isinstance(value, str) else value
        elif op == "trim":
            formatted = value.strip() if isinstance(value, str) else value
        elif op == "title_case":
            formatted = (
                _WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), value)
                if isinstance(value, str)
                else value
            )
        elif op == "date":
            formatted = _to_iso(value)
        elif op in ("number", "parse_number"):
            formatted = _to_number(value)
        elif op in ("string", "to_string"):
            formatted = _to_text(value)
        elif op in ("boolean", "parse_boolean"):
            if isinstance(value, bool):
                formatted = value
            elif isinstance(value, str):
                formatted = value.lower() == "true" or value == "1"
            else:
                formatted = is_truthy(value)
        elif op == "json":
            formatted = json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
        elif op == "parse_json":
            try:
                formatted = json.loads(value) if isinstance(value, str) else value
            except ValueError:
                formatted = value
        elif op in ("multiply", "divide", "add", "subtract"):
            formatted = self._arithmetic(op, value, operand)
        else:
            raise UnsupportedOperationError(f"Unsupported format operation: {op}")

        if t.target_field:
            set_path(result, t.target_field, formatted)
        elif t.source_field:
            set_path(result, t.source_field, formatted)
        else:
            return formatted
        return result

    @staticmethod
    def _arithmetic(op: str, value: Any, operand: Any) -> Any:
        if not (is_number(value) and is_number(operand)):
            return value
        if op == "multiply":
            return value * operand
        if op == "divide":
            return value / operand if operand != 0 else value
        if op == "add":
            return value + operand
        return value - operand

    def _extract(self, data: Any, t: DataTransformation) -> Any:
        if not t.source_field:
            raise TransformationError("Extract transformation requires sourceField")

        extracted = get_path(data, t.source_field)
        if t.target_field:
            result = _as_object(data)
            set_path(result, t.target_field, extracted)
            return result
        return extracted

    def _combine(self, data: Any, t: DataTransformation) -> Any:
        if not t.value or not isinstance(t.value, list):
            raise TransformationError("Combine transformation requires array of field names in value")

        gathered = [(field, get_path(data, field, MISSING)) for field in t.value]
        present = [(field, value) for field, value in gathered if value is not MISSING]

        if t.operation == "concat":
            return "".join("" if value is None else _to_text(value) for _, value in present)
        if t.operation == "object":
            return {field: value for field, value in present}
        return [value for _, value in present]

    def _validate(self, data: Any, t: DataTransformation) -> Any:
        if t.validation_schema is None:
            raise TransformationError("Validate transformation requires schema")
        try:
            as_schema(t.validation_schema).parse(data)
        except Exception as e:
            raise SchemaValidationError(f"Data validation failed: {e}") from e
        return data

    async def _enrich(self, data: Any, t: DataTransformation) -> Any:
        result = _as_object(data)

        if t.operation == "timestamp":
            set_path(result, t.target_field or "timestamp", _now_iso())
        elif t.operation == "uuid":
            set_path(result, t.target_field or "id", _short_id())
        elif t.operation == "computed":
            if callable(t.value):
                computed = t.value(data)
                if inspect.isawaitable(computed):
                    computed = await computed
                set_path(result, t.target_field or "computed", computed)
        elif t.target_field and t.value is not None:
            set_path(result, t.target_field, t.value)

        return result

    async def _conditional(self, data: Any, t: DataTransformation) -> Any:
        if not t.condition:
            raise TransformationError("Conditional transformation requires condition")

        try:
            matched = self.evaluate_predicate(data, t)
            if matched and t.true_transformation is not None:
                return await self.transform(data, t.true_transformation)
            if not matched and t.false_transformation is not None:
                return await self.transform(data, t.false_transformation)
            return data
        except Exception as e:
            logger.error(
                f"Conditional transformation failed: {e}",
                extra={"transformation_id": t.id},
            )
            return data

    async def _apply_chain(self, item: Any, chain: List[DataTransformation]) -> Any:
        for sub in chain:
            item = await self.transform(item, sub)
        return item

    async def _loop(self, data: Any, t: DataTransformation) -> Any:
        if not isinstance(data, list):
            raise TransformationError("Loop transformation requires array data")
        chain = t.item_transformations or []
        if not chain:
            return data

        try:
            if t.parallel is not False:
                # gather() returns results in argument order; every chain settles before an error surfaces
                settled = await asyncio.gather(
                    *(self._apply_chain(item, chain) for item in data), return_exceptions=True
                )
                failures = [r for r in settled if isinstance(r, BaseException)]
                if failures:
                    raise failures[0]
                return list(settled)

            batch_size = settings.LOOP_BATCH_SIZE if t.batch_size is None else t.batch_size
            if batch_size < 1:
                raise TransformationError(f"Loop batchSize must be at least 1, got {batch_size}")
            results: List[Any] = []
            for start in range(0, len(data), batch_size):
                for item in data[start : start + batch_size]:
                    results.append(await self._apply_chain(item, chain))
            return results
        except Exception as e:
            logger.error(f"Loop transformation failed: {e}", extra={"transformation_id": t.id})
            raise

    def _sort(self, data: Any, t: DataTransformation) -> Any:
        if not isinstance(data, list):
            return data

        field = t.source_field
        ascending = (t.operation or "asc") == "asc"

        def compare(a: Any, b: Any) -> int:
            left = get_path(a, field) if field else a
            right = get_path(b, field) if field else b
            if isinstance(left, str) and isinstance(right, str):
                left, right = left.lower(), right.lower()
            try:
                if left < right:
                    return -1 if ascending else 1
                if left > right:
                    return 1 if ascending else -1
            except TypeError:
                pass
            return 0

        try:
            return sorted(data, key=cmp_to_key(compare))
        except Exception as e:
            logger.error(f"Sort transformation failed: {e}", extra={"transformation_id": t.id})
            return data


# Global transformer instance
transformer = DataTransformer()


async def transform(data: Any, transformation: DataTransformation) -> Any:
    return await transformer.transform(data, transformation)


__all__ = ["DataTransformer", "transformer", "transform"]
