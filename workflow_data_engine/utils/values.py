"""Value utilities shared by the transformation engine.

Payloads are JSON-shaped (dicts, lists, primitives) with the occasional
``datetime``; these helpers never mutate their arguments.
"""

from __future__ import annotations

import copy
import json
import math
from datetime import date, datetime
from typing import Any, Dict


def is_number(value: Any) -> bool:
    """True for ints and floats, never for bools."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """Truthiness as workflow expressions see it: empty containers are truthy."""
    if value is None or value is False:
        return False
    if is_number(value):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def deep_clone(value: Any) -> Any:
    """Clone nested dicts/lists so the copy shares no mutable structure."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (datetime, date)):
        # replace() with no arguments builds a new, equal instance
        return value.replace()
    if isinstance(value, (list, tuple)):
        return [deep_clone(item) for item in value]
    if isinstance(value, dict):
        return {key: deep_clone(item) for key, item in value.items()}
    return copy.deepcopy(value)


def deep_equals(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if a is None or b is None:
        return False
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) or is_number(b):
        return is_number(a) and is_number(b) and a == b
    if isinstance(a, list) or isinstance(b, list):
        if not (isinstance(a, list) and isinstance(b, list)) or len(a) != len(b):
            return False
        return all(deep_equals(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) or isinstance(b, dict):
        if not (isinstance(a, dict) and isinstance(b, dict)):
            return False
        if a.keys() != b.keys():
            return False
        return all(deep_equals(a[key], b[key]) for key in a)
    if type(a) is not type(b):
        return False
    return a == b


def deep_merge(*objects: Dict[str, Any]) -> Dict[str, Any]:
    """Merge dicts left to right; nested dicts merge, anything else overwrites."""
    result: Dict[str, Any] = {}
    for obj in objects:
        if not isinstance(obj, dict):
            continue
        for key, value in obj.items():
            current = result.get(key)
            if current and isinstance(current, dict) and isinstance(value, dict):
                result[key] = deep_merge(current, value)
            else:
                result[key] = value
    return result


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return str(value)


def json_size(value: Any) -> int:
    """Length of the compact JSON serialisation, used as a payload size proxy."""
    try:
        return len(json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_json_default))
    except (TypeError, ValueError):
        return len(str(value))


__all__ = ["is_number", "is_truthy", "deep_clone", "deep_equals", "deep_merge", "json_size"]
