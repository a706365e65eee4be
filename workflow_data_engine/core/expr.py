"""Dot-path helpers for reading and writing nested payload values (core)."""

from __future__ import annotations

from typing import Any, List, Optional


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Distinguishes an absent key from a key holding None (JSON null).
MISSING: Any = _Missing()


def _step(cur: Any, part: str) -> Any:
    if isinstance(cur, dict):
        return cur.get(part, MISSING)
    if isinstance(cur, list):
        if part.isdigit():
            idx = int(part)
            if 0 <= idx < len(cur):
                return cur[idx]
        return MISSING
    return MISSING


def get_path(data: Any, path: Optional[str], default: Any = None) -> Any:
    if not path:
        return data
    cur = data
    for part in path.split("."):
        cur = _step(cur, part)
        if cur is MISSING:
            return default
    return cur


def _container_for(cur: Any, part: str, create: bool) -> Any:
    nxt = _step(cur, part)
    if isinstance(nxt, (dict, list)):
        return nxt
    if not create or not isinstance(cur, dict):
        return None
    cur[part] = {}
    return cur[part]


def set_path(data: Any, path: str, value: Any) -> None:
    """Write ``value`` at ``path``, creating intermediate dicts on the way."""
    parts: List[str] = path.split(".")
    cur = data
    for part in parts[:-1]:
        cur = _container_for(cur, part, create=True)
        if cur is None:
            raise TypeError(f"Cannot set '{path}': '{part}' is not an object")
    last = parts[-1]
    if isinstance(cur, list) and last.isdigit() and int(last) < len(cur):
        cur[int(last)] = value
    elif isinstance(cur, dict):
        cur[last] = value
    else:
        raise TypeError(f"Cannot set '{path}' on {type(cur).__name__}")


def delete_path(data: Any, path: str) -> None:
    parts = path.split(".")
    cur = data
    for part in parts[:-1]:
        cur = _container_for(cur, part, create=False)
        if cur is None:
            return
    if isinstance(cur, dict):
        cur.pop(parts[-1], None)


__all__ = ["MISSING", "get_path", "set_path", "delete_path"]
