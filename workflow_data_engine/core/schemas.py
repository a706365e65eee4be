"""Adapters that give pydantic models and types the ``parse(value)`` schema contract."""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from ..models import Schema


class PydanticSchema:
    """Validate values against a pydantic model or any type pydantic understands.

    ``parse`` returns the validated value and raises ``pydantic.ValidationError``
    when the value does not conform.
    """

    def __init__(self, type_: Any):
        self.type_ = type_
        self._adapter = TypeAdapter(type_)

    def parse(self, value: Any) -> Any:
        return self._adapter.validate_python(value)

    def __repr__(self) -> str:
        return f"PydanticSchema({getattr(self.type_, '__name__', self.type_)!r})"


def as_schema(obj: Any) -> Schema:
    if obj is None:
        raise ValueError("Schema cannot be None")
    if isinstance(obj, Schema):
        return obj
    return PydanticSchema(obj)


__all__ = ["PydanticSchema", "as_schema"]
