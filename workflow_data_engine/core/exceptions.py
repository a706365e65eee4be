"""Engine-specific exceptions for workflow_data_engine (core)."""

from __future__ import annotations


class EngineError(Exception):
    pass


class TransformationError(EngineError):
    """A transformation step could not be applied to its input."""


class UnsupportedOperationError(TransformationError):
    pass


class SchemaValidationError(TransformationError):
    pass


class InputValidationError(EngineError):
    """Pipeline input rejected by the pipeline's input schema."""


class TemplateNotFoundError(EngineError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


__all__ = [
    "EngineError",
    "TransformationError",
    "UnsupportedOperationError",
    "SchemaValidationError",
    "InputValidationError",
    "TemplateNotFoundError",
]
