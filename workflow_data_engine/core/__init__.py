from .conditions import ConditionEvaluator, evaluate_condition
from .dependency_filter import DataDependencyFilter, filter_relevant_data
from .exceptions import (
    EngineError,
    InputValidationError,
    SchemaValidationError,
    TemplateNotFoundError,
    TransformationError,
    UnsupportedOperationError,
)
from .merge import merge_data
from .pipeline import PipelineRunner, apply_pipeline, create_compatibility_pipeline
from .schemas import PydanticSchema, as_schema
from .transformers import DataTransformer, transform
from .validation import validate_transformations

__all__ = [
    "ConditionEvaluator",
    "evaluate_condition",
    "DataDependencyFilter",
    "filter_relevant_data",
    "DataTransformer",
    "transform",
    "validate_transformations",
    "PipelineRunner",
    "apply_pipeline",
    "create_compatibility_pipeline",
    "merge_data",
    "PydanticSchema",
    "as_schema",
    "EngineError",
    "TransformationError",
    "UnsupportedOperationError",
    "SchemaValidationError",
    "InputValidationError",
    "TemplateNotFoundError",
]
