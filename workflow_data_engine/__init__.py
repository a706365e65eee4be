"""
workflow_data_engine

Moves, reshapes, validates and routes the JSON payloads that flow between
workflow nodes: a safe condition evaluator, a pipeline-of-transformations
executor with partial-failure semantics, and the dependency filter that
decides which upstream outputs a node may see.
"""

from .core import (
    ConditionEvaluator,
    DataDependencyFilter,
    DataTransformer,
    PipelineRunner,
    apply_pipeline,
    create_compatibility_pipeline,
    filter_relevant_data,
    merge_data,
    transform,
    validate_transformations,
)
from .models import (
    DataPipeline,
    DataTransformation,
    MergeStrategy,
    TransformationResult,
    TransformationType,
    TransformNodeConfig,
)
from .runners import DataTransformRunner

__all__ = [
    "ConditionEvaluator",
    "DataDependencyFilter",
    "DataTransformer",
    "PipelineRunner",
    "DataTransformRunner",
    "transform",
    "validate_transformations",
    "apply_pipeline",
    "create_compatibility_pipeline",
    "filter_relevant_data",
    "merge_data",
    "DataPipeline",
    "DataTransformation",
    "MergeStrategy",
    "TransformationResult",
    "TransformationType",
    "TransformNodeConfig",
]
