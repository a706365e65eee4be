"""
Data models for workflow data transformation.

Transformations and pipelines arrive from node configuration as JSON using
the editor's camelCase keys (``sourceField``, ``trueTransformation``...);
they are accepted here alongside the snake_case field names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


@runtime_checkable
class Schema(Protocol):
    """Anything exposing ``parse(value)`` that raises on invalid input."""

    def parse(self, value: Any) -> Any:
        ...


class TransformationType(str, Enum):
    MAP = "map"
    FILTER = "filter"
    AGGREGATE = "aggregate"
    FORMAT = "format"
    EXTRACT = "extract"
    COMBINE = "combine"
    VALIDATE = "validate"
    ENRICH = "enrich"
    CONDITIONAL = "conditional"
    LOOP = "loop"
    SORT = "sort"


class MergeStrategy(str, Enum):
    OVERWRITE = "overwrite"
    COMBINE = "combine"
    ARRAY = "array"
    DEEP = "deep"


class _EngineModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class DataTransformation(_EngineModel):
    """One typed unit of data manipulation.

    Which optional fields matter depends on ``type``; they are checked when
    the transformation runs, not when it is built.
    """

    id: str = Field(..., description="Unique transformation id within its pipeline")
    type: Union[TransformationType, str] = Field(..., description="Transformation kind")
    source_field: Optional[str] = Field(default=None, description="Dot path read from")
    target_field: Optional[str] = Field(default=None, description="Dot path written to")
    operation: str = Field(default="", description="Kind-specific operation name")
    value: Any = Field(default=None, description="Operation operand")
    condition: Optional[str] = Field(default=None, description="Condition expression")
    validation_schema: Optional[Any] = Field(
        default=None, alias="schema", description="Object with parse(value)"
    )
    priority: int = Field(default=0, description="Ascending execution order")

    # conditional
    true_transformation: Optional[DataTransformation] = None
    false_transformation: Optional[DataTransformation] = None

    # loop
    item_transformations: Optional[List[DataTransformation]] = None
    batch_size: Optional[int] = None
    parallel: bool = True


class PipelineMetadata(_EngineModel):
    name: str = ""
    description: str = ""
    version: str = "1.0.0"


class DataPipeline(_EngineModel):
    id: str
    transformations: List[DataTransformation] = Field(default_factory=list)
    input_schema: Optional[Any] = None
    output_schema: Optional[Any] = None
    metadata: Optional[PipelineMetadata] = None


class DataSize(_EngineModel):
    input: int = 0
    output: int = 0


class StepRecord(_EngineModel):
    """Outcome of a single pipeline step."""

    transformation_id: str
    type: str
    success: bool
    error: Optional[str] = None
    execution_time_ms: float = 0.0


class ResultMetadata(_EngineModel):
    execution_time: float = Field(default=0.0, description="Wall-clock milliseconds")
    transformations_applied: int = 0
    data_size: DataSize = Field(default_factory=DataSize)
    steps: List[StepRecord] = Field(default_factory=list)


class TransformationResult(_EngineModel):
    success: bool
    data: Any = None
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)


class TransformationIssue(_EngineModel):
    """Problems found in one configured transformation (1-based ``step``)."""

    step: int
    transformation_id: Optional[str] = None
    messages: List[str] = Field(default_factory=list)


class TransformationValidationReport(_EngineModel):
    valid: bool
    errors: List[TransformationIssue] = Field(default_factory=list)
    warnings: List[TransformationIssue] = Field(default_factory=list)
    total_transformations: int = 0


class TransformNodeConfig(_EngineModel):
    """Configuration of a data-transform node as handed over by the orchestrator."""

    node_id: str
    upstream_node_ids: List[str] = Field(default_factory=list)
    pipeline: DataPipeline
    merge_strategy: Optional[MergeStrategy] = None
    preserve_edge_connections: Optional[bool] = None


DataTransformation.model_rebuild()


__all__ = [
    "Schema",
    "TransformationType",
    "MergeStrategy",
    "DataTransformation",
    "PipelineMetadata",
    "DataPipeline",
    "DataSize",
    "StepRecord",
    "ResultMetadata",
    "TransformationResult",
    "TransformationIssue",
    "TransformationValidationReport",
    "TransformNodeConfig",
]
