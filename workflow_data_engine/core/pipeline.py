"""Pipeline runner: applies an ordered list of transformations to one payload.

A failing step is recorded and skipped, the remaining steps still run.
Only an input schema failure stops a pipeline before its first step.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from ..models import (
    DataPipeline,
    DataSize,
    DataTransformation,
    PipelineMetadata,
    ResultMetadata,
    StepRecord,
    TransformationResult,
    TransformationType,
)
from ..utils.values import json_size
from .exceptions import InputValidationError
from .schemas import as_schema
from .transformers import DataTransformer, _to_str, transformer as default_transformer

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class PipelineRunner:
    def __init__(self, data_transformer: Optional[DataTransformer] = None):
        self.transformer = data_transformer or default_transformer

    async def apply_pipeline(self, data: Any, pipeline: DataPipeline) -> TransformationResult:
        start = time.perf_counter()
        input_size = json_size(data)
        errors: List[str] = []
        warnings: List[str] = []
        steps: List[StepRecord] = []
        transformed = data
        applied = 0
        log_extra = {"pipeline_id": pipeline.id}

        def build(success: bool, output_size: int) -> TransformationResult:
            return TransformationResult(
                success=success,
                data=transformed,
                errors=errors,
                warnings=warnings,
                metadata=ResultMetadata(
                    execution_time=_elapsed_ms(start),
                    transformations_applied=applied,
                    data_size=DataSize(input=input_size, output=output_size),
                    steps=steps,
                ),
            )

        try:
            try:
                self._validate_input(data, pipeline)
            except InputValidationError as e:
                errors.append(str(e))
                logger.warning(str(e), extra=log_extra)
                return build(False, 0)

            # sorted() is stable: equal priorities keep their configured order
            ordered = sorted(pipeline.transformations, key=lambda t: t.priority or 0)

            for step in ordered:
                step_start = time.perf_counter()
                try:
                    transformed = await self.transformer.transform(transformed, step)
                    applied += 1
                    steps.append(
                        StepRecord(
                            transformation_id=step.id,
                            type=_to_str(step.type),
                            success=True,
                            execution_time_ms=_elapsed_ms(step_start),
                        )
                    )
                    logger.debug(f"Applied transformation {step.id} ({_to_str(step.type)})", extra=log_extra)
                except Exception as e:
                    message = f"Transformation {step.id} failed: {e}"
                    errors.append(message)
                    steps.append(
                        StepRecord(
                            transformation_id=step.id,
                            type=_to_str(step.type),
                            success=False,
                            error=str(e),
                            execution_time_ms=_elapsed_ms(step_start),
                        )
                    )
                    logger.warning(message, extra=log_extra)

            if pipeline.output_schema is not None:
                try:
                    as_schema(pipeline.output_schema).parse(transformed)
                except Exception as e:
                    warnings.append(f"Output validation warning: {e}")

            logger.debug(
                f"Pipeline {pipeline.id} applied {applied}/{len(ordered)} transformations "
                f"with {len(errors)} errors",
                extra=log_extra,
            )
            return build(not errors, json_size(transformed))
        except Exception as e:
            errors.append(f"Pipeline execution failed: {e}")
            logger.error(f"Pipeline execution failed: {e}", extra=log_extra)
            return build(False, json_size(transformed))

    @staticmethod
    def _validate_input(data: Any, pipeline: DataPipeline) -> None:
        if pipeline.input_schema is None:
            return
        try:
            as_schema(pipeline.input_schema).parse(data)
        except Exception as e:
            raise InputValidationError(f"Input validation failed: {e}") from e

    @staticmethod
    def create_compatibility_pipeline(
        source_schema: Any,
        target_schema: Any,
        field_mapping: Optional[Dict[str, str]] = None,
    ) -> DataPipeline:
        """Pipeline renaming fields so one node's output fits the next node's input."""
        transformations = [
            DataTransformation(
                id=f"map-{index}",
                type=TransformationType.MAP,
                source_field=source_field,
                target_field=target_field,
                operation="rename",
                priority=index,
            )
            for index, (source_field, target_field) in enumerate((field_mapping or {}).items())
        ]

        return DataPipeline(
            id=f"compatibility-{int(time.time() * 1000)}",
            transformations=transformations,
            input_schema=source_schema,
            output_schema=target_schema,
            metadata=PipelineMetadata(
                name="Node Compatibility Pipeline",
                description="Ensures data compatibility between connected nodes",
                version="1.0.0",
            ),
        )


pipeline_runner = PipelineRunner()


async def apply_pipeline(data: Any, pipeline: DataPipeline) -> TransformationResult:
    return await pipeline_runner.apply_pipeline(data, pipeline)


def create_compatibility_pipeline(
    source_schema: Any,
    target_schema: Any,
    field_mapping: Optional[Dict[str, str]] = None,
) -> DataPipeline:
    return PipelineRunner.create_compatibility_pipeline(source_schema, target_schema, field_mapping)


__all__ = ["PipelineRunner", "pipeline_runner", "apply_pipeline", "create_compatibility_pipeline"]
