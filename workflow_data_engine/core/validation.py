"""Static checks of transformation configuration before a pipeline runs.

Transformations are flat records whose required fields depend on ``type``;
the executor only notices a missing field when the step runs. This module
reports those problems up front so the node editor can show them.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..models import (
    DataTransformation,
    TransformationIssue,
    TransformationType,
    TransformationValidationReport,
)
from .pipeline_templates import normalize_transformation
from .transformers import _to_str, transformer

logger = logging.getLogger(__name__)

AGGREGATE_OPERATIONS = ("sum", "avg", "count", "max", "min")
SORT_ORDERS = ("asc", "desc")

RawTransformation = Union[DataTransformation, dict]


def _coerce(raw: Any, step: int) -> Tuple[Optional[DataTransformation], List[str]]:
    if isinstance(raw, DataTransformation):
        return raw, []
    if not isinstance(raw, dict):
        return None, ["Transformation must be an object"]

    normalized = normalize_transformation(raw)
    if not normalized.get("type"):
        return None, ["Transformation type is required"]
    normalized.setdefault("id", f"step-{step}")
    try:
        return DataTransformation.model_validate(normalized), []
    except ValidationError as e:
        return None, [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        ]


def check_transformation(t: DataTransformation) -> Tuple[List[str], List[str]]:
    """Return ``(errors, warnings)`` for one transformation, nested ones included."""
    errors: List[str] = []
    warnings: List[str] = []
    kind = _to_str(t.type)

    if kind == TransformationType.MAP.value:
        if not t.source_field:
            errors.append("Source field is required for map transformation")
        if not t.target_field:
            errors.append("Output field is required for map transformation")

    elif kind == TransformationType.FILTER.value:
        if not t.condition and not t.operation:
            errors.append("Condition or operation is required for filter transformation")
        elif not t.condition and t.operation not in transformer.filter_operations:
            warnings.append(f"Unknown filter operation '{t.operation}' keeps every item")
        elif not t.condition and not t.source_field:
            warnings.append("Filter operation has no source field and keeps every item")

    elif kind == TransformationType.FORMAT.value:
        if not t.operation:
            errors.append("Operation is required for format transformation")
        if not t.source_field and not t.target_field:
            warnings.append("No field specified for format transformation")

    elif kind == TransformationType.EXTRACT.value:
        if not t.source_field:
            errors.append("Source field is required for extract transformation")

    elif kind == TransformationType.AGGREGATE.value:
        if not t.operation:
            errors.append("Operation is required for aggregate transformation")
        elif t.operation not in AGGREGATE_OPERATIONS:
            errors.append(f"Unsupported aggregation operation: {t.operation}")

    elif kind == TransformationType.COMBINE.value:
        if not t.value or not isinstance(t.value, list):
            errors.append("Array of field names is required for combine transformation")

    elif kind == TransformationType.VALIDATE.value:
        if t.validation_schema is None:
            errors.append("Schema is required for validate transformation")

    elif kind == TransformationType.ENRICH.value:
        if t.operation == "computed" and not callable(t.value):
            warnings.append("Computed enrichment has no callable value and adds nothing")
        elif t.operation not in ("timestamp", "uuid", "computed") and not t.target_field:
            warnings.append("Enrich transformation adds nothing without targetField")

    elif kind == TransformationType.CONDITIONAL.value:
        if not t.condition:
            errors.append("Condition is required for conditional transformation")
        for label, branch in (("trueTransformation", t.true_transformation),
                              ("falseTransformation", t.false_transformation)):
            if branch is not None:
                branch_errors, branch_warnings = check_transformation(branch)
                errors.extend(f"{label}: {message}" for message in branch_errors)
                warnings.extend(f"{label}: {message}" for message in branch_warnings)
        if t.true_transformation is None and t.false_transformation is None:
            warnings.append("Conditional transformation has no branches and returns data unchanged")

    elif kind == TransformationType.LOOP.value:
        if not t.item_transformations:
            errors.append("Item transformations array is required for loop transformation")
        if t.batch_size is not None and t.batch_size < 1:
            errors.append(f"Loop batchSize must be at least 1, got {t.batch_size}")
        for index, item in enumerate(t.item_transformations or []):
            item_errors, item_warnings = check_transformation(item)
            errors.extend(f"itemTransformations[{index}]: {message}" for message in item_errors)
            warnings.extend(f"itemTransformations[{index}]: {message}" for message in item_warnings)

    elif kind == TransformationType.SORT.value:
        if not t.operation:
            warnings.append("Sort order not specified, defaulting to ascending")
        elif t.operation not in SORT_ORDERS:
            warnings.append(f"Sort order '{t.operation}' is not asc or desc, sorting descending")

    else:
        errors.append(f"Unsupported transformation type: {kind}")

    return errors, warnings


def validate_transformations(transformations: Iterable[RawTransformation]) -> TransformationValidationReport:
    """Check every transformation of a pipeline without running it.

    Accepts ``DataTransformation`` objects or raw editor dicts (``field`` /
    ``outputField`` keys are understood). Steps are numbered from 1 in the
    given order.
    """
    items = list(transformations)
    errors: List[TransformationIssue] = []
    warnings: List[TransformationIssue] = []
    seen_ids = set()

    for step, raw in enumerate(items, start=1):
        t, step_errors = _coerce(raw, step)
        step_warnings: List[str] = []
        if t is not None:
            step_errors, step_warnings = check_transformation(t)
            if t.id in seen_ids:
                step_warnings.append(f"Duplicate transformation id '{t.id}'")
            seen_ids.add(t.id)

        transformation_id = t.id if t is not None else (raw.get("id") if isinstance(raw, dict) else None)
        if step_errors:
            errors.append(TransformationIssue(step=step, transformation_id=transformation_id, messages=step_errors))
        if step_warnings:
            warnings.append(TransformationIssue(step=step, transformation_id=transformation_id, messages=step_warnings))

    report = TransformationValidationReport(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        total_transformations=len(items),
    )
    logger.debug(
        f"Validated {report.total_transformations} transformations: "
        f"{len(errors)} with errors, {len(warnings)} with warnings"
    )
    return report


__all__ = ["check_transformation", "validate_transformations"]
