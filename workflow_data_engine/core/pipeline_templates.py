"""Built-in transformation templates offered by the node editor.

Templates keep their transformations in the editor's raw form, where the
read path is ``field`` and the write path ``outputField``;
``build_pipeline_from_template`` turns them into a runnable ``DataPipeline``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import DataPipeline, DataTransformation, PipelineMetadata
from .exceptions import TemplateNotFoundError

CATEGORIES = ("api", "data-processing", "formatting", "validation", "aggregation", "finance", "utility")


class TransformationTemplate(BaseModel):
    id: str
    name: str
    description: str
    category: str
    tags: List[str] = Field(default_factory=list)
    difficulty: str = "beginner"
    transformations: List[Dict[str, Any]] = Field(default_factory=list)
    example_input: Any = None
    example_output: Any = None


_TEMPLATES: List[TransformationTemplate] = [
    TransformationTemplate(
        id="api-response-cleanup",
        name="API Response Cleanup",
        description="Clean and normalize API response data by extracting the payload and standardizing fields",
        category="api",
        tags=["api", "response", "cleanup", "normalize"],
        transformations=[
            {"id": "extract-data-payload", "type": "extract", "field": "data", "outputField": "payload"},
            {"id": "rename-status", "type": "map", "field": "status", "outputField": "statusCode", "operation": "rename"},
        ],
        example_input={"data": {"users": [{"id": 1, "name": "John"}]}, "status": 200, "message": "Success"},
        example_output={
            "data": {"users": [{"id": 1, "name": "John"}]},
            "payload": {"users": [{"id": 1, "name": "John"}]},
            "statusCode": 200,
            "message": "Success",
        },
    ),
    TransformationTemplate(
        id="price-data-normalization",
        name="Price Data Normalization",
        description="Normalize price data from different sources into a consistent format",
        category="finance",
        tags=["price", "finance", "currency", "normalization"],
        difficulty="intermediate",
        transformations=[
            {"id": "parse-price", "type": "format", "field": "price", "operation": "parse_number", "outputField": "numericPrice"},
            {"id": "convert-to-cents", "type": "format", "field": "numericPrice", "operation": "multiply", "value": 100, "outputField": "priceInCents"},
            {"id": "normalize-currency", "type": "format", "field": "currency", "operation": "uppercase", "outputField": "currencyCode"},
            {"id": "add-timestamp", "type": "enrich", "operation": "timestamp", "outputField": "normalizedAt"},
        ],
        example_input={"price": "12.5", "currency": "usd"},
    ),
    TransformationTemplate(
        id="user-data-processing",
        name="User Data Processing",
        description="Process and validate user registration data with proper formatting",
        category="data-processing",
        tags=["user", "validation", "formatting", "registration"],
        difficulty="intermediate",
        transformations=[
            {"id": "normalize-email", "type": "format", "field": "email", "operation": "lowercase", "outputField": "email"},
            {"id": "format-name", "type": "format", "field": "name", "operation": "title_case", "outputField": "displayName"},
            {"id": "extract-avatar", "type": "extract", "field": "profile.avatar", "outputField": "avatarUrl"},
            {"id": "generate-id", "type": "enrich", "operation": "uuid", "outputField": "userId"},
        ],
        example_input={
            "email": "JOHN.DOE@EXAMPLE.COM",
            "name": "john doe",
            "profile": {"avatar": "https://example.com/avatar.jpg"},
        },
    ),
    TransformationTemplate(
        id="array-aggregation",
        name="Array Data Aggregation",
        description="Sum a numeric field across an array of records",
        category="aggregation",
        tags=["array", "statistics", "math", "aggregation"],
        transformations=[
            {"id": "calculate-total", "type": "aggregate", "field": "amount", "operation": "sum"},
        ],
        example_input=[{"amount": 100}, {"amount": 200}, {"amount": 150}],
        example_output=450,
    ),
    TransformationTemplate(
        id="conditional-data-routing",
        name="Conditional Data Routing",
        description="Route data based on conditions with different transformations for each path",
        category="data-processing",
        tags=["conditional", "routing", "logic", "branching"],
        difficulty="advanced",
        transformations=[
            {
                "id": "route-by-status",
                "type": "conditional",
                "condition": 'status == "premium"',
                "trueTransformation": {
                    "id": "premium-processing",
                    "type": "format",
                    "field": "price",
                    "operation": "multiply",
                    "value": 0.5,
                    "outputField": "finalPrice",
                },
                "falseTransformation": {
                    "id": "regular-processing",
                    "type": "map",
                    "field": "price",
                    "outputField": "finalPrice",
                },
            }
        ],
        example_input={"status": "premium", "price": 100},
        example_output={"status": "premium", "price": 100, "finalPrice": 50.0},
    ),
    TransformationTemplate(
        id="text-formatting-suite",
        name="Text Formatting Suite",
        description="Comprehensive text formatting operations for string data",
        category="formatting",
        tags=["text", "string", "formatting", "case"],
        transformations=[
            {"id": "trim-whitespace", "type": "format", "field": "title", "operation": "trim", "outputField": "cleanTitle"},
            {"id": "title-case", "type": "format", "field": "cleanTitle", "operation": "title_case", "outputField": "formattedTitle", "priority": 1},
            {"id": "uppercase-code", "type": "format", "field": "code", "operation": "uppercase", "outputField": "codeUpper", "priority": 2},
        ],
        example_input={"title": "  hello world  ", "code": "abc123"},
        example_output={
            "title": "  hello world  ",
            "code": "abc123",
            "cleanTitle": "hello world",
            "formattedTitle": "Hello World",
            "codeUpper": "ABC123",
        },
    ),
    TransformationTemplate(
        id="data-validation-pipeline",
        name="Data Validation Pipeline",
        description="Drop records with malformed emails or ages, then sanitize phone numbers",
        category="validation",
        tags=["validation", "sanitization", "data-quality"],
        difficulty="intermediate",
        transformations=[
            {"id": "validate-email-format", "type": "filter", "field": "email", "operation": "contains", "value": "@"},
            {"id": "validate-age-range", "type": "filter", "field": "age", "operation": "greater_than", "value": 0, "priority": 1},
            {
                "id": "sanitize-phone",
                "type": "loop",
                "priority": 2,
                "itemTransformations": [
                    {"id": "trim-phone", "type": "format", "field": "phone", "operation": "trim", "outputField": "cleanPhone"},
                ],
            },
        ],
        example_input=[
            {"email": "user@example.com", "age": 25, "phone": " +1-555-123-4567 "},
            {"email": "broken", "age": 30, "phone": "1"},
            {"email": "kid@example.com", "age": 0, "phone": "2"},
        ],
        example_output=[
            {"email": "user@example.com", "age": 25, "phone": " +1-555-123-4567 ", "cleanPhone": "+1-555-123-4567"},
        ],
    ),
    TransformationTemplate(
        id="batch-data-processing",
        name="Batch Data Processing",
        description="Process arrays of data with transformations applied to each item",
        category="data-processing",
        tags=["batch", "array", "loop", "processing"],
        difficulty="advanced",
        transformations=[
            {
                "id": "process-items",
                "type": "loop",
                "parallel": True,
                "batchSize": 50,
                "itemTransformations": [
                    {"id": "normalize-name", "type": "format", "field": "name", "operation": "title_case", "outputField": "displayName"},
                    {"id": "calculate-score", "type": "format", "field": "points", "operation": "multiply", "value": 1.5, "outputField": "bonusScore"},
                ],
            }
        ],
        example_input=[{"name": "john doe", "points": 100}, {"name": "jane smith", "points": 150}],
        example_output=[
            {"name": "john doe", "points": 100, "displayName": "John Doe", "bonusScore": 150.0},
            {"name": "jane smith", "points": 150, "displayName": "Jane Smith", "bonusScore": 225.0},
        ],
    ),
    TransformationTemplate(
        id="object-flattening",
        name="Object Flattening",
        description="Flatten nested objects into a single level structure",
        category="utility",
        tags=["flatten", "nested", "object", "utility"],
        difficulty="intermediate",
        transformations=[
            {"id": "extract-user-name", "type": "extract", "field": "user.name", "outputField": "userName"},
            {"id": "extract-user-email", "type": "extract", "field": "user.email", "outputField": "userEmail"},
            {"id": "extract-address", "type": "extract", "field": "user.address.city", "outputField": "city"},
        ],
        example_input={
            "id": 1,
            "user": {"name": "John Doe", "email": "john@example.com", "address": {"city": "New York", "country": "USA"}},
        },
        example_output={
            "id": 1,
            "user": {"name": "John Doe", "email": "john@example.com", "address": {"city": "New York", "country": "USA"}},
            "userName": "John Doe",
            "userEmail": "john@example.com",
            "city": "New York",
        },
    ),
    TransformationTemplate(
        id="sorting-and-filtering",
        name="Sorting and Filtering",
        description="Sort and filter array data based on specified criteria",
        category="data-processing",
        tags=["sort", "filter", "array", "criteria"],
        transformations=[
            {"id": "filter-active", "type": "filter", "field": "active", "operation": "equals", "value": True},
            {"id": "sort-by-date", "type": "sort", "field": "createdAt", "operation": "desc", "priority": 1},
        ],
        example_input=[
            {"id": 1, "active": True, "createdAt": "2023-01-01"},
            {"id": 2, "active": False, "createdAt": "2023-01-02"},
            {"id": 3, "active": True, "createdAt": "2023-01-03"},
        ],
        example_output=[
            {"id": 3, "active": True, "createdAt": "2023-01-03"},
            {"id": 1, "active": True, "createdAt": "2023-01-01"},
        ],
    ),
]

TRANSFORMATION_TEMPLATES: Dict[str, TransformationTemplate] = {t.id: t for t in _TEMPLATES}


def get_template(template_id: str) -> TransformationTemplate:
    template = TRANSFORMATION_TEMPLATES.get(template_id)
    if template is None:
        raise TemplateNotFoundError(f"No transformation template found for '{template_id}'")
    return template


def list_templates(category: Optional[str] = None) -> List[TransformationTemplate]:
    templates = list(TRANSFORMATION_TEMPLATES.values())
    if category is None:
        return templates
    return [t for t in templates if t.category == category]


def get_templates_by_tag(tag: str) -> List[TransformationTemplate]:
    return [t for t in TRANSFORMATION_TEMPLATES.values() if tag in t.tags]


def search_templates(query: str) -> List[TransformationTemplate]:
    needle = query.lower()
    return [
        t
        for t in TRANSFORMATION_TEMPLATES.values()
        if needle in t.name.lower()
        or needle in t.description.lower()
        or any(needle in tag.lower() for tag in t.tags)
    ]


def normalize_transformation(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Rename editor keys to transformation fields, recursing into branches and loop items."""
    normalized = dict(raw)
    if "field" in normalized:
        normalized.setdefault("sourceField", normalized.pop("field"))
    if "outputField" in normalized:
        normalized.setdefault("targetField", normalized.pop("outputField"))
    for branch in ("trueTransformation", "falseTransformation"):
        if isinstance(normalized.get(branch), dict):
            normalized[branch] = normalize_transformation(normalized[branch])
    if isinstance(normalized.get("itemTransformations"), list):
        normalized["itemTransformations"] = [
            normalize_transformation(item) for item in normalized["itemTransformations"]
        ]
    return normalized


def build_pipeline_from_template(template_id: str) -> DataPipeline:
    template = get_template(template_id)
    return DataPipeline(
        id=f"template-{template.id}",
        transformations=[
            DataTransformation.model_validate(normalize_transformation(raw))
            for raw in template.transformations
        ],
        metadata=PipelineMetadata(name=template.name, description=template.description),
    )


__all__ = [
    "CATEGORIES",
    "TransformationTemplate",
    "TRANSFORMATION_TEMPLATES",
    "get_template",
    "list_templates",
    "get_templates_by_tag",
    "search_templates",
    "normalize_transformation",
    "build_pipeline_from_template",
]
