"""
Tests for validate_transformations: static checks per transformation kind
"""
from typing import List

import pytest

from workflow_data_engine import validate_transformations
from workflow_data_engine.core.validation import check_transformation
from workflow_data_engine.models import DataTransformation, TransformationType


def errors_of(**kwargs) -> List[str]:
    return check_transformation(DataTransformation(id="t", **kwargs))[0]


def warnings_of(**kwargs) -> List[str]:
    return check_transformation(DataTransformation(id="t", **kwargs))[1]


class TestRequiredFields:
    @pytest.mark.parametrize(
        "config,message",
        [
            ({"type": "map", "target_field": "b"}, "Source field is required for map transformation"),
            ({"type": "map", "source_field": "a"}, "Output field is required for map transformation"),
            ({"type": "filter"}, "Condition or operation is required for filter transformation"),
            ({"type": "format", "source_field": "a"}, "Operation is required for format transformation"),
            ({"type": "extract"}, "Source field is required for extract transformation"),
            ({"type": "aggregate", "source_field": "a"}, "Operation is required for aggregate transformation"),
            ({"type": "combine", "value": "a"}, "Array of field names is required for combine transformation"),
            ({"type": "validate"}, "Schema is required for validate transformation"),
            ({"type": "conditional"}, "Condition is required for conditional transformation"),
            ({"type": "loop"}, "Item transformations array is required for loop transformation"),
            ({"type": "pivot"}, "Unsupported transformation type: pivot"),
        ],
    )
    def test_missing_field_is_an_error(self, config, message):
        assert message in errors_of(**config)

    @pytest.mark.parametrize(
        "config",
        [
            {"type": "map", "source_field": "a", "target_field": "b"},
            {"type": "filter", "condition": 'status == "active"'},
            {"type": "filter", "source_field": "n", "operation": "greater_than", "value": 1},
            {"type": "format", "source_field": "a", "operation": "uppercase"},
            {"type": "extract", "source_field": "a.b"},
            {"type": "aggregate", "source_field": "a", "operation": "avg"},
            {"type": "combine", "value": ["a", "b"], "operation": "concat"},
            {"type": "validate", "validation_schema": List[int]},
            {"type": "enrich", "operation": "timestamp"},
            {"type": "sort", "source_field": "n", "operation": "desc"},
        ],
    )
    def test_complete_configuration_is_clean(self, config):
        assert check_transformation(DataTransformation(id="t", **config)) == ([], [])


class TestKindSpecificChecks:
    def test_unknown_aggregation(self):
        assert errors_of(type="aggregate", operation="median") == ["Unsupported aggregation operation: median"]

    def test_unknown_filter_operation_is_a_warning(self):
        assert errors_of(type="filter", source_field="a", operation="near") == []
        assert warnings_of(type="filter", source_field="a", operation="near") == [
            "Unknown filter operation 'near' keeps every item"
        ]

    def test_filter_operation_without_field(self):
        assert warnings_of(type="filter", operation="exists") == [
            "Filter operation has no source field and keeps every item"
        ]

    def test_format_without_any_field_is_a_warning(self):
        assert warnings_of(type="format", operation="trim") == ["No field specified for format transformation"]

    def test_sort_order(self):
        assert warnings_of(type="sort", source_field="n") == ["Sort order not specified, defaulting to ascending"]
        assert warnings_of(type="sort", source_field="n", operation="up") == [
            "Sort order 'up' is not asc or desc, sorting descending"
        ]

    def test_enrich_that_adds_nothing(self):
        assert warnings_of(type="enrich", operation="computed", value=3) == [
            "Computed enrichment has no callable value and adds nothing"
        ]
        assert warnings_of(type="enrich", value=3) == ["Enrich transformation adds nothing without targetField"]

    def test_loop_batch_size(self):
        chain = [DataTransformation(id="e", type="extract", source_field="a")]
        assert errors_of(type="loop", parallel=False, batch_size=-2, item_transformations=chain) == [
            "Loop batchSize must be at least 1, got -2"
        ]

    def test_nested_steps_are_checked(self):
        conditional = DataTransformation(
            id="c",
            type=TransformationType.CONDITIONAL,
            condition="flag",
            true_transformation=DataTransformation(id="m", type="map", source_field="a"),
        )
        loop = DataTransformation(id="l", type="loop", item_transformations=[conditional, DataTransformation(id="s", type="sort")])
        errors, warnings = check_transformation(loop)
        assert errors == ["itemTransformations[0]: trueTransformation: Output field is required for map transformation"]
        assert warnings == ["itemTransformations[1]: Sort order not specified, defaulting to ascending"]

    def test_conditional_without_branches_is_a_warning(self):
        assert warnings_of(type="conditional", condition="flag") == [
            "Conditional transformation has no branches and returns data unchanged"
        ]


class TestReport:
    def test_steps_are_numbered_from_one(self):
        report = validate_transformations([
            DataTransformation(id="ok", type="extract", source_field="a"),
            DataTransformation(id="broken", type="map", source_field="a"),
            DataTransformation(id="unsorted", type="sort"),
        ])
        assert report.valid is False
        assert report.total_transformations == 3
        assert [(issue.step, issue.transformation_id) for issue in report.errors] == [(2, "broken")]
        assert report.errors[0].messages == ["Output field is required for map transformation"]
        assert [(issue.step, issue.transformation_id) for issue in report.warnings] == [(3, "unsorted")]

    def test_warnings_alone_keep_it_valid(self):
        report = validate_transformations([DataTransformation(id="s", type="sort", source_field="n")])
        assert report.valid is True
        assert report.errors == []
        assert len(report.warnings) == 1

    def test_empty_list(self):
        report = validate_transformations([])
        assert report.valid is True
        assert report.total_transformations == 0

    def test_raw_editor_dicts(self):
        report = validate_transformations([
            {"type": "map", "field": "price", "outputField": "cost"},
            {"field": "price"},
            {"id": "f", "type": "format", "field": "name"},
            {"type": "loop", "itemTransformations": [{"id": "sym", "type": "extract", "field": "symbol"}]},
        ])
        assert [(issue.step, issue.messages) for issue in report.errors] == [
            (2, ["Transformation type is required"]),
            (3, ["Operation is required for format transformation"]),
        ]
        assert report.errors[1].transformation_id == "f"

    def test_invalid_raw_values_are_reported(self):
        report = validate_transformations([{"id": "p", "type": "map", "priority": "high"}, "map"])
        assert report.valid is False
        assert report.errors[0].transformation_id == "p"
        assert report.errors[0].messages[0].startswith("priority: ")
        assert report.errors[1].messages == ["Transformation must be an object"]

    def test_duplicate_ids_are_a_warning(self):
        report = validate_transformations([
            DataTransformation(id="x", type="extract", source_field="a"),
            DataTransformation(id="x", type="extract", source_field="b"),
        ])
        assert report.valid is True
        assert [(issue.step, issue.messages) for issue in report.warnings] == [(2, ["Duplicate transformation id 'x'"])]

    def test_report_serializes_with_camel_case_keys(self):
        report = validate_transformations([DataTransformation(id="m", type="map")])
        dumped = report.model_dump(by_alias=True)
        assert dumped["totalTransformations"] == 1
        assert dumped["errors"][0]["transformationId"] == "m"
