"""
Tests for DataTransformRunner
"""
import pytest

from workflow_data_engine.config import settings
from workflow_data_engine.models import DataPipeline, DataTransformation, MergeStrategy, TransformNodeConfig
from workflow_data_engine.runners import DataTransformRunner


def node(upstream, transformations=(), **kwargs) -> TransformNodeConfig:
    return TransformNodeConfig(
        node_id="transform_1",
        upstream_node_ids=list(upstream),
        pipeline=DataPipeline(id="node-pipeline", transformations=list(transformations)),
        **kwargs,
    )


@pytest.fixture
def data_runner(runner, dependency_filter):
    return DataTransformRunner(runner, dependency_filter)


class TestPrepareInput:
    def test_single_upstream_is_used_directly(self, data_runner, node_outputs):
        payload = data_runner.prepare_input(node(["trigger_1"]), node_outputs)
        assert payload == {"wallet": "0xabc", "threshold": 1800}
        assert payload is not node_outputs["trigger_1"]

    def test_no_upstream(self, data_runner, node_outputs):
        assert data_runner.prepare_input(node([]), node_outputs) == {}
        assert data_runner.prepare_input(node(["missing"]), node_outputs) == {}

    def test_default_strategy_for_several_upstreams(self, data_runner):
        bag = {"a": {"x": 1, "y": 1}, "b": {"x": 2}}
        assert settings.DEFAULT_MERGE_STRATEGY == "overwrite"
        assert data_runner.prepare_input(node(["a", "b"]), bag) == {"x": 2, "y": 1}

    def test_configured_strategy(self, data_runner):
        bag = {"a": {"x": 1}, "b": {"x": 2}}
        cfg = node(["a", "b"], merge_strategy=MergeStrategy.COMBINE)
        assert data_runner.prepare_input(cfg, bag) == {"x": [1, 2]}

    def test_strategy_applies_to_a_single_upstream(self, data_runner):
        bag = {"a": {"x": 1}}
        cfg = node(["a"], merge_strategy="array")
        assert data_runner.prepare_input(cfg, bag) == {"x": 1}

    def test_upstream_order_decides_overwrite(self, data_runner):
        bag = {"a": {"x": 1}, "b": {"x": 2}}
        assert data_runner.prepare_input(node(["b", "a"]), bag) == {"x": 1}

    def test_number_upstream_is_skipped_when_merging(self, data_runner):
        bag = {"sum_1": 15, "price_1": {"p": 2}}
        assert data_runner.prepare_input(node(["sum_1", "price_1"]), bag) == {"p": 2}

    def test_list_upstream_is_skipped_when_merging(self, data_runner):
        bag = {"rows_1": [{"p": 1}], "price_1": {"p": 2}}
        cfg = node(["rows_1", "price_1"], merge_strategy=MergeStrategy.DEEP)
        assert data_runner.prepare_input(cfg, bag) == {"p": 2}

    def test_array_strategy_keeps_non_object_upstreams(self, data_runner):
        bag = {"sum_1": 15, "rows_1": [1, 2]}
        cfg = node(["sum_1", "rows_1"], merge_strategy="array")
        assert data_runner.prepare_input(cfg, bag) == [15, [1, 2]]


class TestRun:
    @pytest.mark.asyncio
    async def test_transforms_upstream_payload(self, data_runner, node_outputs):
        cfg = node(
            ["price_1"],
            [
                DataTransformation(id="rows", type="extract", source_field="items"),
                DataTransformation(id="cheap", type="filter", condition="price < 2000", priority=1),
            ],
        )
        output = await data_runner.run(cfg, node_outputs)

        assert output["result"].success is True
        assert [row["symbol"] for row in output["transformed_data"]] == ["ETH"]
        assert output["original_data"] == node_outputs["price_1"]
        assert [entry["transformation_id"] for entry in output["transformation_log"]] == ["rows", "cheap"]
        assert all(entry["success"] for entry in output["transformation_log"])

    @pytest.mark.asyncio
    async def test_referenced_outputs_are_returned_separately(self, data_runner, node_outputs):
        output = await data_runner.run(node(["price_1"]), node_outputs)
        assert output["referenced_outputs"] == {"trigger_1": node_outputs["trigger_1"]}
        assert output["transformed_data"] == node_outputs["price_1"]

    @pytest.mark.asyncio
    async def test_edge_preservation_can_be_disabled_per_node(self, data_runner, node_outputs):
        output = await data_runner.run(node(["price_1"], preserve_edge_connections=False), node_outputs)
        assert output["referenced_outputs"] == {}

    @pytest.mark.asyncio
    async def test_original_data_is_not_touched_by_steps(self, data_runner):
        bag = {"src": {"user": {"name": "ada"}}}
        cfg = node(["src"], [DataTransformation(id="up", type="format", source_field="user.name", operation="uppercase")])
        output = await data_runner.run(cfg, bag)
        assert output["transformed_data"] == {"user": {"name": "ADA"}}
        assert output["original_data"] == {"user": {"name": "ada"}}
        assert bag == {"src": {"user": {"name": "ada"}}}

    @pytest.mark.asyncio
    async def test_step_failures_are_reported(self, data_runner):
        cfg = node(["src"], [DataTransformation(id="bad", type="aggregate", operation="sum")])
        output = await data_runner.run(cfg, {"src": {"not": "a list"}})
        assert output["result"].success is False
        assert output["transformed_data"] == {"not": "a list"}
        assert output["transformation_log"][0]["success"] is False
        assert "requires array data" in output["transformation_log"][0]["error"]

    @pytest.mark.asyncio
    async def test_node_config_from_camel_case(self, data_runner):
        cfg = TransformNodeConfig.model_validate({
            "nodeId": "n",
            "upstreamNodeIds": ["a", "b"],
            "mergeStrategy": "deep",
            "pipeline": {"id": "p", "transformations": [
                {"id": "city", "type": "extract", "sourceField": "user.address.city"},
            ]},
        })
        bag = {"a": {"user": {"address": {"city": "Lisbon"}}}, "b": {"user": {"name": "ada"}}}
        output = await data_runner.run(cfg, bag)
        assert output["transformed_data"] == "Lisbon"
