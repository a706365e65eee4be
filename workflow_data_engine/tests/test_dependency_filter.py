"""
Tests for DataDependencyFilter
"""
import logging

import pytest

from workflow_data_engine.core.dependency_filter import filter_relevant_data


def test_keeps_referenced_node_and_drops_unrelated():
    bag = {"A": {"v": 1}, "B": {"ref": {"nodeId": "A"}}, "C": {"v": 3}}
    assert filter_relevant_data(bag, ["B"], True) == {"A": {"v": 1}, "B": {"ref": {"nodeId": "A"}}}


def test_without_edge_preservation_only_requested(node_outputs, dependency_filter):
    result = dependency_filter.filter_relevant_data(node_outputs, ["price_1"], preserve_edge_connections=False)
    assert list(result) == ["price_1"]


def test_paired_item_references(node_outputs, dependency_filter):
    result = dependency_filter.filter_relevant_data(node_outputs, ["price_1"])
    assert set(result) == {"price_1", "trigger_1"}


def test_paired_item_marker_nested_under_another_key(dependency_filter):
    bag = {
        "src": {"v": 1},
        "node": {"rows": [{"meta": {"pairedItem": {"nodeId": "src", "item": 0}}}]},
    }
    assert set(dependency_filter.filter_relevant_data(bag, ["node"])) == {"node", "src"}


def test_references_to_absent_nodes_are_ignored(dependency_filter):
    bag = {"B": {"ref": {"nodeId": "ghost"}}}
    assert dependency_filter.filter_relevant_data(bag, ["B"]) == {"B": {"ref": {"nodeId": "ghost"}}}


def test_unknown_and_non_string_ids_are_skipped(node_outputs, dependency_filter):
    result = dependency_filter.filter_relevant_data(node_outputs, ["missing", 7, "unrelated_1"])
    assert result == {"unrelated_1": {"v": 3}}


def test_closure_is_one_hop(node_outputs, dependency_filter):
    """enrich_1 -> price_1 -> trigger_1: only the first hop is kept.

    Whether the whole chain should be kept is still undecided; this pins
    the current behaviour.
    """
    result = dependency_filter.filter_relevant_data(node_outputs, ["enrich_1"])
    assert set(result) == {"enrich_1", "price_1"}
    assert "trigger_1" not in result


class TestIsolation:
    def test_result_never_aliases_the_bag(self):
        bag = {"A": {"v": {"deep": [1, 2]}}, "B": {"ref": {"nodeId": "A"}, "rows": [{"x": 1}]}}
        result = filter_relevant_data(bag, ["B"])

        assert result["A"] is not bag["A"]
        assert result["A"]["v"] is not bag["A"]["v"]
        assert result["A"]["v"]["deep"] is not bag["A"]["v"]["deep"]
        assert result["B"]["ref"] is not bag["B"]["ref"]
        assert result["B"]["rows"][0] is not bag["B"]["rows"][0]

        result["A"]["v"]["deep"].append(3)
        result["B"]["rows"][0]["x"] = 99
        result["B"]["ref"]["nodeId"] = "C"
        assert bag == {"A": {"v": {"deep": [1, 2]}}, "B": {"ref": {"nodeId": "A"}, "rows": [{"x": 1}]}}

    def test_primitive_outputs_are_kept(self):
        assert filter_relevant_data({"n": 5, "s": "text"}, ["n", "s"]) == {"n": 5, "s": "text"}

    def test_sets_and_custom_objects_are_not_shared(self):
        class Box:
            def __init__(self):
                self.count = 1

        bag = {"A": {"tags": {"x"}, "box": Box()}}
        result = filter_relevant_data(bag, ["A"])

        result["A"]["tags"].add("y")
        result["A"]["box"].count = 2
        assert bag["A"]["tags"] == {"x"}
        assert bag["A"]["box"].count == 1


class TestGuards:
    def test_non_object_bag(self, dependency_filter, caplog):
        with caplog.at_level(logging.WARNING):
            assert dependency_filter.filter_relevant_data(["A"], ["A"]) == {}
        assert "Invalid data provided" in caplog.text

    def test_non_list_ids_returns_bag_itself(self, dependency_filter, node_outputs, caplog):
        with caplog.at_level(logging.WARNING):
            result = dependency_filter.filter_relevant_data(node_outputs, ("price_1",))
        assert result is node_outputs
        assert "Invalid relevant_ids" in caplog.text

    def test_empty_bag_is_valid(self, dependency_filter, caplog):
        with caplog.at_level(logging.WARNING):
            assert dependency_filter.filter_relevant_data({}, ["A"]) == {}
        assert caplog.text == ""

    @pytest.mark.parametrize("ids", [[], ["nope"]])
    def test_nothing_selected(self, dependency_filter, node_outputs, ids):
        assert dependency_filter.filter_relevant_data(node_outputs, ids) == {}
