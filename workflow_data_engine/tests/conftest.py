"""
Pytest configuration and shared fixtures for workflow_data_engine tests.
"""
from typing import List

import pytest
from pydantic import BaseModel

from workflow_data_engine.core.conditions import ConditionEvaluator
from workflow_data_engine.core.dependency_filter import DataDependencyFilter
from workflow_data_engine.core.pipeline import PipelineRunner
from workflow_data_engine.core.schemas import PydanticSchema
from workflow_data_engine.core.transformers import DataTransformer


@pytest.fixture
def evaluator():
    return ConditionEvaluator()


@pytest.fixture
def transformer():
    return DataTransformer()


@pytest.fixture
def runner(transformer):
    return PipelineRunner(transformer)


@pytest.fixture
def dependency_filter():
    return DataDependencyFilter()


@pytest.fixture
def node_outputs():
    """Node-output bag of a small execution: trigger -> price fetch -> enrichment."""
    return {
        "trigger_1": {"wallet": "0xabc", "threshold": 1800},
        "price_1": {
            "items": [
                {"symbol": "ETH", "price": 1850.5, "pairedItem": {"nodeId": "trigger_1"}},
                {"symbol": "BTC", "price": 43000, "pairedItem": {"nodeId": "trigger_1"}},
            ]
        },
        "enrich_1": {"source": {"nodeId": "price_1"}, "note": "refs price_1 only"},
        "unrelated_1": {"v": 3},
    }


@pytest.fixture
def orders():
    return [
        {"id": 1, "customer": "bob", "amount": 10, "status": "active"},
        {"id": 2, "customer": "Alice", "amount": 5, "status": "inactive"},
        {"id": 3, "customer": "carol", "amount": "x", "status": "active"},
    ]


class Order(BaseModel):
    id: int
    amount: float


class Payload(BaseModel):
    orders: List[Order]


@pytest.fixture
def payload_schema():
    return PydanticSchema(Payload)


@pytest.fixture
def order_schema():
    return PydanticSchema(Order)


class ExplodingSchema:
    """Duck-typed schema that rejects everything."""

    def __init__(self, message="value rejected"):
        self.message = message
        self.calls = 0

    def parse(self, value):
        self.calls += 1
        raise ValueError(self.message)


@pytest.fixture
def exploding_schema():
    return ExplodingSchema()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
