"""Data transform node runner.

Prepares a node's input from the execution's node-output bag and runs the
node's pipeline over it:

    bag -> filter_relevant_data -> merge_data -> apply_pipeline

The bag is only read; writing ``transformed_data`` back under the node id
is left to the orchestrator.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..config import settings
from ..core.dependency_filter import DataDependencyFilter, dependency_filter
from ..core.merge import merge_data
from ..core.pipeline import PipelineRunner, pipeline_runner
from ..models import TransformNodeConfig
from ..utils.values import deep_clone
from .base import NodeRunner

logger = logging.getLogger(__name__)


class DataTransformRunner(NodeRunner):
    def __init__(
        self,
        runner: Optional[PipelineRunner] = None,
        data_filter: Optional[DataDependencyFilter] = None,
    ):
        self.pipeline_runner = runner or pipeline_runner
        self.data_filter = data_filter or dependency_filter

    def select_outputs(self, node: TransformNodeConfig, node_outputs: Dict[str, Any]) -> Dict[str, Any]:
        """Deep copies of the upstream outputs plus the outputs they reference."""
        preserve = (
            settings.PRESERVE_EDGE_CONNECTIONS
            if node.preserve_edge_connections is None
            else node.preserve_edge_connections
        )
        return self.data_filter.filter_relevant_data(node_outputs, list(node.upstream_node_ids), preserve)

    def merge_upstream(self, node: TransformNodeConfig, visible: Dict[str, Any]) -> Any:
        upstream = [visible[node_id] for node_id in node.upstream_node_ids if node_id in visible]
        if not upstream:
            return {}
        if len(upstream) == 1 and node.merge_strategy is None:
            return upstream[0]
        strategy = node.merge_strategy or settings.DEFAULT_MERGE_STRATEGY
        return merge_data(upstream, strategy)

    def prepare_input(self, node: TransformNodeConfig, node_outputs: Dict[str, Any]) -> Any:
        """Build the payload a node sees from its upstream outputs."""
        return self.merge_upstream(node, self.select_outputs(node, node_outputs))

    async def run(self, node: TransformNodeConfig, node_outputs: Dict[str, Any]) -> Dict[str, Any]:
        log_extra = {"node_id": node.node_id, "pipeline_id": node.pipeline.id}
        logger.info(f"Starting data transformation for node {node.node_id}", extra=log_extra)

        visible = self.select_outputs(node, node_outputs)
        payload = self.merge_upstream(node, visible)
        referenced = {
            node_id: value for node_id, value in visible.items() if node_id not in node.upstream_node_ids
        }
        # steps may modify nested values of the payload in place
        original = deep_clone(payload)
        result = await self.pipeline_runner.apply_pipeline(payload, node.pipeline)

        if result.success:
            logger.info(
                f"Data transformation completed in {result.metadata.execution_time:.1f}ms",
                extra=log_extra,
            )
        else:
            logger.warning(
                f"Data transformation for node {node.node_id} finished with {len(result.errors)} errors",
                extra=log_extra,
            )

        return {
            "transformed_data": result.data,
            "original_data": original,
            "referenced_outputs": referenced,
            "transformation_log": [step.model_dump() for step in result.metadata.steps],
            "result": result,
        }


__all__ = ["DataTransformRunner"]
