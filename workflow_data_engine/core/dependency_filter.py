"""Select the slice of the node-output bag a node is allowed to see.

The bag maps node ids to the values those nodes produced during one
execution. A node receives deep copies of its upstream outputs plus the
outputs of nodes those values point back to, either through a ``nodeId``
field or a ``pairedItem.nodeId`` provenance marker.

Reference discovery is one hop deep: outputs pulled in because they were
referenced are not scanned again for further references.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Set

from ..utils.values import deep_clone

logger = logging.getLogger(__name__)


class DataDependencyFilter:
    def filter_relevant_data(
        self,
        all_data: Dict[str, Any],
        relevant_ids: Iterable[str],
        preserve_edge_connections: bool = True,
    ) -> Dict[str, Any]:
        if not isinstance(all_data, dict):
            logger.warning("Invalid data provided to filter_relevant_data")
            return {}

        if not isinstance(relevant_ids, list):
            logger.warning("Invalid relevant_ids provided to filter_relevant_data")
            return all_data

        filtered: Dict[str, Any] = {}
        processed: Set[str] = set()

        for node_id in relevant_ids:
            if isinstance(node_id, str) and node_id in all_data:
                filtered[node_id] = deep_clone(all_data[node_id])
                processed.add(node_id)

        if preserve_edge_connections:
            self._preserve_edge_connections(all_data, filtered, processed)

        logger.debug(f"Filtered data for {len(filtered)} nodes from {len(all_data)} total nodes")
        return filtered

    def _preserve_edge_connections(
        self,
        all_data: Dict[str, Any],
        filtered: Dict[str, Any],
        processed: Set[str],
    ) -> None:
        referenced: Dict[str, None] = {}
        for node_data in filtered.values():
            self._find_references(node_data, referenced, all_data)

        for node_id in referenced:
            if node_id not in processed and node_id in all_data:
                filtered[node_id] = deep_clone(all_data[node_id])
                processed.add(node_id)
                logger.debug(f"Preserved edge connection to node: {node_id}")

    def _find_references(self, data: Any, referenced: Dict[str, None], all_data: Dict[str, Any]) -> None:
        if isinstance(data, list):
            for item in data:
                self._find_references(item, referenced, all_data)
            return
        if not isinstance(data, dict):
            return

        for value in data.values():
            if not isinstance(value, (dict, list)):
                continue
            if isinstance(value, dict):
                node_id = value.get("nodeId")
                if isinstance(node_id, str) and node_id in all_data:
                    referenced[node_id] = None

                paired = value.get("pairedItem")
                if isinstance(paired, dict):
                    paired_id = paired.get("nodeId")
                    if isinstance(paired_id, str) and paired_id in all_data:
                        referenced[paired_id] = None

            self._find_references(value, referenced, all_data)


dependency_filter = DataDependencyFilter()


def filter_relevant_data(
    all_data: Dict[str, Any],
    relevant_ids: Iterable[str],
    preserve_edge_connections: bool = True,
) -> Dict[str, Any]:
    return dependency_filter.filter_relevant_data(all_data, relevant_ids, preserve_edge_connections)


__all__ = ["DataDependencyFilter", "dependency_filter", "filter_relevant_data"]
