"""Base runner types for workflow_data_engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..models import TransformNodeConfig


class NodeRunner(ABC):
    @abstractmethod
    async def run(self, node: TransformNodeConfig, node_outputs: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError


__all__ = ["NodeRunner"]
