from .base import NodeRunner
from .transform import DataTransformRunner

__all__ = ["NodeRunner", "DataTransformRunner"]
