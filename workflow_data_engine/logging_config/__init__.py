"""
Logging setup for the workflow data engine
"""

from .config import get_log_config, get_logger, setup_logging
from .formatters import SimpleFormatter, StructuredFormatter

__all__ = [
    "setup_logging",
    "get_logger",
    "get_log_config",
    "SimpleFormatter",
    "StructuredFormatter",
]
