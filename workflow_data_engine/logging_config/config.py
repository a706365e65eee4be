"""
Logging configuration for services embedding the workflow data engine

Engine modules log through ``logging.getLogger(__name__)`` and pass the
pipeline, node and transformation ids via ``extra``; this module decides how
those records are rendered.
"""

import logging
import sys
from typing import Any, Dict, Mapping, Optional

from ..config import settings
from .formatters import SimpleFormatter, StructuredFormatter

ENGINE_LOGGER = "workflow_data_engine"


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return StructuredFormatter()
    if log_format == "simple":
        return SimpleFormatter()
    return logging.Formatter(
        fmt="%(levelname)s:     %(asctime)s - %(name)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    service_name: str = ENGINE_LOGGER,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    level_overrides: Optional[Mapping[str, str]] = None,
) -> logging.Logger:
    """
    Route all records to one stdout handler

    Args:
        service_name: Name of the logger returned to the caller
        log_level: DEBUG, INFO, WARNING or ERROR; defaults to settings.LOG_LEVEL
        log_format: "simple", "json" or "standard"; defaults to settings.LOG_FORMAT
        level_overrides: Per-logger levels, e.g.
            {"workflow_data_engine.core.transformers": "DEBUG"} to trace steps
            of a single component without flooding the rest

    Returns:
        The logger named ``service_name``
    """
    log_format = (log_format or settings.LOG_FORMAT).lower()
    log_level = (log_level or settings.LOG_LEVEL).upper()
    level = getattr(logging, log_level, logging.INFO)

    root_logger = logging.getLogger()
    # Calling twice must not duplicate output
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_build_formatter(log_format))
    root_logger.addHandler(console_handler)

    for name, override in (level_overrides or {}).items():
        logging.getLogger(name).setLevel(getattr(logging, override.upper(), level))

    logger = logging.getLogger(service_name)
    logger.debug(f"Logging configured for {service_name}: level={log_level}, format={log_format}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the engine namespace unless ``name`` is already qualified"""
    if name == ENGINE_LOGGER or name.startswith(f"{ENGINE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ENGINE_LOGGER}.{name}")


def get_log_config() -> Dict[str, Any]:
    """Effective logging setup, for diagnostics"""
    root_logger = logging.getLogger()
    formatters = {type(handler.formatter).__name__ for handler in root_logger.handlers if handler.formatter}
    return {
        "log_level": logging.getLevelName(root_logger.level),
        "engine_level": logging.getLevelName(logging.getLogger(ENGINE_LOGGER).getEffectiveLevel()),
        "formatters": sorted(formatters),
        "handlers": len(root_logger.handlers),
    }
