"""
Log formatters for console and structured (JSON) output
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

# Context attributes the engine passes through ``extra={...}``
CONTEXT_ATTRS = ("pipeline_id", "node_id", "transformation_id")

_RECORD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName",
    "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName",
}


class SimpleFormatter(logging.Formatter):
    """
    Plain text formatter for local development and container consoles
    Example: INFO:     2025-08-11 14:03:25 - workflow_data_engine.core.pipeline - [pipeline.py:88] [pipeline:p1] - Applied 3 transformations
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        location = f"{record.filename}:{record.lineno}"

        context = ""
        for attr in CONTEXT_ATTRS:
            value = getattr(record, attr, None)
            if value:
                context += f" [{attr.split('_')[0]}:{value}]"

        formatted = f"{record.levelname}:     {timestamp} - {record.name} - [{location}]{context} - {record.getMessage()}"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


class StructuredFormatter(logging.Formatter):
    """
    JSON line formatter; every ``extra`` field is kept under "extra"
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "file": f"{record.filename}:{record.lineno}",
            "function": record.funcName,
        }

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else "Unknown",
                "message": str(record.exc_info[1]) if record.exc_info[1] else "",
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra_fields:
            log_obj["extra"] = extra_fields

        return json.dumps(log_obj, ensure_ascii=False, default=str)
