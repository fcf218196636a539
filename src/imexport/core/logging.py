"""
Logging utilities for the im-/export framework.

Provides human-readable or JSON-structured logging with run context support
so that log lines from parallel sub-runs can be told apart
(run → table → worker).
"""

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional


PACKAGE_LOGGER = "imexport"
CONTEXT_FIELDS = ("run_id", "table_name", "worker_id")


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the run context fields a record carries, in run → table → worker order."""
    context = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            context[name] = value
    return context


class StructuredFormatter(logging.Formatter):
    """
    Formatter that writes one JSON object per log line.

    The run context is nested under ``context`` so that consumers can group
    lines by run or table without knowing the other keys.
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {}
        if self.include_timestamp:
            entry["time"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        entry["level"] = record.levelname
        entry["logger"] = record.name
        entry["msg"] = record.getMessage()

        context = record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter for terminals.

    The run context becomes a compact tag in front of the message:
    ``INFO imexport.runner <Person@imexport-worker_0 run=1a2b>: Processing table``
    """

    def __init__(self, include_timestamp: bool = True):
        fmt = "%(levelname)s %(name)s%(context_tag)s: %(message)s"
        if include_timestamp:
            fmt = "%(asctime)s " + fmt
        super().__init__(fmt)

    @staticmethod
    def context_tag(context: Dict[str, Any]) -> str:
        if not context:
            return ""
        where = str(context.get("table_name", "-"))
        if "worker_id" in context:
            where += f"@{context['worker_id']}"
        if "run_id" in context:
            where += f" run={context['run_id']}"
        return f" <{where}>"

    def format(self, record: logging.LogRecord) -> str:
        record.context_tag = self.context_tag(record_context(record))
        return super().format(record)


def configure_logging(
    level: int = logging.INFO,
    structured: bool = False,
    include_timestamp: bool = True,
    stream=None,
) -> logging.Logger:
    """
    Configure the ``imexport`` package logger.

    Adds a single stream handler; calling it again only adjusts the level
    and formatter of the handler installed before.

    Args:
        level: Logging level (default: INFO)
        structured: If True, output JSON-structured logs; otherwise human-readable
        include_timestamp: Whether to include a timestamp in each line
        stream: Target stream (default: stdout)

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    if structured:
        formatter = StructuredFormatter(include_timestamp=include_timestamp)
    else:
        formatter = HumanReadableFormatter(include_timestamp=include_timestamp)

    handler = next(
        (h for h in package_logger.handlers if getattr(h, "_imexport_handler", False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler._imexport_handler = True
        package_logger.addHandler(handler)

    handler.setLevel(level)
    handler.setFormatter(formatter)
    return package_logger


class RunContext:
    """
    Context manager for adding run context fields to log records.

    The context is per thread, so parallel sub-runs each keep their own.

    Example:
        >>> with RunContext(run_id="abc", table_name="Person"):
        ...     log_with_context(logger, logging.INFO, "Processing table")
    """

    _local = threading.local()

    def __init__(
        self,
        run_id: Optional[str] = None,
        table_name: Optional[str] = None,
        worker_id: Optional[str] = None,
        **extra: Any,
    ):
        inherited = RunContext.get_current()
        own = {
            "run_id": run_id,
            "table_name": table_name,
            "worker_id": worker_id,
            **extra,
        }
        inherited.update({k: v for k, v in own.items() if v is not None})
        self.context = inherited
        self._previous: Optional[Dict[str, Any]] = None

    def __enter__(self) -> "RunContext":
        self._previous = getattr(RunContext._local, "context", None)
        RunContext._local.context = self.context
        return self

    def __exit__(self, *args) -> None:
        RunContext._local.context = self._previous

    @classmethod
    def get_current(cls) -> Dict[str, Any]:
        """Get the run context of the calling thread."""
        current = getattr(cls._local, "context", None)
        if current is None:
            return {}
        return dict(current)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """
    Log a message with the current run context merged into ``extra``.

    Args:
        logger: The logger to use
        level: Log level (e.g., logging.INFO)
        message: Log message
        **extra: Additional fields to include
    """
    context = RunContext.get_current()
    context.update(extra)
    logger.log(level, message, extra=context)
