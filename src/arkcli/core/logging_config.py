"""
arkcli - Logging Configuration and Log Sinks

Two concerns live here:

1. ``setup_logging`` configures the ``arkcli`` logger hierarchy for a CLI
   run, as plain text or structured JSON (python-json-logger).
2. ``LogSink`` is the capability handed to components that talk to the
   outside world (NetworkContext, hardware devices). Quiet runs get a
   ``NullSink`` instead of a mutated process-wide logger.

Usage:
    from arkcli.core.logging_config import make_log_sink, setup_logging

    setup_logging(level="DEBUG", json_format=True)
    sink = make_log_sink(verbose=True, name="arkcli.network")
    sink.info("Connected to %s", "5.39.9.240:4001")
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter adding timestamp, level, service and source location.
    """

    def __init__(
        self,
        fmt: str = "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name: str = "arkcli",
    ):
        super().__init__(fmt=fmt)
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        log_record["service"] = self.service_name

        if not log_record.get("level"):
            log_record["level"] = record.levelname.lower()

        log_record["source"] = {
            "function": record.funcName,
            "module": record.module,
            "line": record.lineno,
        }


def setup_logging(
    name: str = "arkcli",
    level: str = "INFO",
    json_format: bool = False,
    stream: Any = None,
) -> logging.Logger:
    """
    Configure the arkcli logger for a CLI invocation.

    Logs go to stderr so they never mix with the command's result on stdout.

    Args:
        name: Root logger name for the package
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit one JSON object per line instead of text
        stream: Output stream (defaults to sys.stderr)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates across invocations
    logger.handlers = []

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(CustomJsonFormatter(service_name=name))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


# ==================== LOG SINKS ====================


@runtime_checkable
class LogSink(Protocol):
    """Logging capability injected into I/O components."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        ...


class LoggerSink:
    """Sink backed by a standard library logger."""

    def __init__(self, logger: logging.Logger | str) -> None:
        self._logger = logging.getLogger(logger) if isinstance(logger, str) else logger

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)


class NullSink:
    """
    Sink for quiet runs.

    Debug, info and warning messages are dropped. Errors are formatted and
    forwarded to ``on_error`` when one is supplied, so the operator still
    sees failures reported by the component.
    """

    def __init__(self, on_error: Optional[Callable[[str], None]] = None) -> None:
        self._on_error = on_error

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        return None

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        return None

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        return None

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._on_error is not None:
            self._on_error(msg % args if args else msg)


def make_log_sink(
    verbose: bool,
    name: str,
    on_error: Optional[Callable[[str], None]] = None,
) -> LogSink:
    """Select the sink for a component based on the --verbose flag."""
    if verbose:
        return LoggerSink(name)
    return NullSink(on_error=on_error)
