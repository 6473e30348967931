"""Logging and observability utilities for ProjectBoard.

This module provides structured logging, performance monitoring,
and the event hooks the state store reports its actions through.

The MCP server speaks its protocol over stdout, so log output goes to
stderr and, optionally, to a JSON-lines file.
"""

from __future__ import annotations

import json
import sys
import time
import logging as std_logging
from collections import deque
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Deque, Dict, List, Optional, Union

ROOT_LOGGER = "projectboard"
ALL_EVENTS = "*"

# Store event fields lifted to the top level of a JSON log entry.
EVENT_FIELDS = ("event_type", "revision")

MAX_METRIC_SAMPLES = 500


def _resolve_level(log_level: Union[str, int]) -> int:
    if isinstance(log_level, int):
        return log_level
    level = std_logging.getLevelName(log_level.strip().upper())
    return level if isinstance(level, int) else std_logging.INFO


def setup_logging(log_level: Union[str, int] = std_logging.INFO, log_file: Optional[Path] = None) -> None:
    """Install the stderr handler and, when ``log_file`` is set, the JSON-lines file handler.

    Calling it again replaces the handlers installed by the previous call.
    """
    level = _resolve_level(log_level)

    logger = std_logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console_handler = std_logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(std_logging.Formatter(
        fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = std_logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(std_logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    logger.info(f"ProjectBoard logging initialized at {std_logging.getLevelName(level)}")


class JsonFormatter(std_logging.Formatter):
    """One JSON object per record.

    Store event type and revision sit next to the message so a log file can
    be replayed in revision order; every other extra field goes under ``data``.
    """

    def __init__(self, service: str = ROOT_LOGGER):
        super().__init__()
        self.service = service

    def format(self, record: std_logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc)
        log_entry: Dict[str, Any] = {
            "timestamp": created.isoformat().replace("+00:00", "Z"),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        extra = dict(getattr(record, "extra_fields", {}))
        for name in EVENT_FIELDS:
            if name in extra:
                log_entry[name] = extra.pop(name)
        if extra:
            log_entry["data"] = extra

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class PerformanceMonitor:
    """Keep the most recent duration samples per metric in memory."""

    def __init__(self, max_samples: int = MAX_METRIC_SAMPLES):
        self.max_samples = max_samples
        self.metrics: Dict[str, Deque[Dict[str, Any]]] = {}

    def record_metric(self, name: str, value: Any, tags: Optional[Dict[str, str]] = None) -> None:
        """Record a performance metric, dropping the oldest sample past ``max_samples``."""
        metric = {
            "timestamp": _utc_timestamp(),
            "name": name,
            "value": value,
            "tags": tags or {}
        }
        self.metrics.setdefault(name, deque(maxlen=self.max_samples)).append(metric)

        logger = std_logging.getLogger(f"{ROOT_LOGGER}.performance")
        logger.debug(f"Metric recorded: {name}={value}", extra={"extra_fields": metric})

    def get_metrics(self, name: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Get recorded metrics, oldest first."""
        if name:
            return {name: list(self.metrics.get(name, ()))}
        return {key: list(samples) for key, samples in self.metrics.items()}

    def clear(self) -> None:
        self.metrics.clear()


performance_monitor = PerformanceMonitor()


def log_performance(operation_name: str):
    """Decorator to log performance metrics for operations."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            logger = std_logging.getLogger(f"{ROOT_LOGGER}.performance")

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                performance_monitor.record_metric(
                    f"{operation_name}_duration",
                    duration,
                    {"status": "error", "error_type": type(e).__name__}
                )
                logger.error(
                    f"Failed operation: {operation_name} after {duration:.3f}s - {e}",
                    extra={"extra_fields": {
                        "operation": operation_name,
                        "duration": duration,
                        "status": "error",
                        "error_type": type(e).__name__,
                        "error_message": str(e)
                    }}
                )
                raise

            duration = time.perf_counter() - start_time
            performance_monitor.record_metric(
                f"{operation_name}_duration",
                duration,
                {"status": "success"}
            )
            logger.debug(
                f"Completed operation: {operation_name} in {duration:.3f}s",
                extra={"extra_fields": {
                    "operation": operation_name,
                    "duration": duration,
                    "status": "success"
                }}
            )
            return result

        return wrapper
    return decorator


@contextmanager
def log_operation(operation_name: str, **extra_fields):
    """Context manager to log operations with custom fields."""
    logger = std_logging.getLogger(f"{ROOT_LOGGER}.operations")
    start_time = time.perf_counter()

    logger.debug(f"Starting operation: {operation_name}", extra={"extra_fields": {
        "operation": operation_name,
        "status": "started",
        **extra_fields
    }})

    try:
        yield
    except Exception as e:
        duration = time.perf_counter() - start_time
        logger.error(f"Failed operation: {operation_name} after {duration:.3f}s - {e}", extra={"extra_fields": {
            "operation": operation_name,
            "status": "failed",
            "duration": duration,
            "error_type": type(e).__name__,
            "error_message": str(e),
            **extra_fields
        }})
        raise

    duration = time.perf_counter() - start_time
    logger.info(f"Completed operation: {operation_name} in {duration:.3f}s", extra={"extra_fields": {
        "operation": operation_name,
        "status": "completed",
        "duration": duration,
        **extra_fields
    }})


class StoreEvents:
    """Hook registry for store events.

    Callbacks registered for an event type receive the event fields as
    keyword arguments. Callbacks registered for ``ALL_EVENTS`` also receive
    ``event_type``.
    """

    def __init__(self):
        self.hooks: Dict[str, List[Callable[..., Any]]] = {}
        self.logger = std_logging.getLogger(f"{ROOT_LOGGER}.events")

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback for a specific event type."""
        self.hooks.setdefault(event_type, []).append(callback)
        self.logger.debug(f"Registered hook for event: {event_type}")

    def unregister_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        callbacks = self.hooks.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def trigger_hooks(self, event_type: str, **data) -> None:
        """Trigger all callbacks for a specific event type."""
        for hook in list(self.hooks.get(event_type, [])):
            try:
                hook(**data)
            except Exception as e:
                self.logger.error(f"Hook failed for event {event_type}: {e}")
        for hook in list(self.hooks.get(ALL_EVENTS, [])):
            try:
                hook(event_type=event_type, **data)
            except Exception as e:
                self.logger.error(f"Wildcard hook failed for event {event_type}: {e}")

    def emit(self, event_type: str, **data) -> None:
        """Log a store event and trigger its hooks."""
        event_data = {
            "timestamp": _utc_timestamp(),
            "event_type": event_type,
            **data
        }
        self.logger.info(f"Store event: {event_type}", extra={"extra_fields": event_data})

        hook_data = {k: v for k, v in event_data.items() if k != "event_type"}
        self.trigger_hooks(event_type, **hook_data)


def log_error_with_context(error: Exception, context: Dict[str, Any], **extra_fields):
    """Log an error with rich context information."""
    logger = std_logging.getLogger(f"{ROOT_LOGGER}.errors")

    error_data = {
        "timestamp": _utc_timestamp(),
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context,
        **context,
        **extra_fields
    }

    logger.error(
        f"Error in {context.get('operation', 'unknown operation')}: {error}",
        extra={"extra_fields": error_data},
        exc_info=error if error.__traceback__ is not None else None
    )
