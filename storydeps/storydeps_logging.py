"""Logging and observability utilities for storydeps.

This module provides structured logging, performance monitoring,
and observability hooks for dependency analysis and editing.
"""

from __future__ import annotations

import json
import sys
import time
import logging as std_logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Union
from functools import wraps

LOGGER_NAME = "storydeps"

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"


def setup_logging(log_level: Union[str, int] = std_logging.INFO, log_file: Optional[Path] = None) -> None:
    """Setup structured logging for storydeps.

    Console output goes to stderr because stdout carries the MCP stdio
    transport. With ``log_file`` set, every record down to DEBUG is also
    written there as one JSON object per line.
    """
    logger = std_logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    console_handler = std_logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(std_logging.Formatter(fmt=CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = std_logging.FileHandler(log_file)
        file_handler.setLevel(std_logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    logger.info(
        "storydeps logging initialized",
        extra={"extra_fields": {"log_level": std_logging.getLevelName(logger.level), "log_file": log_file}},
    )


class JsonFormatter(std_logging.Formatter):
    """Render a record as one JSON line.

    Fields passed as ``extra={"extra_fields": {...}}`` (story ids, counts,
    durations) are merged into the top-level object.
    """

    def format(self, record: std_logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        log_entry.update(getattr(record, "extra_fields", {}))
        return json.dumps(log_entry, default=str)


class PerformanceMonitor:
    """Keep timing metrics for analysis operations in memory."""

    def __init__(self):
        self.metrics: Dict[str, List[Dict[str, Any]]] = {}

    def record_metric(self, name: str, value: Any, tags: Optional[Dict[str, Any]] = None) -> None:
        """Record a performance metric."""
        metric = {
            "timestamp": datetime.utcnow().isoformat(),
            "name": name,
            "value": value,
            "tags": tags or {}
        }

        self.metrics.setdefault(name, []).append(metric)

        logger = std_logging.getLogger(f"{LOGGER_NAME}.performance")
        logger.debug(f"Metric recorded: {name}={value}", extra={"extra_fields": metric})

    def get_metrics(self, name: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Get recorded metrics."""
        if name:
            return {name: self.metrics.get(name, [])}
        return self.metrics.copy()

    def clear(self) -> None:
        self.metrics.clear()


performance_monitor = PerformanceMonitor()


def _failure_fields(error: Exception) -> Dict[str, Any]:
    return {"error_type": type(error).__name__, "error_message": str(error)}


def log_performance(operation_name: str, size_of: Optional[Callable[..., Optional[int]]] = None):
    """Decorator recording ``<operation_name>_duration`` for each call.

    ``size_of`` receives the call's arguments and returns the input size
    (usually the number of stories); it is stored as the ``story_count``
    tag so durations can be compared across board sizes.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = std_logging.getLogger(f"{LOGGER_NAME}.performance")
            tags: Dict[str, Any] = {}
            if size_of is not None:
                tags["story_count"] = size_of(*args, **kwargs)

            logger.debug(f"Starting operation: {operation_name}")
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                tags.update(status="error", error_type=type(e).__name__)
                performance_monitor.record_metric(f"{operation_name}_duration", duration, tags)
                logger.error(
                    f"Failed operation: {operation_name} after {duration:.3f}s - {e}",
                    extra={"extra_fields": {"operation": operation_name, "duration": duration,
                                            "status": "error", **_failure_fields(e)}},
                    exc_info=True
                )
                raise

            duration = time.perf_counter() - start_time
            tags["status"] = "success"
            performance_monitor.record_metric(f"{operation_name}_duration", duration, tags)
            logger.debug(
                f"Completed operation: {operation_name} in {duration:.3f}s",
                extra={"extra_fields": {"operation": operation_name, "duration": duration, **tags}}
            )
            return result

        return wrapper
    return decorator


@contextmanager
def log_operation(operation_name: str, **extra_fields) -> Iterator[Dict[str, Any]]:
    """Log the start and outcome of an operation.

    Yields a dict the body can fill with results (node counts, cycle
    members); those fields are added to the completion record only.
    """
    logger = std_logging.getLogger(f"{LOGGER_NAME}.operations")
    results: Dict[str, Any] = {}
    base = {"operation": operation_name, **extra_fields}

    logger.info(f"Starting operation: {operation_name}", extra={"extra_fields": {**base, "status": "started"}})
    start_time = time.perf_counter()

    try:
        yield results
    except Exception as e:
        duration = time.perf_counter() - start_time
        logger.error(
            f"Failed operation: {operation_name} after {duration:.3f}s - {e}",
            extra={"extra_fields": {**base, "status": "failed", "duration": duration, **_failure_fields(e)}},
            exc_info=True
        )
        raise

    duration = time.perf_counter() - start_time
    logger.info(
        f"Completed operation: {operation_name} in {duration:.3f}s",
        extra={"extra_fields": {**base, "status": "completed", "duration": duration, **results}}
    )


class ObservabilityHooks:
    """Observability hooks for dependency graph events."""

    def __init__(self):
        self.hooks: Dict[str, List[Callable[..., Any]]] = {}
        self.logger = std_logging.getLogger(f"{LOGGER_NAME}.observability")

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback for a specific event type."""
        self.hooks.setdefault(event_type, []).append(callback)
        self.logger.debug(f"Registered hook for event: {event_type}")

    def unregister_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        callbacks = self.hooks.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def trigger_hooks(self, event_type: str, **data) -> None:
        """Trigger all callbacks for a specific event type.

        A failing callback is logged and skipped so one bad subscriber
        cannot abort an analysis run.
        """
        if event_type in self.hooks:
            self.logger.debug(f"Triggering {len(self.hooks[event_type])} hooks for event: {event_type}")
            for hook in list(self.hooks[event_type]):
                try:
                    hook(**data)
                except Exception as e:
                    self.logger.error(f"Hook failed for event {event_type}: {e}")

    def log_graph_event(self, event_type: str, **data) -> None:
        """Log a graph event and trigger hooks."""
        event_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": event_type,
            **data
        }

        self.logger.info(f"Graph event: {event_type}", extra={"extra_fields": event_data})

        hook_data = {k: v for k, v in event_data.items() if k != "event_type"}
        self.trigger_hooks(event_type, **hook_data)


observability_hooks = ObservabilityHooks()


def log_error_with_context(error: Exception, context: Dict[str, Any], **extra_fields):
    """Log a failed analysis or edit together with the story context it ran on."""
    logger = std_logging.getLogger(f"{LOGGER_NAME}.errors")
    operation = context.get("operation", "unknown operation")

    logger.error(
        f"Error in {operation}: {error}",
        extra={"extra_fields": {
            "timestamp": datetime.utcnow().isoformat(),
            **_failure_fields(error),
            "context": context,
            **extra_fields
        }},
        exc_info=True
    )


# Convenience functions for common events
def log_graph_analysis(story_count: int, node_count: int, max_level: int, **extra_fields):
    """Log a completed dependency analysis."""
    observability_hooks.log_graph_event(
        "graph_analyzed",
        story_count=story_count,
        node_count=node_count,
        max_level=max_level,
        **extra_fields
    )


def log_cycle_detected(story_ids: List[str], **extra_fields):
    """Log stories found on a dependency cycle."""
    observability_hooks.log_graph_event("cycle_detected", story_ids=list(story_ids), **extra_fields)


def log_dependency_added(story_id: str, depends_on_id: str, **extra_fields):
    observability_hooks.log_graph_event(
        "dependency_added", story_id=story_id, depends_on_id=depends_on_id, **extra_fields
    )


def log_dependency_removed(story_id: str, depends_on_id: str, **extra_fields):
    observability_hooks.log_graph_event(
        "dependency_removed", story_id=story_id, depends_on_id=depends_on_id, **extra_fields
    )
