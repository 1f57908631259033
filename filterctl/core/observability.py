"""
Observability module for filterctl.

Provides:
- Structured logging with JSON format and a run correlation ID
- Prometheus metrics for compilation and diffing

Library code only emits debug/info records and metrics; failures are always
raised to the caller.

Usage:
    from filterctl.core.observability import (
        configure_structured_logging,
        get_logger,
        metrics,
        set_run_id,
    )
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from filterctl.core.config import settings

# ============================================================================
# Context Variables
# ============================================================================

# Correlation ID - links all logs emitted while handling one configuration
_run_id_ctx: ContextVar[str] = ContextVar("run_id", default="")


def generate_run_id() -> str:
    """Generate a unique run ID for correlation."""
    return str(uuid.uuid4())


def get_run_id() -> str:
    """Get the current run ID from context."""
    return _run_id_ctx.get()


def set_run_id(run_id: str) -> None:
    """Set the run ID for the current context."""
    _run_id_ctx.set(run_id)


# ============================================================================
# Structured Logging Configuration
# ============================================================================

_STANDARD_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - logger: Logger name
    - message: Log message
    - run_id: Correlation ID (if available)
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = get_run_id()
        if run_id:
            log_entry["run_id"] = run_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["file"] = record.pathname
        log_entry["line"] = record.lineno
        log_entry["function"] = record.funcName

        # These come from logger.info("msg", extra={"key": "value"})
        extra_keys = {
            k: v for k, v in record.__dict__.items() if k not in _STANDARD_RECORD_KEYS
        }
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(
    level: str | None = None, structured: bool | None = None
) -> None:
    """
    Configure root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL), defaults to
               settings.log_level
        structured: Emit JSON lines when True, plain text otherwise (defaults
                    to settings.structured_logs)
    """
    if level is None:
        level = settings.log_level
    if structured is None:
        structured = settings.structured_logs

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Use a custom registry to avoid conflicts with other Prometheus metrics
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics collection.

    Metrics groups:
    - Compiler: compilation outcome, duration and generated filter count
    - Diff: duration and size of the assignment problem
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        # -------------------------------------------------------------------
        # Compiler Metrics
        # -------------------------------------------------------------------

        self.compiler_compilations_total = Counter(
            "filterctl_compilations_total",
            "Total rule set compilations",
            ["status"],
            registry=self.registry,
        )

        self.compiler_duration_seconds = Histogram(
            "filterctl_compiler_duration_seconds",
            "Rule set compilation duration in seconds",
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self.registry,
        )

        self.compiler_filters_count = Histogram(
            "filterctl_compiler_filters_count",
            "Number of native filters produced by a compilation",
            buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000),
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Diff Metrics
        # -------------------------------------------------------------------

        self.diff_duration_seconds = Histogram(
            "filterctl_diff_duration_seconds",
            "Filter diff duration in seconds",
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self.registry,
        )

        self.diff_assignment_cells = Histogram(
            "filterctl_diff_assignment_cells",
            "Number of cells in the cost matrix solved by the diff reordering",
            buckets=(1, 10, 100, 1000, 10000, 100000, 1000000),
            registry=self.registry,
        )


# Global metrics instance
metrics = Metrics(_registry)


def metrics_text() -> str:
    """Return all metrics in Prometheus text exposition format."""
    return generate_latest(_registry).decode("utf-8")
