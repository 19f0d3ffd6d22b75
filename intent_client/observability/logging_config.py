"""
Structured Logging - JSON logging with automatic context propagation.

Uses structlog's ProcessorFormatter on top of the standard library so that
every `logging.getLogger(__name__)` in the package gets:
- Correlation and trace ID injection
- JSON output for log aggregation (or colored console output)
- Context propagation across async boundaries
"""
import logging
import sys
from typing import Any, Optional

import structlog
from opentelemetry import trace
from structlog.contextvars import bind_contextvars, clear_contextvars

from .tracing import current_correlation_id


def configure_logging(
    service_name: str = "intent-client",
    log_level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure structured logging on the root logger.

    Args:
        service_name: Name for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_output: Whether to output JSON (True) or human-readable (False)
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_service_info(service_name),
        _add_trace_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so stdout stays clean for command output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    ))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Quiet noisy libraries
    logging.getLogger("grpc").setLevel(logging.WARNING)
    logging.getLogger("opentelemetry").setLevel(logging.WARNING)


def _add_service_info(service_name: str):
    """Processor to add service information to all log entries."""
    def processor(logger, method_name, event_dict):
        event_dict["service"] = service_name
        return event_dict
    return processor


def _add_trace_context(logger, method_name, event_dict):
    """Processor to add correlation and trace IDs to log entries."""
    correlation_id = current_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id

    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")

    return event_dict


def get_logger(name: Optional[str] = None) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """
    Bind key-value pairs to the logging context.

    Usage:
        bind_context(project_id="p1", session_id="s1")
        logger.info("Detecting intent")  # includes project_id and session_id
    """
    bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear the logging context."""
    clear_contextvars()
