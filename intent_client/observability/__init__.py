"""
Observability - OpenTelemetry tracing/metrics and structured logging.

Usage:
    from intent_client.observability import configure_logging

    # Initialize once at application startup
    configure_logging(service_name="my-bot", json_output=False)
"""
from .grpc_interceptor import (
    AsyncObservabilityClientInterceptor,
    ObservabilityClientInterceptor,
    create_async_client_interceptors,
    create_client_interceptors,
)
from .logging_config import bind_context, clear_context, configure_logging, get_logger
from .metrics import CallMetrics, create_call_metrics, get_meter
from .tracing import (
    create_span,
    get_correlation_id,
    get_tracer,
    inject_context,
    record_exception,
    set_correlation_id,
)

__all__ = [
    # Interceptors
    "ObservabilityClientInterceptor",
    "AsyncObservabilityClientInterceptor",
    "create_client_interceptors",
    "create_async_client_interceptors",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    # Metrics
    "CallMetrics",
    "create_call_metrics",
    "get_meter",
    # Tracing
    "create_span",
    "get_tracer",
    "get_correlation_id",
    "set_correlation_id",
    "inject_context",
    "record_exception",
]
