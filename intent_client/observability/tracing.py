"""
Distributed Tracing - OpenTelemetry spans and correlation IDs for outgoing calls.

Provides utilities for:
- Creating client spans around detect-intent calls
- Injecting trace context into gRPC metadata
- Correlation ID generation
"""
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Generator, Optional

from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Tracer
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

CORRELATION_HEADER = "x-correlation-id"

# Context variable for correlation ID (survives async boundaries)
_correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)

# Propagator for W3C Trace Context
_propagator = TraceContextTextMapPropagator()


def get_tracer(name: str = "intent_client") -> Tracer:
    """Get the tracer for this library (no-op until an SDK is installed)."""
    return trace.get_tracer(name)


def get_correlation_id() -> str:
    """
    Get the current correlation ID.

    Returns a fresh one, without binding it, if none is set.
    """
    cid = _correlation_id_var.get()
    if cid is None:
        cid = str(uuid.uuid4())
    return cid


def current_correlation_id() -> Optional[str]:
    """Return the correlation ID if one is set, without creating one."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID."""
    _correlation_id_var.set(None)


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.CLIENT,
    attributes: Optional[Dict[str, Any]] = None,
    tracer: Optional[Tracer] = None,
) -> Generator[Span, None, None]:
    """
    Create a new span within the current trace context.

    Usage:
        with create_span("DetectIntent", attributes={"rpc.system": "grpc"}):
            # ... call ...

    Args:
        name: Name of the span
        kind: SpanKind (CLIENT for outgoing calls)
        attributes: Initial span attributes
        tracer: Optional tracer instance (uses default if not provided)

    Yields:
        The created span
    """
    t = tracer or get_tracer()
    attrs = dict(attributes or {})

    # An unbound context gets a correlation ID for this span only
    token = None
    if _correlation_id_var.get() is None:
        token = _correlation_id_var.set(str(uuid.uuid4()))
    attrs["correlation_id"] = _correlation_id_var.get()

    try:
        # Exceptions are recorded by record_exception at the call site
        with t.start_as_current_span(
            name, kind=kind, attributes=attrs,
            record_exception=False, set_status_on_exception=False,
        ) as span:
            yield span
    finally:
        if token is not None:
            _correlation_id_var.reset(token)


def inject_context(carrier: Dict[str, str]) -> Dict[str, str]:
    """
    Inject trace context and correlation ID into a carrier dict.

    Args:
        carrier: Dict to inject headers into

    Returns:
        The carrier with traceparent/tracestate and x-correlation-id added
    """
    _propagator.inject(carrier)
    carrier[CORRELATION_HEADER] = get_correlation_id()
    return carrier


def record_exception(exception: Exception, attributes: Optional[Dict] = None) -> None:
    """Record an exception on the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.record_exception(exception, attributes=attributes)
        span.set_status(trace.StatusCode.ERROR, str(exception))
