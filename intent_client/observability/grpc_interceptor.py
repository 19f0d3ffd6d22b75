"""
gRPC Client Interceptors for Observability.

Wraps outgoing unary calls to:
- Propagate W3C trace context and the correlation ID as metadata
- Record call counts and latency by method and status
"""
import collections
import logging
import time
from typing import List, Optional, Tuple

import grpc

from .metrics import CallMetrics, create_call_metrics
from .tracing import inject_context

logger = logging.getLogger(__name__)


class _ClientCallDetails(
    collections.namedtuple(
        "_ClientCallDetails",
        ("method", "timeout", "metadata", "credentials", "wait_for_ready", "compression"),
    ),
    grpc.ClientCallDetails,
):
    pass


def _with_trace_metadata(metadata) -> List[Tuple[str, str]]:
    merged = list(metadata or [])
    carrier = {}
    inject_context(carrier)
    merged.extend(carrier.items())
    return merged


def _method_name(method) -> str:
    if isinstance(method, bytes):
        return method.decode("utf-8", errors="ignore")
    return method


class ObservabilityClientInterceptor(grpc.UnaryUnaryClientInterceptor):
    """
    Client interceptor that adds observability to outgoing unary calls.

    Features:
    - Trace context and correlation ID injection
    - Call duration metrics
    - Error counting by status code
    """

    def __init__(self, metrics: Optional[CallMetrics] = None):
        self.metrics = metrics or create_call_metrics()

    def intercept_unary_unary(self, continuation, client_call_details, request):
        method = _method_name(client_call_details.method)
        start_time = time.perf_counter()

        new_details = _ClientCallDetails(
            method=client_call_details.method,
            timeout=client_call_details.timeout,
            metadata=_with_trace_metadata(client_call_details.metadata),
            credentials=client_call_details.credentials,
            wait_for_ready=client_call_details.wait_for_ready,
            compression=getattr(client_call_details, "compression", None),
        )

        outcome = continuation(new_details, request)
        # Failed outcomes are returned, not raised; the channel raises them later
        code = outcome.code()
        self._record(method, code, start_time)
        return outcome

    def _record(self, method: str, code: grpc.StatusCode, start_time: float) -> None:
        status = "ok" if code == grpc.StatusCode.OK else code.name
        duration_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.calls_total.add(1, {"method": method, "status": status})
        self.metrics.call_duration_ms.record(
            duration_ms, {"method": method, "status": status}
        )
        if status != "ok":
            self.metrics.errors_total.add(1, {"method": method, "error_type": status})
        logger.debug(f"{method} finished: status={status} duration_ms={duration_ms:.1f}")


class AsyncObservabilityClientInterceptor(grpc.aio.UnaryUnaryClientInterceptor):
    """asyncio counterpart of ObservabilityClientInterceptor."""

    def __init__(self, metrics: Optional[CallMetrics] = None):
        self.metrics = metrics or create_call_metrics()
        self._sync = ObservabilityClientInterceptor(self.metrics)

    async def intercept_unary_unary(self, continuation, client_call_details, request):
        method = _method_name(client_call_details.method)
        start_time = time.perf_counter()

        new_details = grpc.aio.ClientCallDetails(
            method=client_call_details.method,
            timeout=client_call_details.timeout,
            metadata=grpc.aio.Metadata(*_with_trace_metadata(client_call_details.metadata)),
            credentials=client_call_details.credentials,
            wait_for_ready=client_call_details.wait_for_ready,
        )

        call = await continuation(new_details, request)
        code = await call.code()
        self._sync._record(method, code, start_time)
        return call


def create_client_interceptors(metrics: Optional[CallMetrics] = None) -> list:
    """Create the list of blocking client interceptors."""
    return [ObservabilityClientInterceptor(metrics)]


def create_async_client_interceptors(metrics: Optional[CallMetrics] = None) -> list:
    """Create the list of asyncio client interceptors."""
    return [AsyncObservabilityClientInterceptor(metrics)]
