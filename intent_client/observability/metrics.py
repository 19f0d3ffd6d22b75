"""
Call Metrics - Outgoing detect-intent call counters and latency.

Instruments are created against the global OpenTelemetry meter provider and
stay no-ops until the application installs an SDK.
"""
from dataclasses import dataclass
from typing import Optional

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram, Meter


def get_meter(name: str = "intent_client") -> Meter:
    """Get the meter for this library."""
    return metrics.get_meter(name)


@dataclass
class CallMetrics:
    """Metrics for outgoing gRPC calls."""

    # Call count by method and status
    calls_total: Counter

    # Call duration histogram
    call_duration_ms: Histogram

    # Error count by error type
    errors_total: Counter


def create_call_metrics(meter: Optional[Meter] = None) -> CallMetrics:
    """
    Create metrics for outgoing calls.

    Returns:
        CallMetrics dataclass with configured metric instruments
    """
    m = meter or get_meter()
    return CallMetrics(
        calls_total=m.create_counter(
            name="intent_client_calls_total",
            description="Total outgoing detect-intent calls",
            unit="1",
        ),
        call_duration_ms=m.create_histogram(
            name="intent_client_call_duration_ms",
            description="Outgoing call duration in milliseconds",
            unit="ms",
        ),
        errors_total=m.create_counter(
            name="intent_client_errors_total",
            description="Failed outgoing calls by error type",
            unit="1",
        ),
    )
