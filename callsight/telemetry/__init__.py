"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    PIPELINE_OUTCOMES,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    UPSTREAM_LATENCY,
    observe_request,
    observe_upstream_call,
    record_pipeline_outcome,
)

__all__ = [
    "ERROR_COUNTER",
    "PIPELINE_OUTCOMES",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "UPSTREAM_LATENCY",
    "observe_request",
    "observe_upstream_call",
    "record_pipeline_outcome",
]
