"""Prometheus metrics for the HTTP surface and the analysis pipeline."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# Upper buckets cover transcription plus analysis of long recordings.
_REQUEST_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 240.0)
_UPSTREAM_BUCKETS = (0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 90.0, 120.0)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests by method, route template and status code",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "Wall time spent serving an HTTP request",
    ("method", "route"),
    buckets=_REQUEST_BUCKETS,
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Requests answered with a 5xx status",
    ("method", "route"),
)

PIPELINE_OUTCOMES = Counter(
    "call_analysis_pipeline_outcomes_total",
    "Call analysis pipeline runs by outcome",
    ("outcome",),
)

UPSTREAM_LATENCY = Histogram(
    "call_analysis_upstream_duration_seconds",
    "Duration of calls to the transcription and analysis services",
    ("service", "outcome"),
    buckets=_UPSTREAM_BUCKETS,
)


def _non_negative(seconds: float) -> float:
    return seconds if seconds >= 0 else 0.0


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Count one finished request and record its latency."""

    labels = {"method": method or "UNKNOWN", "route": route or "unknown"}

    REQUEST_COUNT.labels(status=str(status_code), **labels).inc()
    REQUEST_LATENCY.labels(**labels).observe(_non_negative(duration_seconds))
    if status_code >= 500:
        ERROR_COUNTER.labels(**labels).inc()


def record_pipeline_outcome(outcome: str) -> None:
    """Count a finished pipeline run (completed, fallback or failed)."""

    PIPELINE_OUTCOMES.labels(outcome=outcome or "unknown").inc()


def observe_upstream_call(service: str, outcome: str, duration_seconds: float) -> None:
    UPSTREAM_LATENCY.labels(service=service, outcome=outcome).observe(
        _non_negative(duration_seconds)
    )
