"""Prometheus metrics for monitoring risk API fetches and figure updates"""

from prometheus_client import Counter, Histogram, Gauge

# Risk API metrics
fetch_counter = Counter(
    "riskmap_fetch_total",
    "Risk API fetches by operation and outcome",
    ["operation", "outcome"],  # success | fetch_error | malformed
)

fetch_latency_histogram = Histogram(
    "riskmap_fetch_latency_seconds",
    "Risk API response time",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Controller metrics
stale_response_counter = Counter(
    "riskmap_stale_responses_total",
    "Responses discarded because a newer request was issued",
    ["operation"],
)

figure_points_gauge = Gauge(
    "riskmap_figure_points",
    "Number of points in the displayed figure",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_fetch(operation: str, outcome: str) -> None:
    """Record a completed risk API fetch"""
    fetch_counter.labels(operation=operation, outcome=outcome).inc()
