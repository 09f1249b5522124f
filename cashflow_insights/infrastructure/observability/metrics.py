"""Prometheus metrics for fetch health and stream cancellation"""

from prometheus_client import Counter, Histogram

# Collaborator calls
fetch_failures_counter = Counter(
    "cashflow_fetch_failures_total",
    "Cashflow API calls replaced by a neutral value",
    ["call"],  # transactions | daily_summary | forecast | insights | simulation
)

fetch_latency_histogram = Histogram(
    "cashflow_fetch_latency_seconds",
    "Cashflow API response time",
    ["call"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Derivation cycles
cycles_committed_counter = Counter(
    "cashflow_cycles_committed_total",
    "Fetch results applied to presentation state",
    ["stream"],
)

stale_results_counter = Counter(
    "cashflow_stale_results_discarded_total",
    "Fetch results dropped because a newer selection superseded them",
    ["stream"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)
