"""Prometheus metrics for monitoring."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info

# Dedicated registry so tests and the /metrics endpoint see only our series
REGISTRY = CollectorRegistry()

# Covers response times from 1ms to 10s
DEFAULT_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)

# Pure evaluation is a hash and a short loop: 10μs to 10ms
EVALUATION_LATENCY_BUCKETS = (
    0.00001,
    0.000025,
    0.00005,
    0.0001,
    0.00025,
    0.0005,
    0.001,
    0.0025,
    0.005,
    0.01,
)

# Application info
app_info = Info(
    "flag_service",
    "Service name, version and environment",
    registry=REGISTRY,
)

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests in progress",
    ["method"],
    registry=REGISTRY,
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total number of handled application errors",
    ["error_type", "endpoint", "status_code"],
    registry=REGISTRY,
)

exceptions_unhandled_total = Counter(
    "exceptions_unhandled_total",
    "Total number of unhandled exceptions",
    ["exception_type", "endpoint"],
    registry=REGISTRY,
)

validation_errors_total = Counter(
    "validation_errors_total",
    "Total number of request validation errors",
    ["endpoint", "field"],
    registry=REGISTRY,
)

# Flag evaluation metrics
flag_evaluations_total = Counter(
    "flag_evaluations_total",
    "Flag evaluations by outcome",
    # outcome: matched, not_matched, disabled, unknown
    ["outcome"],
    registry=REGISTRY,
)

flag_variant_assignments_total = Counter(
    "flag_variant_assignments_total",
    "Evaluations that assigned a variant",
    registry=REGISTRY,
)

flag_evaluation_duration_seconds = Histogram(
    "flag_evaluation_duration_seconds",
    "Time spent in the pure evaluator, excluding record lookup",
    buckets=EVALUATION_LATENCY_BUCKETS,
    registry=REGISTRY,
)

flag_writes_total = Counter(
    "flag_writes_total",
    "Flag write operations",
    # operation: create, update, delete
    ["operation"],
    registry=REGISTRY,
)

# Flag record cache metrics
flag_cache_hits_total = Counter(
    "flag_cache_hits_total",
    "Flag record cache hits",
    registry=REGISTRY,
)

flag_cache_misses_total = Counter(
    "flag_cache_misses_total",
    "Flag record cache misses",
    registry=REGISTRY,
)

flag_cache_invalidations_total = Counter(
    "flag_cache_invalidations_total",
    "Flag record cache invalidations",
    # scope: key, all
    ["scope"],
    registry=REGISTRY,
)

flag_cache_entries = Gauge(
    "flag_cache_entries",
    "Flag records currently cached",
    registry=REGISTRY,
)
