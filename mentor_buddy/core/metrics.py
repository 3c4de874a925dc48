"""Prometheus metric inventory.

Every metric the service exports is declared here; the modules that own
the behaviour import the metric and increment or observe it in place.
Prometheus scrapes GET /metrics (see mentor_buddy.api.metrics_endpoint).
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Application metrics
# ---------------------------------------------------------------------------

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # hit|miss
)

TOKEN_BLACKLIST_CHECKS = Counter(
    "token_blacklist_checks_total",
    "Token blacklist lookups by result",
    ["result"],  # revoked|valid
)

SUBMISSIONS_TOTAL = Counter(
    "task_submissions_total",
    "Task submissions received, by whether they were a resubmission",
    ["kind"],  # first|resubmission
)

REVIEWS_TOTAL = Counter(
    "submission_reviews_total",
    "Completed submission reviews by outcome",
    ["outcome"],  # approved|needs_revision|rejected
)

KEEP_ALIVE_PINGS = Counter(
    "keep_alive_pings_total",
    "Keep-alive health pings against the backend, by result",
    ["result"],  # healthy|unhealthy|unreachable
)
