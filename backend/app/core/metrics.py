"""Prometheus collectors shared by the middleware and the auth gates"""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "taskmanager_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "taskmanager_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
AUTH_FAILURES = Counter(
    "taskmanager_auth_failures_total",
    "Rejected authentication attempts by gate and internal reason",
    ["gate", "reason"],
)
