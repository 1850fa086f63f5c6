from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# ---------------------------------------------------------------------------
# Readability requests
# ---------------------------------------------------------------------------
readability_requests_total = Counter(
    "readability_requests_total",
    "Total readability requests by output format and outcome",
    ["format", "status"],
)
upstream_fetch_duration_seconds = Histogram(
    "upstream_fetch_duration_seconds",
    "Time spent fetching the upstream page",
    buckets=[0.1, 0.25, 0.5, 1, 2, 5, 10, 30],
)
pipeline_duration_seconds = Histogram(
    "pipeline_duration_seconds",
    "Time spent extracting, transforming and sanitizing a page",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5],
)

# ---------------------------------------------------------------------------
# Chat relay
# ---------------------------------------------------------------------------
telegram_updates_total = Counter(
    "telegram_updates_total",
    "Telegram updates handled by kind and outcome",
    ["kind", "status"],
)

# ---------------------------------------------------------------------------
# HTTP request metrics
# ---------------------------------------------------------------------------
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests to the API",
    ["method", "path", "status"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
