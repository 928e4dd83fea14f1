"""
Prometheus Metrics Module.

Exposes application metrics for monitoring with Prometheus.
"""

from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response

# ============================================
# Application Info
# ============================================
APP_INFO = Info(
    "app_info",
    "Application information"
)
APP_INFO.info({
    "app_name": "healthflow",
    "version": "1.0.0",
})

# ============================================
# Pathway Resolution Metrics
# ============================================
PATHWAY_RESOLUTIONS_TOTAL = Counter(
    "pathway_resolutions_total",
    "Total number of resolved pathways by resolution tier",
    ["tier"]
)

PATHWAY_NOT_FOUND_TOTAL = Counter(
    "pathway_not_found_total",
    "Total number of pathway requests that could not be resolved",
    ["reason"]
)

# ============================================
# Advisory Metrics
# ============================================
ADVISORY_REQUESTS_TOTAL = Counter(
    "advisory_requests_total",
    "Total number of advisory questions by outcome",
    ["outcome"]
)

ADVISORY_LATENCY_SECONDS = Histogram(
    "advisory_latency_seconds",
    "Time spent waiting on the advisory model",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 15.0]
)

# ============================================
# HTTP Request Metrics
# ============================================
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"]
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# ============================================
# Metrics Router
# ============================================
router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """
    Expose Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# ============================================
# Helper Functions
# ============================================
def track_pathway_resolution(tier: str):
    """Track a successful resolution at the given tier."""
    PATHWAY_RESOLUTIONS_TOTAL.labels(tier=tier).inc()


def track_pathway_not_found(reason: str):
    """Track a rejected resolution (country, state, procedure, empty_query)."""
    PATHWAY_NOT_FOUND_TOTAL.labels(reason=reason).inc()


def track_advisory_request(outcome: str, duration_seconds: float = 0.0):
    """Track an advisory answer (answered, fallback_*, not_configured)."""
    ADVISORY_REQUESTS_TOTAL.labels(outcome=outcome).inc()
    if duration_seconds > 0:
        ADVISORY_LATENCY_SECONDS.observe(duration_seconds)


def track_http_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
    """Track HTTP request metrics."""
    HTTP_REQUESTS_TOTAL.labels(
        method=method,
        endpoint=endpoint,
        status_code=str(status_code)
    ).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(
        method=method,
        endpoint=endpoint
    ).observe(duration_seconds)
