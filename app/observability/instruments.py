from __future__ import annotations

import re

from app.config import Settings
from app.observability.metrics import Instrument, MetricsRegistry


HTTP_REQUEST_DURATION_MS = "http_request_duration_ms"
CUSTOMER_OPERATIONS_TOTAL = "customer_operations_total"
PRODUCT_OPERATIONS_TOTAL = "product_operations_total"
API_ERROR_TOTAL = "api_error_total"

# Request-metrics bundle: seconds histogram keyed by normalized path + `up`.
BUNDLE_REQUEST_DURATION_SECONDS = "http_request_duration_seconds"
UP = "up"

DURATION_MS_BUCKETS = (1.0, 5.0, 15.0, 50.0, 100.0, 200.0, 500.0, 1000.0, 2000.0)
BUNDLE_SECONDS_BUCKETS = (0.003, 0.03, 0.1, 0.3, 1.5, 10.0)

SERVICE_INSTRUMENTS: tuple[Instrument, ...] = (
    Instrument(
        name=HTTP_REQUEST_DURATION_MS,
        documentation="Duration of HTTP requests in ms",
        kind="histogram",
        labelnames=("method", "route", "status_code"),
        buckets=DURATION_MS_BUCKETS,
    ),
    Instrument(
        name=CUSTOMER_OPERATIONS_TOTAL,
        documentation="Counter for customer operations",
        kind="counter",
        labelnames=("operation",),
    ),
    Instrument(
        name=PRODUCT_OPERATIONS_TOTAL,
        documentation="Counter for product operations",
        kind="counter",
        labelnames=("operation",),
    ),
    Instrument(
        name=API_ERROR_TOTAL,
        documentation="Count of errors in API requests",
        kind="counter",
        labelnames=("route", "method"),
    ),
    Instrument(
        name=BUNDLE_REQUEST_DURATION_SECONDS,
        documentation="duration histogram of http responses labeled with: status_code, method, path, project",
        kind="histogram",
        labelnames=("status_code", "method", "path", "project"),
        buckets=BUNDLE_SECONDS_BUCKETS,
    ),
    Instrument(
        name=UP,
        documentation="1 = up, 0 = not up",
        kind="gauge",
        labelnames=("project",),
    ),
)

_NUMERIC_SEGMENT = re.compile(r"^\d+$")
_UUID_SEGMENT = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def normalize_path(path: str, placeholder: str = "#val") -> str:
    """Replace numeric and UUID path segments so ids don't become label values.

    >>> normalize_path("/customers/42")
    '/customers/#val'
    """

    segments = path.split("/")
    return "/".join(
        placeholder if _NUMERIC_SEGMENT.match(segment) or _UUID_SEGMENT.match(segment) else segment
        for segment in segments
    )


def build_service_metrics(settings: Settings) -> MetricsRegistry:
    """Create the registry holding every instrument the service writes to."""

    registry = MetricsRegistry(default_collectors=settings.metrics_default_collectors)
    for instrument in SERVICE_INSTRUMENTS:
        registry.register(instrument)
    registry.set(UP, {"project": settings.metrics_project_label}, 1)
    return registry
