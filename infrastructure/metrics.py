"""
Métricas Prometheus del servicio.

Se registran en un `CollectorRegistry` propio para que `/metrics` sólo
publique lo que define la aplicación.
"""

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

REGISTRY = CollectorRegistry()

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path", "status"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
    registry=REGISTRY,
)

REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status"],
    registry=REGISTRY,
)

DB_QUERY_DURATION = Histogram(
    "db_query_duration_seconds",
    "Database query duration in seconds",
    ["query"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1),
    registry=REGISTRY,
)


def observe_request(method: str, path: str, status: int, seconds: float) -> None:
    labels = {"method": method, "path": path, "status": str(status)}
    REQUEST_DURATION.labels(**labels).observe(seconds)
    REQUESTS_TOTAL.labels(**labels).inc()


def render_latest() -> bytes:
    return generate_latest(REGISTRY)
