# backend/metrics.py
import time

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Histogram, generate_latest
from prometheus_client import gc_collector, platform_collector, process_collector

registry = CollectorRegistry()
process_collector.ProcessCollector(registry=registry)
platform_collector.PlatformCollector(registry=registry)
gc_collector.GCCollector(registry=registry)

http_request_duration = Histogram(
    "http_request_duration_ms",
    "Duration of HTTP requests in ms",
    labelnames=("method", "route", "code"),
    buckets=(50, 100, 200, 300, 400, 500, 1000, 2000),
    registry=registry,
)


def _route_label(request: Request) -> str:
    # Route template (/tasks/{id}), not the concrete path.
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


async def record_request_duration(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    http_request_duration.labels(
        request.method,
        _route_label(request),
        str(response.status_code),
    ).observe((time.perf_counter() - start) * 1000)
    return response


def metrics_response() -> Response:
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
