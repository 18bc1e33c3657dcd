"""
Exposition de métriques Prometheus et middleware de mesure.

Fournit `/metrics`, les compteurs de livraison/purge d'images et un middleware mesurant la latence
des requêtes HTTP par route.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Livraison d'images par issue: transcoded | passthrough | placeholder | not_found | error
IMAGE_DELIVERIES = Counter(
    "image_deliveries_total",
    "Image responses by outcome",
    ["outcome"],
)

# Purge des variantes générées
FLUSH_RUNS = Counter(
    "image_flush_runs_total",
    "Flush-all sweeps by result",
    ["result"],
)
FLUSH_DELETED_FILES = Counter(
    "image_flush_deleted_files_total",
    "Generated variant files deleted by flush-all sweeps",
)


def route_label(request: Request) -> str:
    """Gabarit de route (cardinalité bornée), sinon `unmatched`."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = route_label(request)
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
