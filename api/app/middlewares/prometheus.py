"""Prometheus middleware for HTTP request metrics."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..routes_metrics import http_errors_total, http_requests_total


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Count requests by route template and failed responses by status.

    Labelling by template (``/api/orders/{order_id}``) rather than the raw path
    keeps order ids out of the label set.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        route = request.scope.get("route")
        path = route.path if route else request.url.path
        status = str(response.status_code)
        http_requests_total.labels(path=path, method=request.method, status=status).inc()
        if response.status_code >= 400:
            http_errors_total.labels(status=status).inc()
        return response
