# routes_metrics.py

"""Prometheus metrics and /metrics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

# Counters
http_requests_total = Counter(
    "http_requests_total", "Total HTTP requests", ["path", "method", "status"]
)
orders_created_total = Counter("orders_created_total", "Total orders created")
orders_created_total.inc(0)

order_transitions_total = Counter(
    "order_transitions_total", "Order status transitions applied", ["status"]
)

order_claims_total = Counter(
    "order_claims_total", "Rider claims by outcome", ["outcome"]
)

realtime_events_total = Counter(
    "realtime_events_total", "Events published to real-time channels", ["event"]
)

http_errors_total = Counter("http_errors_total", "Total HTTP errors", ["status"])
http_errors_total.labels(status="0").inc(0)

# Gauges
ws_clients_gauge = Gauge("ws_clients", "Connected WebSocket clients")

router = APIRouter()


@router.get("/metrics")
async def metrics_endpoint() -> Response:
    """Expose Prometheus metrics."""
    data = generate_latest()
    return Response(data, media_type=CONTENT_TYPE_LATEST)
