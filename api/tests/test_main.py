# test_main.py
"""Tests for health, metrics and cross-cutting HTTP behaviour."""

import pathlib
import sys

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from api.app.middlewares import LoggingMiddleware  # noqa: E402


@pytest.mark.anyio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_metrics_exposes_order_counters(client):
    await client.post(
        "/api/orders",
        json={
            "customerId": "c1",
            "restaurantId": "r1",
            "items": [{"id": "x1", "price": 10, "quantity": 1}],
            "total": 55,
        },
    )
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "orders_created_total" in resp.text
    assert "ws_clients" in resp.text


@pytest.mark.anyio
async def test_request_id_is_echoed(client):
    resp = await client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"

    resp = await client.get("/health", headers={"X-Request-ID": "bad id!"})
    assert resp.headers["X-Request-ID"] != "bad id!"


@pytest.mark.anyio
async def test_unknown_route_uses_error_envelope(client):
    resp = await client.get("/api/nowhere")
    assert resp.status_code == 404
    body = resp.json()
    assert body["ok"] is False
    assert body["error"]["code"] == 404


@pytest.mark.anyio
async def test_cors_allows_any_origin(client):
    resp = await client.options(
        "/api/orders/available",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


@pytest.mark.anyio
async def test_logging_without_request_id_middleware_validates_header():
    bare = FastAPI()
    bare.add_middleware(LoggingMiddleware)

    @bare.get("/echo")
    async def echo(request: Request) -> dict:
        return {"requestId": request.state.request_id}

    transport = ASGITransport(app=bare)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        bad = await ac.get("/echo", headers={"X-Request-ID": "bad id!"})
        good = await ac.get("/echo", headers={"X-Request-ID": "abc-123"})

    assert bad.json()["requestId"] != "bad id!"
    assert len(bad.json()["requestId"]) == 32
    assert good.json()["requestId"] == "abc-123"
