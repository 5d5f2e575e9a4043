import pathlib
import sys
from urllib.parse import parse_qs

import httpx
import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from api.app.main import app  # noqa: E402
from api.app.routes_payments import get_payment_client  # noqa: E402
from config import get_settings  # noqa: E402

CHECKOUT = {
    "orderId": "o1",
    "items": [
        {"name": "Adobo", "price": 100, "quantity": 2},
        {"name": "Rice", "price": 22.5, "quantity": 1},
    ],
    "total": 267.5,
    "customerEmail": "maria@example.com",
}


@pytest.fixture
def gateway():
    """Route the payment client through a mock transport."""

    calls = []
    state = {"response": httpx.Response(200, json={"url": "https://checkout.test/s/1"})}

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return state["response"]

    async def override():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            yield client

    app.dependency_overrides[get_payment_client] = override
    yield calls, state
    app.dependency_overrides.pop(get_payment_client, None)


@pytest.mark.anyio
async def test_checkout_session_created(client, gateway):
    calls, _ = gateway
    resp = await client.post("/api/payments/create-checkout-session", json=CHECKOUT)
    assert resp.status_code == 200
    assert resp.json() == {"url": "https://checkout.test/s/1"}

    [request] = calls
    assert request.url.path == "/v1/checkout/sessions"
    assert request.headers["authorization"].startswith("Basic ")
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    form = parse_qs(request.content.decode())
    assert form["mode"] == ["payment"]
    assert form["line_items[0][price_data][currency]"] == ["php"]
    assert form["line_items[0][price_data][unit_amount]"] == ["10000"]
    assert form["line_items[1][price_data][unit_amount]"] == ["2250"]
    assert form["line_items[0][quantity]"] == ["2"]
    assert form["metadata[orderId]"] == ["o1"]
    assert form["customer_email"] == ["maria@example.com"]
    settings = get_settings()
    assert form["success_url"] == [f"{settings.app_url}?payment_success=true&order_id=o1"]


@pytest.mark.anyio
async def test_gateway_error_is_propagated(client, gateway):
    _, state = gateway
    state["response"] = httpx.Response(
        402, json={"error": {"message": "Your card was declined."}}
    )
    resp = await client.post("/api/payments/create-checkout-session", json=CHECKOUT)
    assert resp.status_code == 502
    assert resp.json()["error"]["message"] == "Your card was declined."


@pytest.mark.anyio
async def test_not_configured(client, gateway, monkeypatch):
    monkeypatch.setattr(get_settings(), "stripe_secret_key", None)
    resp = await client.post("/api/payments/create-checkout-session", json=CHECKOUT)
    assert resp.status_code == 500
    assert resp.json()["error"]["message"] == "Stripe is not configured"
    assert gateway[0] == []


@pytest.mark.anyio
async def test_unreachable_gateway_is_bad_gateway(client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def override():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            yield client

    app.dependency_overrides[get_payment_client] = override
    try:
        resp = await client.post("/api/payments/create-checkout-session", json=CHECKOUT)
    finally:
        app.dependency_overrides.pop(get_payment_client, None)
    assert resp.status_code == 502
    assert resp.json()["error"]["message"] == "connection refused"
