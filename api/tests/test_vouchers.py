import pathlib
import sys
from datetime import date
from types import SimpleNamespace

import pytest
from hypothesis import given
from hypothesis import strategies as st

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from api.app.services import billing_service  # noqa: E402
from api.app.services.billing_service import VoucherError  # noqa: E402


def _voucher(**overrides):
    data = {
        "code": "AYOO2026",
        "discount_type": "PERCENTAGE",
        "discount_value": 20,
        "min_order_value": 200,
        "max_discount": 100,
        "expiry_date": "2026-12-31",
        "is_active": True,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def test_subtotal():
    items = [{"price": 100, "quantity": 2}, {"price": 45.5, "quantity": 1}]
    assert billing_service.subtotal(items) == 245.5


def test_percentage_is_capped():
    assert billing_service.discount_for(_voucher(), 300) == 60
    assert billing_service.discount_for(_voucher(), 1000) == 100


def test_fixed_discount_never_exceeds_amount():
    voucher = _voucher(discount_type="FIXED", discount_value=50, min_order_value=0)
    assert billing_service.discount_for(voucher, 120) == 50
    assert billing_service.discount_for(voucher, 30) == 30


def test_minimum_order():
    with pytest.raises(VoucherError) as exc:
        billing_service.discount_for(_voucher(), 150)
    assert exc.value.code == "MIN_ORDER"


def test_expiry_is_inclusive():
    billing_service.check_voucher(_voucher(), today=date(2026, 12, 31))
    with pytest.raises(VoucherError) as exc:
        billing_service.check_voucher(_voucher(), today=date(2027, 1, 1))
    assert exc.value.code == "EXPIRED"


def test_quote():
    quote = billing_service.quote(300, 45, _voucher(), today=date(2026, 10, 17))
    assert quote == {"subtotal": 300, "delivery_fee": 45, "discount": 60, "total": 285}
    assert billing_service.quote(300, 45)["total"] == 345


@given(
    amount=st.integers(min_value=0, max_value=100_000),
    percent=st.integers(min_value=1, max_value=100),
    cap=st.one_of(st.none(), st.integers(min_value=1, max_value=500)),
)
def test_discount_bounds(amount, percent, cap):
    voucher = _voucher(discount_value=percent, max_discount=cap, min_order_value=0)
    discount = billing_service.discount_for(voucher, amount)
    assert 0 <= discount <= amount
    if cap is not None:
        assert discount <= cap


VOUCHER = {
    "code": "welcome50",
    "discountType": "FIXED",
    "discountValue": 50,
    "minOrderValue": 100,
    "expiryDate": "2099-12-31",
    "description": "50 off",
}


@pytest.mark.anyio
async def test_voucher_admin_crud(client):
    resp = await client.post("/api/vouchers", json=VOUCHER)
    assert resp.status_code == 200
    created = resp.json()
    assert created["code"] == "WELCOME50"
    assert created["isActive"] is True

    assert (await client.post("/api/vouchers", json=VOUCHER)).status_code == 400

    resp = await client.patch(f"/api/vouchers/{created['id']}", json={"isActive": False})
    assert resp.json()["isActive"] is False
    assert (await client.patch("/api/vouchers/missing", json={"isActive": True})).status_code == 404

    assert [v["code"] for v in (await client.get("/api/vouchers")).json()] == ["WELCOME50"]
    resp = await client.delete(f"/api/vouchers/{created['id']}")
    assert resp.json() == {"message": "Voucher deleted"}
    assert (await client.get("/api/vouchers")).json() == []


@pytest.mark.anyio
async def test_validate_voucher(client):
    await client.post("/api/vouchers", json=VOUCHER)

    resp = await client.get("/api/vouchers/validate/Welcome50")
    assert resp.status_code == 200
    assert resp.json()["code"] == "WELCOME50"
    assert resp.json()["discount"] is None

    resp = await client.get("/api/vouchers/validate/welcome50", params={"subtotal": 250})
    body = resp.json()
    assert (body["subtotal"], body["deliveryFee"], body["discount"], body["total"]) == (250, 45, 50, 245)

    resp = await client.get("/api/vouchers/validate/welcome50", params={"subtotal": 80})
    assert resp.status_code == 400
    assert "Minimum order" in resp.json()["error"]["message"]

    resp = await client.get("/api/vouchers/validate/NOPE")
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Invalid or inactive voucher code"


@pytest.mark.anyio
async def test_expired_and_inactive_vouchers(client):
    await client.post("/api/vouchers", json={**VOUCHER, "code": "OLD", "expiryDate": "2000-01-01"})
    resp = await client.get("/api/vouchers/validate/old")
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Voucher has expired"

    created = (await client.post("/api/vouchers", json={**VOUCHER, "code": "OFF"})).json()
    await client.patch(f"/api/vouchers/{created['id']}", json={"isActive": False})
    assert (await client.get("/api/vouchers/validate/OFF")).status_code == 404


@pytest.mark.anyio
async def test_voucher_patch_rejects_bad_input(client):
    first = (await client.post("/api/vouchers", json=VOUCHER)).json()
    await client.post("/api/vouchers", json={**VOUCHER, "code": "save10"})
    url = f"/api/vouchers/{first['id']}"

    resp = await client.patch(url, json={"code": None})
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "code cannot be empty"

    assert (await client.patch(url, json={"code": ""})).status_code == 422
    assert (await client.patch(url, json={"expiryDate": "soon"})).status_code == 422

    resp = await client.patch(url, json={"code": "Save10"})
    assert resp.status_code == 400
    assert "already exists" in resp.json()["error"]["message"]

    resp = await client.patch(url, json={"code": "welcome60"})
    assert resp.status_code == 200
    assert resp.json()["code"] == "WELCOME60"

    resp = await client.get("/api/vouchers/validate/welcome60", params={"subtotal": 250})
    assert resp.status_code == 200
    assert resp.json()["expiryDate"] == "2099-12-31"
