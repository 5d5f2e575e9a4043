import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from api.app.domain import OrderStatus  # noqa: E402
from api.app.domain.errors import NotFound, StaleOrder  # noqa: E402
from api.app.repos_sqlalchemy import orders_repo_sql, restaurants_repo_sql  # noqa: E402


def _draft(**overrides):
    draft = {
        "customer_id": "c1",
        "restaurant_id": "r1",
        "items": [{"id": "x1", "name": "Adobo", "price": 100, "quantity": 2}],
        "total": 245,
        "delivery_address": "Purok 1, Iligan",
    }
    draft.update(overrides)
    return draft


@pytest.mark.anyio
async def test_create_order_defaults(session):
    order = await orders_repo_sql.create_order(session, _draft())
    assert order.status == OrderStatus.PENDING.value
    assert order.rider_id is None
    assert order.version == 1
    assert order.created_at == order.updated_at
    assert order.total == 245
    assert order.items == [{"id": "x1", "name": "Adobo", "price": 100.0, "quantity": 2}]


@pytest.mark.anyio
async def test_create_order_does_not_check_references(session):
    order = await orders_repo_sql.create_order(
        session, _draft(customer_id="ghost", restaurant_id="nowhere")
    )
    assert (await orders_repo_sql.get_order(session, order.id)).customer_id == "ghost"


@pytest.mark.anyio
async def test_items_are_snapshots(session):
    restaurant = await restaurants_repo_sql.create_restaurant(session, "Lutong Bahay")
    await session.commit()
    item = await restaurants_repo_sql.add_item(
        session, restaurant.id, {"name": "Sinigang", "price": 150}
    )
    lines = [{"id": item.id, "name": item.name, "price": item.price, "quantity": 1}]
    order = await orders_repo_sql.create_order(
        session, _draft(restaurant_id=restaurant.id, items=lines, total=195)
    )

    await restaurants_repo_sql.update_item(session, restaurant.id, item.id, {"price": 999})
    lines[0]["price"] = 1

    stored = await orders_repo_sql.get_order(session, order.id)
    assert stored.items[0]["price"] == 150
    assert stored.total == 195


@pytest.mark.anyio
async def test_listings_filter_and_keep_creation_order(session):
    a = await orders_repo_sql.create_order(session, _draft())
    b = await orders_repo_sql.create_order(session, _draft(restaurant_id="r2"))
    c = await orders_repo_sql.create_order(session, _draft(customer_id="c2"))

    assert [o.id for o in await orders_repo_sql.list_by_customer(session, "c1")] == [a.id, b.id]
    assert [o.id for o in await orders_repo_sql.list_by_restaurant(session, "r1")] == [a.id, c.id]
    assert await orders_repo_sql.list_by_rider(session, "rider1") == []

    await orders_repo_sql.assign_rider(session, b.id, "rider1")
    assert [o.id for o in await orders_repo_sql.list_by_rider(session, "rider1")] == [b.id]


@pytest.mark.anyio
@pytest.mark.parametrize("status", list(OrderStatus))
@pytest.mark.parametrize("assigned", [False, True])
@pytest.mark.parametrize("include_pending", [False, True])
async def test_list_available_is_unassigned_claimable(session, status, assigned, include_pending):
    order = await orders_repo_sql.create_order(session, _draft())
    await orders_repo_sql.update_status(
        session, order.id, status, rider_id="rider1" if assigned else None
    )

    available = await orders_repo_sql.list_available(session, include_pending)

    claimable = status is OrderStatus.READY_FOR_PICKUP or (
        include_pending and status is OrderStatus.PENDING
    )
    expected = [order.id] if claimable and not assigned else []
    assert [o.id for o in available] == expected


@pytest.mark.anyio
async def test_list_available_empty_store(session):
    assert await orders_repo_sql.list_available(session) == []


@pytest.mark.anyio
async def test_update_status_stamps_and_versions(session):
    order = await orders_repo_sql.create_order(session, _draft())
    before = order.updated_at

    updated = await orders_repo_sql.update_status(session, order.id, OrderStatus.ACCEPTED)
    assert updated.status == "ACCEPTED"
    assert updated.updated_at > before
    assert updated.created_at == order.created_at
    assert updated.version == 2
    first_stamp = updated.updated_at

    again = await orders_repo_sql.update_status(session, order.id, OrderStatus.PREPARING)
    assert again.updated_at > first_stamp


@pytest.mark.anyio
async def test_update_status_overwrites_rider_only_when_given(session):
    order = await orders_repo_sql.create_order(session, _draft())
    await orders_repo_sql.update_status(session, order.id, OrderStatus.ACCEPTED, rider_id="r9")
    updated = await orders_repo_sql.update_status(session, order.id, OrderStatus.PREPARING)
    assert updated.rider_id == "r9"


@pytest.mark.anyio
async def test_unknown_order_raises_not_found(session):
    with pytest.raises(NotFound):
        await orders_repo_sql.get_order(session, "missing")
    with pytest.raises(NotFound):
        await orders_repo_sql.update_status(session, "missing", OrderStatus.ACCEPTED)
    with pytest.raises(NotFound):
        await orders_repo_sql.update_location(session, "missing", 1.0, 2.0)


@pytest.mark.anyio
async def test_stale_version_is_rejected(session):
    order = await orders_repo_sql.create_order(session, _draft())
    order_id = order.id
    await orders_repo_sql.update_status(session, order_id, OrderStatus.ACCEPTED)

    with pytest.raises(StaleOrder):
        await orders_repo_sql.update_status(
            session, order_id, OrderStatus.CANCELLED, expected_version=1
        )
    assert (await orders_repo_sql.get_order(session, order_id)).status == "ACCEPTED"


@pytest.mark.anyio
async def test_assign_rider_only_once(session):
    order = await orders_repo_sql.create_order(session, _draft())
    order_id = order.id
    await orders_repo_sql.assign_rider(session, order_id, "rider1")
    with pytest.raises(StaleOrder):
        await orders_repo_sql.assign_rider(session, order_id, "rider2")
    assert (await orders_repo_sql.get_order(session, order_id)).rider_id == "rider1"


@pytest.mark.anyio
async def test_update_location(session):
    order = await orders_repo_sql.create_order(session, _draft())
    before = order.updated_at
    updated = await orders_repo_sql.update_location(session, order.id, 8.23, 124.25)
    assert (updated.rider_lat, updated.rider_lng) == (8.23, 124.25)
    assert updated.status == "PENDING"
    assert updated.updated_at > before
