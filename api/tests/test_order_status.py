import pathlib
import sys
from itertools import product

import pytest
from hypothesis import given
from hypothesis import strategies as st

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from api.app.domain import (  # noqa: E402
    ACTORS,
    TERMINAL,
    TRANSITIONS,
    OrderStatus,
    Role,
    assignable_statuses,
    can_transition,
    claimable_statuses,
    may_perform,
)

S = OrderStatus

VALID = {
    (S.PENDING, S.ACCEPTED),
    (S.PENDING, S.CANCELLED),
    (S.ACCEPTED, S.PREPARING),
    (S.ACCEPTED, S.PICKED_UP),
    (S.PREPARING, S.READY_FOR_PICKUP),
    (S.READY_FOR_PICKUP, S.PICKED_UP),
    (S.PICKED_UP, S.DELIVERING),
    (S.DELIVERING, S.DELIVERED),
}


@pytest.mark.parametrize("src,dst", list(product(S, S)))
def test_transition_table_is_exactly_the_documented_graph(src, dst):
    assert can_transition(src, dst) is ((src, dst) in VALID)


def test_every_transition_has_an_actor():
    assert set(ACTORS) == VALID


def test_accepted_is_not_reachable_twice():
    assert not can_transition(S.ACCEPTED, S.ACCEPTED)


def test_terminal_states():
    assert TERMINAL == {S.DELIVERED, S.CANCELLED}
    for status in TERMINAL:
        assert TRANSITIONS[status] == []


@given(st.sampled_from(list(S)), st.sampled_from(list(S)))
def test_admin_may_perform_any_reachable_transition(src, dst):
    assert may_perform(Role.ADMIN, src, dst) is can_transition(src, dst)


@given(st.sampled_from(list(S)), st.sampled_from(list(S)))
def test_customers_never_move_orders(src, dst):
    assert not may_perform(Role.CUSTOMER, src, dst)


def test_kitchen_and_rider_split():
    assert may_perform(Role.MERCHANT, S.PENDING, S.ACCEPTED)
    assert not may_perform(Role.RIDER, S.PENDING, S.ACCEPTED)
    assert may_perform(Role.RIDER, S.READY_FOR_PICKUP, S.PICKED_UP)
    assert not may_perform(Role.MERCHANT, S.DELIVERING, S.DELIVERED)


def test_claimable_statuses():
    assert set(claimable_statuses()) == {S.PENDING, S.READY_FOR_PICKUP}
    assert claimable_statuses(include_pending=False) == (S.READY_FOR_PICKUP,)


def test_assignable_statuses_extend_the_pool():
    assert set(assignable_statuses()) == {
        S.PENDING,
        S.ACCEPTED,
        S.PREPARING,
        S.READY_FOR_PICKUP,
    }
    assert S.PENDING not in assignable_statuses(include_pending=False)
    for status in (S.PICKED_UP, S.DELIVERING) + tuple(TERMINAL):
        assert status not in assignable_statuses()
