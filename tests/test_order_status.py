from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi import HTTPException

from app.api.cart.core.cart_store import CartSessionStore, InMemoryCartSnapshotBackend
from app.api.orders.core.order_status import (
    OrderStatus,
    TERMINAL_STATUSES,
    can_transition,
    initial_status,
)
from app.api.orders.schemas.schema_order import CheckoutRequest
from app.api.orders.services.service_checkout import CheckoutService
from app.api.orders.services.service_order_status import OrderStatusService

NOON = datetime(2026, 10, 17, 12, 0, tzinfo=ZoneInfo("Asia/Manila"))


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {OrderStatus.COMPLETED, OrderStatus.REJECTED, OrderStatus.CANCELLED}


def test_initial_status_depends_on_proof():
    assert initial_status(False) == OrderStatus.PENDING
    assert initial_status(True) == OrderStatus.FOR_VERIFICATION


@pytest.mark.parametrize(
    "current, target, allowed",
    [
        ("pending", "approved", True),
        ("for_verification", "rejected", True),
        ("preparing", "waiting_for_rider", True),
        ("waiting_for_rider", "picked_up", True),
        ("in_transit", "delivered", True),
        ("pending", "preparing", False),
        ("ready_for_pickup", "cancelled", False),
        ("completed", "pending", False),
        ("cancelled", "approved", False),
    ],
)
def test_can_transition(current, target, allowed):
    assert can_transition(current, target) is allowed


@pytest.fixture
def order_id(db, menu):
    service = CheckoutService(db, store=CartSessionStore(InMemoryCartSnapshotBackend()), clock=lambda: NOON)
    order = service.checkout(CheckoutRequest.model_validate({
        "items": [{"product_id": menu["rice"]}],
        "customer_name": "Ana",
        "customer_phone": "09171234567",
        "order_type": "pickup",
        "pickup_date": date(2026, 10, 18),
        "pickup_time": "6:00 PM",
    }))
    return order.id


def test_pickup_flow(db, order_id):
    service = OrderStatusService(db, clock=lambda: NOON)
    for target in (OrderStatus.APPROVED, OrderStatus.PREPARING, OrderStatus.READY_FOR_PICKUP, OrderStatus.COMPLETED):
        order = service.update_status(order_id, target, changed_by="staff-1")
        assert order.status == target
    assert order.status_changed_at is not None


def test_invalid_transition_conflicts(db, order_id):
    with pytest.raises(HTTPException) as exc:
        OrderStatusService(db).update_status(order_id, OrderStatus.DELIVERED)
    assert exc.value.status_code == 409
    assert exc.value.detail == "Cannot change order status from pending to delivered"


def test_same_status_is_a_no_op(db, order_id):
    order = OrderStatusService(db).update_status(order_id, OrderStatus.PENDING)
    assert order.status == OrderStatus.PENDING


def test_internal_notes_are_kept(db, order_id):
    order = OrderStatusService(db).update_status(order_id, OrderStatus.CANCELLED, internal_notes="customer called")
    assert order.internal_notes == "customer called"


def test_unknown_order(db):
    with pytest.raises(HTTPException) as exc:
        OrderStatusService(db).get(404)
    assert exc.value.status_code == 404
