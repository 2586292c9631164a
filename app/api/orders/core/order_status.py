"""
Order lifecycle.

Checkout only ever produces `pending` (or `for_verification` when a payment
proof came with the order). Staff move the order forward from there.
"""

import enum
from typing import Dict, FrozenSet


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    FOR_VERIFICATION = "for_verification"
    APPROVED = "approved"
    REJECTED = "rejected"
    PREPARING = "preparing"
    READY_FOR_PICKUP = "ready_for_pickup"
    WAITING_FOR_RIDER = "waiting_for_rider"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.FOR_VERIFICATION, OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CANCELLED,
    }),
    OrderStatus.FOR_VERIFICATION: frozenset({
        OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CANCELLED,
    }),
    OrderStatus.APPROVED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({
        OrderStatus.READY_FOR_PICKUP, OrderStatus.WAITING_FOR_RIDER, OrderStatus.CANCELLED,
    }),
    OrderStatus.READY_FOR_PICKUP: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.WAITING_FOR_RIDER: frozenset({OrderStatus.PICKED_UP, OrderStatus.CANCELLED}),
    OrderStatus.PICKED_UP: frozenset({OrderStatus.IN_TRANSIT}),
    OrderStatus.IN_TRANSIT: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


def initial_status(has_payment_proof: bool) -> OrderStatus:
    return OrderStatus.FOR_VERIFICATION if has_payment_proof else OrderStatus.PENDING


def can_transition(current: OrderStatus | str, target: OrderStatus | str) -> bool:
    current, target = OrderStatus(current), OrderStatus(target)
    return target in ALLOWED_TRANSITIONS[current]
