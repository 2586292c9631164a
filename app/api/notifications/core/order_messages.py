"""
Order notification types and their fixed texts.

`order_received` goes to the customer by SMS and `new_order` by email (to the
customer and to staff) when an order is placed. Staff status changes map to
one SMS type each; statuses without an entry send nothing.
"""

import enum
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from app.api.orders.core.order_status import OrderStatus

BRAND = "American Ribs & Wings"


class NotificationType(str, enum.Enum):
    ORDER_RECEIVED = "order_received"
    NEW_ORDER = "new_order"
    PAYMENT_VERIFIED = "payment_verified"
    ORDER_REJECTED = "order_rejected"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_PREPARING = "order_preparing"
    ORDER_READY_FOR_PICKUP = "order_ready_for_pickup"
    ORDER_OUT_FOR_DELIVERY = "order_out_for_delivery"
    ORDER_DELIVERED = "order_delivered"
    ORDER_COMPLETED = "order_completed"


STATUS_NOTIFICATIONS = {
    OrderStatus.APPROVED: NotificationType.PAYMENT_VERIFIED,
    OrderStatus.REJECTED: NotificationType.ORDER_REJECTED,
    OrderStatus.CANCELLED: NotificationType.ORDER_CANCELLED,
    OrderStatus.PREPARING: NotificationType.ORDER_PREPARING,
    OrderStatus.READY_FOR_PICKUP: NotificationType.ORDER_READY_FOR_PICKUP,
    OrderStatus.IN_TRANSIT: NotificationType.ORDER_OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED: NotificationType.ORDER_DELIVERED,
    OrderStatus.COMPLETED: NotificationType.ORDER_COMPLETED,
}


def notification_for_status(new_status: OrderStatus | str) -> Optional[NotificationType]:
    return STATUS_NOTIFICATIONS.get(OrderStatus(new_status))


def _sms_text(kind: NotificationType, number: str) -> str:
    texts = {
        NotificationType.ORDER_RECEIVED: f"We received your order #{number}. We are preparing your food now. Thank you!",
        NotificationType.PAYMENT_VERIFIED: f"Payment verified for order #{number}. Your order is now confirmed and being prepared!",
        NotificationType.ORDER_REJECTED: f"Your order #{number} could not be processed. Please contact us for assistance.",
        NotificationType.ORDER_CANCELLED: f"Your order #{number} has been cancelled. If you have questions, please contact us.",
        NotificationType.ORDER_PREPARING: f"Great news! Your order #{number} is now being prepared. We'll update you when it's ready!",
        NotificationType.ORDER_READY_FOR_PICKUP: f"Your order #{number} is ready for pickup! Please proceed to our store in Floridablanca.",
        NotificationType.ORDER_OUT_FOR_DELIVERY: f"Your order #{number} is out for delivery! Your rider is on the way.",
        NotificationType.ORDER_DELIVERED: f"Your order #{number} has been delivered. Thank you for ordering!",
        NotificationType.ORDER_COMPLETED: f"Thank you for your order #{number}! We hope you enjoyed your meal. See you again soon!",
    }
    return f"{BRAND}: {texts.get(kind, f'Update for order #{number}')}"


def render(kind: NotificationType | str, payload: Mapping[str, Any]) -> Tuple[str, str]:
    """(subject, body) for one outbox row."""
    kind = NotificationType(kind)
    number = payload.get("order_number") or ""
    total = Decimal(str(payload.get("total_amount") or 0))

    if kind != NotificationType.NEW_ORDER:
        return f"Order #{number} update", _sms_text(kind, number)

    if payload.get("audience") == "staff":
        lines = [
            f"New {payload.get('order_type', 'order')} order #{number}",
            f"Customer: {payload.get('customer_name') or '-'} ({payload.get('customer_phone') or '-'})",
            f"Payment: {payload.get('payment_method') or '-'}",
            f"Total: PHP {total:,.2f}",
        ]
        if payload.get("delivery_address"):
            lines.append(f"Deliver to: {payload['delivery_address']}")
        return f"New Order #{number} - PHP {total:,.2f}", "\n".join(lines)

    name = (payload.get("customer_name") or "").strip() or "there"
    body = (
        f"Hi {name},\n\n"
        f"Thanks for ordering from {BRAND}! We received order #{number} "
        f"with a total of PHP {total:,.2f}. We'll keep you posted as it moves along."
    )
    return f"Order #{number} received", body
