from typing import Callable, Optional

from fastapi import HTTPException, status

from sqlalchemy.orm import Session

from app.api.notifications.services.service_order_notification import OrderNotificationService
from app.api.orders.core.order_status import OrderStatus, can_transition
from app.api.orders.models.model_order import OrderModel
from app.api.orders.repositories.repo_order import OrderRepository
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger


class OrderStatusService:
    """Staff-driven status changes, checked against ALLOWED_TRANSITIONS."""

    def __init__(self, db: Session, clock: Callable = now_trimmed):
        self.db = db
        self.repo = OrderRepository(db)
        self.clock = clock
        self.notifications = OrderNotificationService(db, clock=clock)

    def get(self, order_id: int) -> OrderModel:
        order = self.repo.get_by_id(order_id)
        if not order:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Order not found")
        return order

    def update_status(
        self,
        order_id: int,
        new_status: OrderStatus,
        *,
        internal_notes: Optional[str] = None,
        changed_by: Optional[str] = None,
    ) -> OrderModel:
        order = self.get(order_id)
        current = OrderStatus(order.status)

        # same status is a no-op, not an error
        if current == new_status:
            return order
        if not can_transition(current, new_status):
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                f"Cannot change order status from {current.value} to {new_status.value}",
            )

        order.status = new_status
        order.status_changed_at = self.clock()
        if internal_notes:
            order.internal_notes = internal_notes
        self.db.flush()
        self.notifications.status_changed(order, new_status)

        logger.info(
            f"[OrderStatus] Order {order.order_number}: {current.value} -> {new_status.value}"
            f" by={changed_by or 'unknown'}"
        )
        return order
