from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from app.api.notifications.models.model_order_notification import NotificationStatus, OrderNotificationModel


class OrderNotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(self, **data) -> OrderNotificationModel:
        obj = OrderNotificationModel(status=NotificationStatus.PENDING, attempts=0, **data)
        self.db.add(obj)
        self.db.flush()
        return obj

    def due(self, now: datetime, limit: int) -> List[OrderNotificationModel]:
        return (
            self.db.query(OrderNotificationModel)
            .filter(OrderNotificationModel.status == NotificationStatus.PENDING)
            .filter(OrderNotificationModel.scheduled_for <= now)
            .order_by(OrderNotificationModel.scheduled_for, OrderNotificationModel.id)
            .limit(limit)
            .all()
        )

    def for_order(self, order_id: int) -> List[OrderNotificationModel]:
        return (
            self.db.query(OrderNotificationModel)
            .filter(OrderNotificationModel.order_id == order_id)
            .order_by(OrderNotificationModel.id)
            .all()
        )
