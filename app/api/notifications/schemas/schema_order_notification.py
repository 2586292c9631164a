from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.api.notifications.models.model_order_notification import NotificationStatus


class OrderNotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    notification_type: str
    channel: str
    recipient: str
    status: NotificationStatus
    attempts: int
    scheduled_for: datetime
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None


class ProcessNotificationsResponse(BaseModel):
    processed: int = 0
    sent: int = 0
    retried: int = 0
    failed: int = 0
