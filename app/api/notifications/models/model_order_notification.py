import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON, Enum as SAEnum
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class NotificationStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class OrderNotificationModel(Base):
    """Outbox row: one typed order notification for one recipient on one channel."""
    __tablename__ = "order_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    order = relationship("OrderModel", lazy="select")

    notification_type = Column(String(40), nullable=False)
    channel = Column(String(10), nullable=False)
    recipient = Column(String(150), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)

    status = Column(
        SAEnum(NotificationStatus, name="notification_status_enum", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=NotificationStatus.PENDING,
        index=True,
    )
    scheduled_for = Column(DateTime(timezone=True), nullable=False, index=True)
    attempts = Column(Integer, nullable=False, default=0)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    external_id = Column(String(100), nullable=True)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)

    def __repr__(self):
        return f"<OrderNotification(id={self.id}, type='{self.notification_type}', channel='{self.channel}')>"
