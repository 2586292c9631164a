import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum as SAEnum
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class ReminderStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class AbandonedCheckoutReminderModel(Base):
    """Outbox row: one reminder to send on one channel at `scheduled_for`."""
    __tablename__ = "abandoned_checkout_reminders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    abandoned_checkout_id = Column(
        Integer, ForeignKey("abandoned_checkouts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    checkout = relationship("AbandonedCheckoutModel", back_populates="reminders")

    scheduled_for = Column(DateTime(timezone=True), nullable=False, index=True)
    channel = Column(String(10), nullable=False)
    status = Column(
        SAEnum(ReminderStatus, name="reminder_status_enum", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ReminderStatus.PENDING,
        index=True,
    )
    attempts = Column(Integer, nullable=False, default=0)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
