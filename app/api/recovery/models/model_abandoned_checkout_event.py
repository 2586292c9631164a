import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class RecoveryEventType(str, enum.Enum):
    RECOVERY_STARTED = "recovery_started"
    REMINDER_SENT = "reminder_sent"
    REMINDER_FAILED = "reminder_failed"
    LINK_CLICKED = "link_clicked"
    CHECKOUT_COMPLETED = "checkout_completed"


class AbandonedCheckoutEventModel(Base):
    __tablename__ = "abandoned_checkout_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    abandoned_checkout_id = Column(
        Integer, ForeignKey("abandoned_checkouts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    checkout = relationship("AbandonedCheckoutModel", back_populates="events")

    event_type = Column(String(40), nullable=False)
    # "metadata" is reserved on declarative models
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
