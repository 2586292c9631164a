import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Text, JSON, Enum as SAEnum
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class AbandonedCheckoutStatus(str, enum.Enum):
    ABANDONED = "abandoned"
    RECOVERING = "recovering"
    RECOVERED = "recovered"
    EXPIRED = "expired"


class AbandonedCheckoutModel(Base):
    """Checkout form left before submitting, kept to send recovery reminders."""
    __tablename__ = "abandoned_checkouts"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Contact
    customer_name = Column(String(150), nullable=True)
    customer_phone = Column(String(20), nullable=True, index=True)
    customer_email = Column(String(150), nullable=True)

    # Cart as the client held it
    cart_items = Column(JSON, nullable=False, default=list)
    cart_total = Column(Numeric(12, 2), nullable=False, default=0)
    order_type = Column(String(20), nullable=True)
    delivery_address = Column(Text, nullable=True)
    delivery_city = Column(String(100), nullable=True)
    delivery_barangay = Column(String(100), nullable=True)
    last_section = Column(String(50), nullable=True)
    session_id = Column(String(64), nullable=True, index=True)
    device_info = Column(JSON, nullable=True)

    status = Column(
        SAEnum(AbandonedCheckoutStatus, name="abandoned_checkout_status_enum", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AbandonedCheckoutStatus.ABANDONED,
        index=True,
    )
    recovery_started_at = Column(DateTime(timezone=True), nullable=True)
    next_reminder_scheduled_at = Column(DateTime(timezone=True), nullable=True)
    last_reminder_sent_at = Column(DateTime(timezone=True), nullable=True)
    sms_attempts = Column(Integer, nullable=False, default=0)
    email_attempts = Column(Integer, nullable=False, default=0)
    recovered_order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)

    reminders = relationship("AbandonedCheckoutReminderModel", back_populates="checkout",
                             cascade="all, delete-orphan", order_by="AbandonedCheckoutReminderModel.scheduled_for")
    events = relationship("AbandonedCheckoutEventModel", back_populates="checkout",
                          cascade="all, delete-orphan", order_by="AbandonedCheckoutEventModel.id")

    def __repr__(self):
        return f"<AbandonedCheckout(id={self.id}, status={self.status}, phone='{self.customer_phone}')>"
