import enum

from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Numeric, Text, Enum as SAEnum
from sqlalchemy.orm import relationship

from app.api.orders.core.order_status import OrderStatus
from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class OrderType(str, enum.Enum):
    DINE_IN = "dine_in"
    PICKUP = "pickup"
    DELIVERY = "delivery"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    GCASH = "gcash"
    BANK = "bank"

    @property
    def requires_proof(self) -> bool:
        return self in (PaymentMethod.GCASH, PaymentMethod.BANK)


def _enum_column(enum_cls, name):
    return SAEnum(enum_cls, name=name, native_enum=False, values_callable=lambda e: [m.value for m in e])


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(30), nullable=False, unique=True, index=True)

    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    customer = relationship("CustomerModel", back_populates="orders", lazy="select")

    order_type = Column(_enum_column(OrderType, "order_type_enum"), nullable=False)
    status = Column(_enum_column(OrderStatus, "order_status_enum"), nullable=False, default=OrderStatus.PENDING)
    payment_method = Column(_enum_column(PaymentMethod, "payment_method_enum"), nullable=False)

    # Values
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    delivery_fee = Column(Numeric(10, 2), nullable=True)
    delivery_distance_km = Column(Numeric(6, 1), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)

    # Fulfilment
    delivery_address = Column(Text, nullable=True)
    pickup_date = Column(Date, nullable=True)
    pickup_time = Column(String(20), nullable=True)
    notes = Column(String(500), nullable=True)
    internal_notes = Column(Text, nullable=True)

    status_changed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)

    items = relationship("OrderItemModel", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItemModel.id")
    payment_proofs = relationship("PaymentProofModel", back_populates="order", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Order(id={self.id}, number='{self.order_number}', status={self.status})>"
