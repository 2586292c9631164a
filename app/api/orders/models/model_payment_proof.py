from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class PaymentProofModel(Base):
    __tablename__ = "payment_proofs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    order = relationship("OrderModel", back_populates="payment_proofs")

    image_url = Column(String(500), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
