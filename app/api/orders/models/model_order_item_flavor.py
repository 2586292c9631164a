from sqlalchemy import Column, Integer, String, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from app.database.db_connection import Base


class OrderItemFlavorModel(Base):
    __tablename__ = "order_item_flavors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id", ondelete="CASCADE"), nullable=False, index=True)
    order_item = relationship("OrderItemModel", back_populates="flavors")

    flavor_id = Column(Integer, ForeignKey("flavors.id", ondelete="SET NULL"), nullable=True)
    flavor_name = Column(String(100), nullable=False)
    # pieces
    quantity = Column(Integer, nullable=False)
    surcharge_applied = Column(Numeric(10, 2), nullable=False, default=0)
