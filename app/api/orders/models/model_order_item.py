from sqlalchemy import Column, Integer, String, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from app.database.db_connection import Base


class OrderItemModel(Base):
    """Snapshot of one cart line at checkout: name, sku and prices are copied, not referenced."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    order = relationship("OrderModel", back_populates="items")

    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_name = Column(String(150), nullable=False)
    product_sku = Column(String(50), nullable=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    flavor_surcharge_total = Column(Numeric(10, 2), nullable=False, default=0)
    line_total = Column(Numeric(12, 2), nullable=False)

    flavors = relationship("OrderItemFlavorModel", back_populates="order_item", cascade="all, delete-orphan",
                           order_by="OrderItemFlavorModel.id")
