from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from app.database.db_connection import Base


class ProductFlavorRuleModel(Base):
    """
    Flavor rule of a flavored product.

    Zero or NULL counts fall back to the resolver defaults; surcharge_policy
    NULL means the deployment default.
    """
    __tablename__ = "product_flavor_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    total_units = Column(Integer, nullable=False, default=6)
    units_per_flavor = Column(Integer, nullable=False, default=3)
    max_flavors = Column(Integer, nullable=True)
    min_flavors = Column(Integer, nullable=True)
    allow_special_flavors = Column(Boolean, nullable=False, default=True)
    surcharge_policy = Column(String(30), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    product = relationship("ProductModel", back_populates="flavor_rule")
