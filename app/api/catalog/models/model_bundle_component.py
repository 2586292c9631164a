from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from app.database.db_connection import Base


class BundleComponentModel(Base):
    __tablename__ = "bundle_components"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bundle_product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    component_product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)

    total_units = Column(Integer, nullable=True)
    units_per_flavor = Column(Integer, nullable=True)
    has_flavor_selection = Column(Boolean, nullable=False, default=False)
    flavor_category = Column(String(60), nullable=False, default="wings")
    sort_order = Column(Integer, nullable=False, default=0)

    bundle = relationship("ProductModel", foreign_keys=[bundle_product_id], back_populates="bundle_components")
    component = relationship("ProductModel", foreign_keys=[component_product_id])
