import enum

from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Text, Enum as SAEnum, func
from sqlalchemy.orm import relationship

from app.database.db_connection import Base


class ProductType(str, enum.Enum):
    SIMPLE = "simple"
    FLAVORED = "flavored"
    BUNDLE = "bundle"


class ProductModel(Base):
    """Menu item. Prices are read at checkout, never taken from the client."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    slug = Column(String(170), nullable=True, unique=True, index=True)
    sku = Column(String(50), nullable=True, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(60), nullable=True, index=True)
    image_url = Column(String(500), nullable=True)

    price = Column(Numeric(10, 2), nullable=False, default=0)
    product_type = Column(
        SAEnum(ProductType, name="product_type_enum", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ProductType.SIMPLE,
    )
    # e.g. a rib slab that takes exactly one sauce
    single_unit = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    flavor_rule = relationship(
        "ProductFlavorRuleModel",
        back_populates="product",
        uselist=False,
        cascade="all, delete-orphan",
    )
    bundle_components = relationship(
        "BundleComponentModel",
        foreign_keys="BundleComponentModel.bundle_product_id",
        back_populates="bundle",
        cascade="all, delete-orphan",
        order_by="BundleComponentModel.sort_order",
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', type={self.product_type})>"
