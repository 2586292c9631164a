import enum

from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Enum as SAEnum, func

from app.database.db_connection import Base


class FlavorType(str, enum.Enum):
    ALL_TIME = "all_time"
    SPECIAL = "special"


class FlavorModel(Base):
    __tablename__ = "flavors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    surcharge = Column(Numeric(10, 2), nullable=False, default=0)
    flavor_type = Column(
        SAEnum(FlavorType, name="flavor_type_enum", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=FlavorType.ALL_TIME,
    )
    flavor_category = Column(String(60), nullable=False, default="wings", index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # out of stock flavors stay listed but cannot be picked
    is_available = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Flavor(id={self.id}, name='{self.name}', surcharge={self.surcharge})>"
