from sqlalchemy import Column, Integer, String, DateTime, Date, Time, ForeignKey, Text, JSON, Enum as SAEnum, Index
from sqlalchemy.orm import relationship

from app.api.reservations.core.reservation_status import ReservationStatus
from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


# statuses that hold seats in a slot
ACTIVE_RESERVATION_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


class ReservationModel(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("idx_reservations_date_time", "reservation_date", "reservation_time"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_code = Column(String(20), nullable=False, unique=True)

    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    customer = relationship("CustomerModel", lazy="select")

    name = Column(String(150), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(150), nullable=True)
    pax = Column(Integer, nullable=False)
    reservation_date = Column(Date, nullable=False)
    reservation_time = Column(Time, nullable=False)
    notes = Column(Text, nullable=True)
    preorder_items = Column(JSON, nullable=True)

    status = Column(
        SAEnum(ReservationStatus, name="reservation_status_enum", native_enum=False,
               values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ReservationStatus.PENDING,
    )
    status_changed_at = Column(DateTime(timezone=True), nullable=True)
    status_changed_by = Column(String(100), nullable=True)
    idempotency_hash = Column(String(64), nullable=True, unique=True)

    created_at = Column(DateTime(timezone=True), default=now_trimmed, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_trimmed, onupdate=now_trimmed, nullable=False)

    def __repr__(self):
        return f"<Reservation(code='{self.reservation_code}', date={self.reservation_date}, pax={self.pax})>"
