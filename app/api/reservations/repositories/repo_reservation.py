from datetime import date, time
from typing import List, Optional

from sqlalchemy.orm import Session

from app.api.reservations.models.model_reservation import (
    ACTIVE_RESERVATION_STATUSES,
    ReservationModel,
    ReservationStatus,
)


class ReservationRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_hash(self, idempotency_hash: str) -> Optional[ReservationModel]:
        return self.db.query(ReservationModel).filter(ReservationModel.idempotency_hash == idempotency_hash).first()

    def get_by_code(self, code: str) -> Optional[ReservationModel]:
        return self.db.query(ReservationModel).filter(ReservationModel.reservation_code == code).first()

    def code_exists(self, code: str) -> bool:
        return self.db.query(ReservationModel.id).filter(ReservationModel.reservation_code == code).first() is not None

    def active_in_window(self, day: date, start: time, end: time) -> List[ReservationModel]:
        """Seat-holding reservations starting in [start, end). Rows are locked where the backend supports it."""
        return (
            self.db.query(ReservationModel)
            .filter(
                ReservationModel.reservation_date == day,
                ReservationModel.reservation_time >= start,
                ReservationModel.reservation_time < end,
                ReservationModel.status.in_(ACTIVE_RESERVATION_STATUSES),
            )
            .with_for_update()
            .all()
        )

    def list_for_date(self, day: date) -> List[ReservationModel]:
        return (
            self.db.query(ReservationModel)
            .filter(ReservationModel.reservation_date == day)
            .order_by(ReservationModel.reservation_time)
            .all()
        )

    def get_by_id(self, reservation_id: int) -> Optional[ReservationModel]:
        return self.db.query(ReservationModel).filter(ReservationModel.id == reservation_id).first()

    def confirmed_up_to(self, day: date) -> List[ReservationModel]:
        return (
            self.db.query(ReservationModel)
            .filter(
                ReservationModel.status == ReservationStatus.CONFIRMED,
                ReservationModel.reservation_date <= day,
            )
            .order_by(ReservationModel.reservation_date, ReservationModel.reservation_time)
            .all()
        )

    def create(self, **data) -> ReservationModel:
        obj = ReservationModel(**data)
        self.db.add(obj)
        self.db.flush()
        return obj
