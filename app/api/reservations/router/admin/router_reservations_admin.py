from datetime import date
from typing import List

from fastapi import APIRouter, Body, Depends, Path, Query
from sqlalchemy.orm import Session

from app.api.reservations.schemas.schema_reservation import (
    ProcessNoShowsResponse,
    ReservationResponse,
    UpdateReservationStatusRequest,
)
from app.api.reservations.services.service_reservation import ReservationService
from app.core.admin_dependencies import require_admin
from app.database.db_connection import get_db

router = APIRouter(
    prefix="/api/reservations/admin",
    tags=["Admin - Reservations"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[ReservationResponse])
def list_reservations(
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    return ReservationService(db).list_for_date(day)


@router.patch(
    "/{reservation_id:int}/status",
    response_model=ReservationResponse,
    summary="Update reservation status",
    description="pending -> confirmed/cancelled, confirmed -> completed/cancelled/no_show. Anything else returns 409.",
)
def update_reservation_status(
    reservation_id: int = Path(..., gt=0),
    body: UpdateReservationStatusRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_admin),
):
    return ReservationService(db).update_status(reservation_id, body.status, changed_by=current_user.get("sub"))


@router.post(
    "/no-shows/process",
    response_model=ProcessNoShowsResponse,
    summary="Close missed reservations",
    description="Marks confirmed reservations as no_show once the grace period after their time has passed.",
)
def process_no_shows(db: Session = Depends(get_db)):
    return ReservationService(db).process_no_shows()
