from datetime import date

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.api.reservations.schemas.schema_reservation import (
    CreateReservationRequest,
    ReservationCreatedResponse,
    ReservationResponse,
    ReservationSlotsResponse,
)
from app.api.reservations.services.service_reservation import ReservationService
from app.database.db_connection import get_db

router = APIRouter(
    prefix="/api/reservations",
    tags=["Client - Reservations"],
)


@router.get("/slots", response_model=ReservationSlotsResponse)
def list_slots(
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Time slots for a day with the seats still free in each."""
    return ReservationService(db).available_slots(day)


@router.post(
    "",
    response_model=ReservationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a table",
    description="A repeated submit returns the first booking with `is_duplicate` set. 409 when the slot is full.",
)
def create_reservation(req: CreateReservationRequest, db: Session = Depends(get_db)):
    return ReservationService(db).create_reservation(req)


@router.get("/{code}", response_model=ReservationResponse)
def get_reservation(
    code: str = Path(..., min_length=8, max_length=20),
    db: Session = Depends(get_db),
):
    return ReservationService(db).get_by_code(code)
