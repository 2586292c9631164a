from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.api.reservations.models.model_reservation import ReservationStatus


class CreateReservationRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    phone: str = Field(..., max_length=20)
    email: Optional[str] = Field(None, max_length=150)
    pax: int = Field(..., ge=1, le=20, description="Party size")
    reservation_date: date
    reservation_time: str = Field(..., description="Slot label, e.g. '6:30 PM'")
    notes: Optional[str] = Field(None, max_length=500)
    preorder_items: Optional[List[Dict[str, Any]]] = None
    # sent by the form so a double submit books once
    idempotency_key: Optional[str] = Field(None, max_length=100)

    @field_validator("name", "phone")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class ReservationCreatedResponse(BaseModel):
    reservation_id: int
    reservation_code: str
    is_duplicate: bool


class ReservationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reservation_code: str
    name: str
    phone: str
    email: Optional[str] = None
    pax: int
    reservation_date: date
    reservation_time: time
    notes: Optional[str] = None
    status: ReservationStatus
    status_changed_at: Optional[datetime] = None


class TimeSlotResponse(BaseModel):
    time: str
    remaining: int
    available: bool


class ReservationSlotsResponse(BaseModel):
    date: date
    slot_duration_minutes: int
    max_pax_per_slot: int
    slots: List[TimeSlotResponse]


class UpdateReservationStatusRequest(BaseModel):
    status: ReservationStatus


class ProcessNoShowsResponse(BaseModel):
    processed: int
    reservation_codes: List[str]
