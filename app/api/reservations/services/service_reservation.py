import hashlib
import re
import secrets
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.catalog.repositories.repo_setting import SettingRepository
from app.api.orders.repositories.repo_customer import CustomerRepository
from app.api.reservations.core.reservation_status import DEFAULT_NO_SHOW_GRACE_MINUTES, can_transition, is_past_grace
from app.api.reservations.core.slots import generate_time_slots, parse_slot_label, slot_end
from app.api.reservations.models.model_reservation import ReservationModel, ReservationStatus
from app.api.reservations.repositories.repo_reservation import ReservationRepository
from app.api.reservations.schemas.schema_reservation import (
    CreateReservationRequest,
    ProcessNoShowsResponse,
    ReservationCreatedResponse,
    ReservationSlotsResponse,
    TimeSlotResponse,
)
from app.config.settings import STORE_TIMEZONE
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger
from app.utils.operating_hours import parse_hhmm, to_local
from app.utils.phone import is_valid_phone, normalize_phone

RESERVATION_SETTINGS_KEY = "reservation_settings"
DEFAULT_RESERVATION_SETTINGS = {
    "store_open": "11:00",
    "store_close": "21:00",
    "slot_duration_minutes": 30,
    "max_pax_per_slot": 40,
    "booking_window_days": 30,
    "no_show_grace_minutes": DEFAULT_NO_SHOW_GRACE_MINUTES,
}
FULLY_BOOKED = "This time slot is fully booked. Please choose another time."
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_CODE_ATTEMPTS = 10


class ReservationService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = now_trimmed):
        self.db = db
        self.repo = ReservationRepository(db)
        self.customers = CustomerRepository(db)
        self.settings_repo = SettingRepository(db)
        self.clock = clock

    def settings(self) -> dict:
        stored = self.settings_repo.get_value(RESERVATION_SETTINGS_KEY) or {}
        merged = {**DEFAULT_RESERVATION_SETTINGS, **(stored if isinstance(stored, dict) else {})}
        merged["slot_duration_minutes"] = int(merged["slot_duration_minutes"]) or 30
        merged["max_pax_per_slot"] = int(merged["max_pax_per_slot"])
        merged["no_show_grace_minutes"] = int(merged["no_show_grace_minutes"] or DEFAULT_NO_SHOW_GRACE_MINUTES)
        return merged

    def _hours(self, cfg: dict):
        open_at = parse_hhmm(cfg.get("store_open")) or time(11, 0)
        close_at = parse_hhmm(cfg.get("store_close")) or time(21, 0)
        return open_at, close_at

    def _booked_pax(self, day: date, start: time, duration: int) -> int:
        return sum(r.pax for r in self.repo.active_in_window(day, start, slot_end(start, duration)))

    # ── slots ──────────────────────────────────────────────

    def available_slots(self, day: date) -> ReservationSlotsResponse:
        cfg = self.settings()
        open_at, close_at = self._hours(cfg)
        duration, capacity = cfg["slot_duration_minutes"], cfg["max_pax_per_slot"]

        slots = []
        for label in generate_time_slots(open_at, close_at, duration):
            remaining = max(capacity - self._booked_pax(day, parse_slot_label(label), duration), 0)
            slots.append(TimeSlotResponse(time=label, remaining=remaining, available=remaining > 0))
        return ReservationSlotsResponse(
            date=day,
            slot_duration_minutes=duration,
            max_pax_per_slot=capacity,
            slots=slots,
        )

    # ── booking ────────────────────────────────────────────

    @staticmethod
    def idempotency_hash(req: CreateReservationRequest, phone: str, at: time) -> str:
        raw = "|".join([
            phone,
            req.reservation_date.isoformat(),
            at.strftime("%H:%M"),
            str(req.pax),
            req.name.lower(),
            req.idempotency_key or "",
        ])
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def _new_code(self) -> str:
        for _ in range(_CODE_ATTEMPTS):
            code = f"ARW-RSV-{secrets.randbelow(10000):04d}"
            if not self.repo.code_exists(code):
                return code
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Could not create reservation. Please try again.")

    def _validate(self, req: CreateReservationRequest, cfg: dict) -> time:
        if not req.name:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please enter your name")
        if not is_valid_phone(req.phone):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please enter a valid Philippine phone number")
        if req.email and req.email.strip() and not _EMAIL.match(req.email.strip()):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please enter a valid email address")

        today = self.clock().date()
        if not today <= req.reservation_date <= today + timedelta(days=int(cfg["booking_window_days"])):
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                f"Please select a date within the next {cfg['booking_window_days']} days",
            )

        at = parse_slot_label(req.reservation_time)
        open_at, close_at = self._hours(cfg)
        if at is None or not open_at <= at < close_at:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please select a valid time")
        return at

    def create_reservation(self, req: CreateReservationRequest) -> ReservationCreatedResponse:
        cfg = self.settings()
        at = self._validate(req, cfg)
        phone = normalize_phone(req.phone)

        digest = self.idempotency_hash(req, phone, at)
        existing = self.repo.get_by_hash(digest)
        if existing:
            logger.info(f"[Reservation] Duplicate submit for {existing.reservation_code}")
            return ReservationCreatedResponse(
                reservation_id=existing.id,
                reservation_code=existing.reservation_code,
                is_duplicate=True,
            )

        booked = self._booked_pax(req.reservation_date, at, cfg["slot_duration_minutes"])
        if booked + req.pax > cfg["max_pax_per_slot"]:
            raise HTTPException(status.HTTP_409_CONFLICT, FULLY_BOOKED)

        customer = self.customers.find_or_create(name=req.name, phone=phone, email=req.email)
        reservation: ReservationModel = self.repo.create(
            reservation_code=self._new_code(),
            customer_id=customer.id,
            name=req.name,
            phone=phone,
            email=(req.email or "").strip() or None,
            pax=req.pax,
            reservation_date=req.reservation_date,
            reservation_time=at,
            notes=(req.notes or "").strip() or None,
            preorder_items=req.preorder_items,
            status=ReservationStatus.PENDING,
            idempotency_hash=digest,
        )
        logger.info(
            f"[Reservation] {reservation.reservation_code} created - date={req.reservation_date} "
            f"time={at:%H:%M} pax={req.pax}"
        )
        return ReservationCreatedResponse(
            reservation_id=reservation.id,
            reservation_code=reservation.reservation_code,
            is_duplicate=False,
        )

    def get_by_code(self, code: str) -> ReservationModel:
        reservation: Optional[ReservationModel] = self.repo.get_by_code(code.strip().upper())
        if not reservation:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Reservation not found")
        return reservation

    # ── staff ──────────────────────────────────────────────

    def list_for_date(self, day: date) -> List[ReservationModel]:
        return self.repo.list_for_date(day)

    def update_status(
        self,
        reservation_id: int,
        new_status: ReservationStatus,
        changed_by: Optional[str] = None,
    ) -> ReservationModel:
        reservation = self.repo.get_by_id(reservation_id)
        if not reservation:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Reservation not found")

        current = ReservationStatus(reservation.status)
        if current == new_status:
            return reservation
        if not can_transition(current, new_status):
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                f"Cannot change reservation status from {current.value} to {new_status.value}",
            )

        reservation.status = new_status
        reservation.status_changed_at = self.clock()
        reservation.status_changed_by = changed_by
        self.db.flush()
        logger.info(
            f"[Reservation] {reservation.reservation_code}: {current.value} -> {new_status.value}"
            f" by={changed_by or 'unknown'}"
        )
        return reservation

    def process_no_shows(self, now: Optional[datetime] = None) -> ProcessNoShowsResponse:
        """Marks confirmed bookings as no_show once `no_show_grace_minutes` have passed since their time."""
        local_now = to_local(now or self.clock(), STORE_TIMEZONE)
        grace = self.settings()["no_show_grace_minutes"]

        codes = []
        for reservation in self.repo.confirmed_up_to(local_now.date()):
            if not is_past_grace(reservation.reservation_date, reservation.reservation_time, local_now, grace):
                continue
            reservation.status = ReservationStatus.NO_SHOW
            reservation.status_changed_at = local_now
            reservation.status_changed_by = "system_no_show_job"
            codes.append(reservation.reservation_code)
        self.db.flush()

        if codes:
            logger.info(f"[Reservation] {len(codes)} marked no_show: {', '.join(codes)}")
        return ProcessNoShowsResponse(processed=len(codes), reservation_codes=codes)
