"""
Reservation lifecycle.

New bookings are `pending`. Staff confirm or cancel them; a confirmed booking
ends as `completed`, `cancelled` or `no_show`. The no-show job only ever
touches confirmed bookings whose grace period has passed.
"""

import enum
from datetime import date, datetime, time, timedelta
from typing import Dict, FrozenSet


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


ALLOWED_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({
        ReservationStatus.COMPLETED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW,
    }),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
}

DEFAULT_NO_SHOW_GRACE_MINUTES = 30


def can_transition(current: ReservationStatus | str, target: ReservationStatus | str) -> bool:
    return ReservationStatus(target) in ALLOWED_TRANSITIONS[ReservationStatus(current)]


def is_past_grace(day: date, at: time, now: datetime, grace_minutes: int) -> bool:
    """`now` is store-local; the booking time is taken in the same zone."""
    starts = datetime.combine(day, at, tzinfo=now.tzinfo)
    return now > starts + timedelta(minutes=grace_minutes)
