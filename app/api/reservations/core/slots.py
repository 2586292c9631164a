from datetime import date, datetime, time, timedelta
from typing import List, Optional
import re

from app.utils.operating_hours import format_time_12h, parse_hhmm

_SLOT_LABEL = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*(AM|PM)\s*$", re.IGNORECASE)


def generate_time_slots(open_at: time, close_at: time, duration_minutes: int = 30) -> List[str]:
    """Slot labels ("11:00 AM", ...) from opening time up to, not including, closing time."""
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    start = open_at.hour * 60 + open_at.minute
    end = close_at.hour * 60 + close_at.minute
    return [
        format_time_12h(time(hour=m // 60, minute=m % 60))
        for m in range(start, end, duration_minutes)
    ]


def parse_slot_label(label: str) -> Optional[time]:
    """'1:30 PM' -> 13:30. Also takes 24h 'HH:MM'."""
    match = _SLOT_LABEL.match(label or "")
    if not match:
        return parse_hhmm(label)
    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hour <= 12 or minute > 59:
        return None
    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0
    return time(hour=hour, minute=minute)


def slot_end(start: time, duration_minutes: int) -> time:
    """End of the slot starting at `start`, capped at midnight."""
    end = datetime.combine(date.min, start) + timedelta(minutes=duration_minutes)
    if end.date() > date.min:
        return time.max
    return end.time()
