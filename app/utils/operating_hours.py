from __future__ import annotations

from datetime import datetime, time
from typing import Any, Optional
from zoneinfo import ZoneInfo


def parse_hhmm(value: Any) -> Optional[time]:
    """
    Accepts 'HH:MM' or 'HH:MM:SS' (00-23 / 00-59). Returns None when invalid.
    """
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        return None
    h, m = int(parts[0]), int(parts[1])
    if h < 0 or h > 23 or m < 0 or m > 59:
        return None
    return time(hour=h, minute=m)


def to_local(now: datetime, tz_name: str | None) -> datetime:
    """
    Converts to the store timezone. Naive datetimes are taken as UTC.
    """
    if not tz_name:
        return now
    tz_local = ZoneInfo(tz_name)
    if now.tzinfo is None:
        return now.replace(tzinfo=ZoneInfo("UTC")).astimezone(tz_local)
    return now.astimezone(tz_local)


def format_time_12h(value: time) -> str:
    period = "PM" if value.hour >= 12 else "AM"
    display_hour = value.hour % 12 or 12
    return f"{display_hour}:{value.minute:02d} {period}"


def within_hours(local_dt: datetime, start_hour: int, end_hour: int) -> bool:
    """True when start_hour <= hour < end_hour."""
    return start_hour <= local_dt.hour < end_hour


def store_is_open(
    *,
    store_hours: Any,
    timezone: str | None = "Asia/Manila",
    now: datetime | None = None,
) -> bool:
    """
    Evaluates the `store_hours` setting ({"open": "HH:MM", "close": "HH:MM"}).

    Open when open <= now < close. A missing or malformed setting counts as open.
    """
    if not isinstance(store_hours, dict):
        return True
    start = parse_hhmm(store_hours.get("open"))
    end = parse_hhmm(store_hours.get("close"))
    if start is None or end is None:
        return True

    local_dt = to_local(now or datetime.now(ZoneInfo("UTC")), store_hours.get("timezone") or timezone)
    current = (local_dt.hour, local_dt.minute)
    return (start.hour, start.minute) <= current < (end.hour, end.minute)
