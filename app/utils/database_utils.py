from datetime import datetime
from zoneinfo import ZoneInfo

from app.config.settings import STORE_TIMEZONE


def now_trimmed() -> datetime:
    """Current time in the store timezone, without microseconds."""
    return datetime.now(ZoneInfo(STORE_TIMEZONE)).replace(microsecond=0)


def as_store_time(value: datetime) -> datetime:
    """
    Attaches the store timezone to naive datetimes read back from the database.
    SQLite drops tzinfo on the way out; Postgres keeps it.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=ZoneInfo(STORE_TIMEZONE))
    return value.astimezone(ZoneInfo(STORE_TIMEZONE))
