from datetime import datetime
from zoneinfo import ZoneInfo

from app.api.catalog.repositories.repo_setting import SettingRepository
from app.api.catalog.services.service_store_hours import STORE_HOURS_KEY, StoreHoursService
from app.utils.operating_hours import format_time_12h, parse_hhmm, store_is_open, within_hours

MANILA = ZoneInfo("Asia/Manila")
HOURS = {"open": "10:00", "close": "21:00"}


def test_open_inside_hours():
    assert store_is_open(store_hours=HOURS, now=datetime(2026, 10, 17, 10, 0, tzinfo=MANILA))
    assert store_is_open(store_hours=HOURS, now=datetime(2026, 10, 17, 20, 59, tzinfo=MANILA))


def test_closed_outside_hours():
    assert not store_is_open(store_hours=HOURS, now=datetime(2026, 10, 17, 9, 59, tzinfo=MANILA))
    assert not store_is_open(store_hours=HOURS, now=datetime(2026, 10, 17, 21, 0, tzinfo=MANILA))


def test_naive_time_is_utc():
    # 02:00 UTC is 10:00 in Manila
    assert store_is_open(store_hours=HOURS, now=datetime(2026, 10, 17, 2, 0))
    assert not store_is_open(store_hours=HOURS, now=datetime(2026, 10, 17, 14, 0))


def test_missing_or_bad_setting_counts_as_open():
    now = datetime(2026, 10, 17, 3, 0, tzinfo=MANILA)
    assert store_is_open(store_hours=None, now=now)
    assert store_is_open(store_hours={"open": "25:00", "close": "21:00"}, now=now)


def test_helpers():
    assert parse_hhmm("7:05") is not None
    assert parse_hhmm("7pm") is None
    assert format_time_12h(parse_hhmm("00:30")) == "12:30 AM"
    assert within_hours(datetime(2026, 10, 17, 12, 0), 12, 19)
    assert not within_hours(datetime(2026, 10, 17, 19, 0), 12, 19)


def test_store_status_from_settings(db):
    SettingRepository(db).set_value(STORE_HOURS_KEY, HOURS)
    status = StoreHoursService(db).status(now=datetime(2026, 10, 17, 22, 0, tzinfo=MANILA))
    assert not status.is_open
    assert (status.opens_at, status.closes_at) == ("10:00 AM", "9:00 PM")
