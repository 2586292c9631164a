from datetime import datetime, timedelta

from app.api.recovery.core.messages import recovery_link, reminder_message
from app.api.recovery.core.scheduler import (
    EMAIL,
    SMS,
    ReminderConfig,
    clamp_to_window,
    schedule_reminders,
)


def test_three_reminders_alternating_channels():
    now = datetime(2026, 10, 17, 12, 0)
    plan = schedule_reminders(now, has_phone=True, has_email=True)
    assert [r.channel for r in plan] == [SMS, EMAIL, SMS]
    assert [r.scheduled_for for r in plan] == [
        datetime(2026, 10, 17, 12, 0),
        datetime(2026, 10, 17, 15, 0),
        datetime(2026, 10, 17, 18, 0),
    ]
    for earlier, later in zip(plan, plan[1:]):
        assert later.scheduled_for - earlier.scheduled_for >= timedelta(hours=3)


def test_single_channel_is_reused():
    plan = schedule_reminders(datetime(2026, 10, 17, 12, 0), has_phone=False, has_email=True)
    assert [r.channel for r in plan] == [EMAIL, EMAIL, EMAIL]


def test_no_contact_no_reminders():
    assert schedule_reminders(datetime(2026, 10, 17, 12, 0), has_phone=False, has_email=False) == []


def test_late_reminders_move_to_next_day():
    plan = schedule_reminders(datetime(2026, 10, 17, 17, 30), has_phone=True, has_email=False)
    assert [r.scheduled_for for r in plan] == [
        datetime(2026, 10, 17, 17, 30),
        datetime(2026, 10, 18, 12, 0),
        datetime(2026, 10, 18, 12, 0),
    ]


def test_clamp_to_window():
    assert clamp_to_window(datetime(2026, 10, 17, 8, 45), 12, 19) == datetime(2026, 10, 17, 12, 0)
    assert clamp_to_window(datetime(2026, 10, 17, 19, 0), 12, 19) == datetime(2026, 10, 18, 12, 0)
    assert clamp_to_window(datetime(2026, 10, 17, 14, 10), 12, 19) == datetime(2026, 10, 17, 14, 10)


def test_custom_config():
    config = ReminderConfig(interval_hours=1, max_count=2, start_hour=9, end_hour=21)
    plan = schedule_reminders(datetime(2026, 10, 17, 7, 0), True, True, config)
    assert len(plan) == 2
    assert plan[0].scheduled_for == datetime(2026, 10, 17, 9, 0)
    assert plan[1].scheduled_for == datetime(2026, 10, 17, 9, 0)


def test_recovery_link_and_message():
    link = recovery_link("https://arwings.ph/", 42, "sms")
    assert link == (
        "https://arwings.ph/order?recover=42"
        "&utm_source=recovery&utm_medium=sms&utm_campaign=abandoned_cart"
    )
    subject, body = reminder_message(None, 1250, link)
    assert subject
    assert "Hi there!" in body
    assert "PHP 1,250.00" in body
    assert link in body
