"""
Reminder schedule for an abandoned checkout.

Up to `max_count` reminders, `interval_hours` apart from the moment recovery
starts, each moved into the store's reminder window: earlier than
`start_hour` becomes `start_hour:00` the same day, `end_hour` or later becomes
`start_hour:00` the next day. With both a phone and an email the channels
alternate sms, email, sms.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List

SMS = "sms"
EMAIL = "email"


@dataclass(frozen=True)
class ReminderConfig:
    interval_hours: int = 3
    max_count: int = 3
    start_hour: int = 12
    end_hour: int = 19


@dataclass(frozen=True)
class ScheduledReminder:
    scheduled_for: datetime
    channel: str


def clamp_to_window(moment: datetime, start_hour: int, end_hour: int) -> datetime:
    if moment.hour < start_hour:
        return moment.replace(hour=start_hour, minute=0, second=0, microsecond=0)
    if moment.hour >= end_hour:
        next_day = moment + timedelta(days=1)
        return next_day.replace(hour=start_hour, minute=0, second=0, microsecond=0)
    return moment


def channels_for(has_phone: bool, has_email: bool) -> List[str]:
    channels = []
    if has_phone:
        channels.append(SMS)
    if has_email:
        channels.append(EMAIL)
    return channels


def schedule_reminders(
    now: datetime,
    has_phone: bool,
    has_email: bool,
    config: ReminderConfig = ReminderConfig(),
) -> List[ScheduledReminder]:
    """`now` should already be in store local time. No contact channel gives an empty list."""
    channels = channels_for(has_phone, has_email)
    if not channels:
        return []

    reminders = []
    for i in range(config.max_count):
        at = now + timedelta(hours=i * config.interval_hours)
        reminders.append(
            ScheduledReminder(
                scheduled_for=clamp_to_window(at, config.start_hour, config.end_hour),
                channel=channels[i % len(channels)],
            )
        )
    return reminders
