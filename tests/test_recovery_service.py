import asyncio
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from fastapi import HTTPException

from app.api.notifications.channels.base_channel import BaseNotificationChannel, NotificationResult
from app.api.recovery.models.model_abandoned_checkout import AbandonedCheckoutStatus
from app.api.recovery.models.model_abandoned_checkout_reminder import ReminderStatus
from app.api.recovery.repositories.repo_recovery import RecoveryRepository
from app.api.recovery.schemas.schema_recovery import SaveAbandonedCheckoutRequest
from app.api.recovery.services.service_recovery import RecoveryService

MANILA = ZoneInfo("Asia/Manila")
NOON = datetime(2026, 10, 17, 12, 0, tzinfo=MANILA)


class FakeChannel(BaseNotificationChannel):
    def __init__(self, name: str, succeed: bool = True):
        super().__init__({})
        self.name = name
        self.succeed = succeed
        self.sent = []

    async def send(self, recipient, title, message, channel_metadata=None):
        self.sent.append((recipient, message))
        if self.succeed:
            return NotificationResult(success=True, external_id="msg-1")
        return NotificationResult(success=False, message="provider down")

    def validate_config(self, config):
        return True

    def get_channel_name(self):
        return self.name


def service(db, sms=None, email=None):
    channels = {"sms": sms or FakeChannel("sms"), "email": email or FakeChannel("email")}
    return RecoveryService(
        db, channels=channels, clock=lambda: NOON, max_attempts=3, retry_minutes=20,
        site_url="https://arwings.ph",
    )


def abandoned(svc, phone="09171234567", email="ana@example.com"):
    return svc.save(SaveAbandonedCheckoutRequest(
        customer_name="Ana",
        customer_phone=phone,
        customer_email=email,
        cart_items=[{"productId": 1, "quantity": 2}],
        cart_total=Decimal("300"),
        session_id="session-abc",
    )).id


def test_save_requires_cart_and_contact(db):
    svc = service(db)
    with pytest.raises(HTTPException) as exc:
        svc.save(SaveAbandonedCheckoutRequest(customer_phone="09171234567"))
    assert exc.value.status_code == 400
    with pytest.raises(HTTPException):
        svc.save(SaveAbandonedCheckoutRequest(cart_items=[{"productId": 1}], cart_total=Decimal("10")))


def test_save_updates_open_checkout_for_same_phone(db):
    svc = service(db)
    first = abandoned(svc)
    second = abandoned(svc, phone="+63 917 123 4567")
    assert first == second


def test_start_recovery_schedules_reminders(db):
    svc = service(db)
    checkout_id = abandoned(svc)
    result = svc.start_recovery(checkout_id)
    assert result.reminders_scheduled == 3
    assert result.channels_used == ["sms", "email"]

    checkout = RecoveryRepository(db).get_checkout(checkout_id)
    assert checkout.status == AbandonedCheckoutStatus.RECOVERING
    assert [r.channel for r in checkout.reminders] == ["sms", "email", "sms"]


def test_start_recovery_twice_conflicts(db):
    svc = service(db)
    checkout_id = abandoned(svc)
    svc.start_recovery(checkout_id)
    with pytest.raises(HTTPException) as exc:
        svc.start_recovery(checkout_id)
    assert exc.value.status_code == 409


def test_start_recovery_unknown_checkout(db):
    with pytest.raises(HTTPException) as exc:
        service(db).start_recovery(999)
    assert exc.value.status_code == 404


def test_due_reminder_is_sent(db):
    sms = FakeChannel("sms")
    svc = service(db, sms=sms)
    checkout_id = abandoned(svc)
    svc.start_recovery(checkout_id)

    result = asyncio.run(svc.process_due_reminders(now=datetime(2026, 10, 17, 12, 5, tzinfo=MANILA)))
    assert (result.processed, result.sent) == (1, 1)
    assert sms.sent[0][0] == "639171234567"
    assert f"recover={checkout_id}" in sms.sent[0][1]

    checkout = RecoveryRepository(db).get_checkout(checkout_id)
    assert checkout.sms_attempts == 1
    assert checkout.last_reminder_sent_at is not None
    assert checkout.reminders[0].status == ReminderStatus.SENT


def test_failed_send_is_retried_then_marked_failed(db):
    svc = service(db, sms=FakeChannel("sms", succeed=False))
    checkout_id = abandoned(svc, email=None)
    svc.start_recovery(checkout_id)

    first = asyncio.run(svc.process_due_reminders(now=datetime(2026, 10, 17, 12, 0, tzinfo=MANILA)))
    assert first.retried == 1
    # not due again until the retry delay passes
    early = asyncio.run(svc.process_due_reminders(now=datetime(2026, 10, 17, 12, 10, tzinfo=MANILA)))
    assert early.processed == 0

    second = asyncio.run(svc.process_due_reminders(now=datetime(2026, 10, 17, 12, 20, tzinfo=MANILA)))
    assert second.retried == 1
    third = asyncio.run(svc.process_due_reminders(now=datetime(2026, 10, 17, 12, 40, tzinfo=MANILA)))
    assert third.failed == 1

    reminder = RecoveryRepository(db).get_checkout(checkout_id).reminders[0]
    assert reminder.status == ReminderStatus.FAILED
    assert reminder.attempts == 3
    assert reminder.error_message == "provider down"


def test_reminders_skipped_outside_hours(db):
    svc = service(db)
    result = asyncio.run(svc.process_due_reminders(now=datetime(2026, 10, 17, 20, 0, tzinfo=MANILA)))
    assert result.skipped_outside_hours
    assert result.processed == 0


def test_reminders_of_closed_checkout_are_cancelled(db):
    sms = FakeChannel("sms")
    svc = service(db, sms=sms)
    checkout_id = abandoned(svc)
    svc.start_recovery(checkout_id)
    RecoveryRepository(db).get_checkout(checkout_id).status = AbandonedCheckoutStatus.EXPIRED
    db.flush()

    result = asyncio.run(svc.process_due_reminders(now=datetime(2026, 10, 17, 12, 5, tzinfo=MANILA)))
    assert result.cancelled == 1
    assert sms.sent == []


def test_mark_recovered_cancels_pending_reminders(db):
    svc = service(db)
    checkout_id = abandoned(svc)
    svc.start_recovery(checkout_id)

    assert svc.mark_recovered(checkout_id, order_id=None) is True
    checkout = RecoveryRepository(db).get_checkout(checkout_id)
    assert checkout.status == AbandonedCheckoutStatus.RECOVERED
    assert checkout.next_reminder_scheduled_at is None
    assert {r.status for r in checkout.reminders} == {ReminderStatus.CANCELLED}

    with pytest.raises(HTTPException) as exc:
        svc.recovered_cart(checkout_id)
    assert exc.value.status_code == 409


def test_mark_recovered_unknown_checkout_is_not_an_error(db):
    assert service(db).mark_recovered(12345, order_id=1) is False


def test_manual_reminder(db):
    email = FakeChannel("email")
    svc = service(db, email=email)
    checkout_id = abandoned(svc)
    reminder = asyncio.run(svc.send_manual(checkout_id, "email"))
    assert reminder.status == ReminderStatus.SENT
    assert email.sent[0][0] == "ana@example.com"
    assert "utm_campaign=abandoned_cart_manual" in email.sent[0][1]
