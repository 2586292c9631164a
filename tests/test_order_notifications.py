import asyncio
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from app.api.cart.core.cart_store import CartSessionStore, InMemoryCartSnapshotBackend
from app.api.notifications.channels.base_channel import BaseNotificationChannel, NotificationResult
from app.api.notifications.channels.channel_factory import ChannelFactory
from app.api.notifications.core.order_messages import NotificationType, notification_for_status, render
from app.api.notifications.models.model_order_notification import NotificationStatus
from app.api.notifications.services.service_order_notification import OrderNotificationService
from app.api.orders.core.order_status import OrderStatus
from app.api.orders.schemas.schema_order import CheckoutRequest
from app.api.orders.services.service_checkout import CheckoutService
from app.api.orders.services.service_order_status import OrderStatusService

NOON = datetime(2026, 10, 17, 12, 0, tzinfo=ZoneInfo("Asia/Manila"))


class FakeChannel(BaseNotificationChannel):
    def __init__(self, name: str, succeed: bool = True):
        super().__init__({})
        self.name = name
        self.succeed = succeed
        self.sent = []

    async def send(self, recipient, title, message, channel_metadata=None):
        self.sent.append((recipient, title, message))
        if self.succeed:
            return NotificationResult(success=True, external_id="msg-1")
        return NotificationResult(success=False, message="provider down")

    def validate_config(self, config):
        return True

    def get_channel_name(self):
        return self.name


def service(db, sms=None, email=None, **kwargs):
    channels = {"sms": sms or FakeChannel("sms"), "email": email or FakeChannel("email")}
    return OrderNotificationService(db, channels=channels, clock=lambda: NOON, **kwargs)


@pytest.fixture
def order(db, menu):
    checkout = CheckoutService(db, store=CartSessionStore(InMemoryCartSnapshotBackend()), clock=lambda: NOON)
    return checkout.checkout(CheckoutRequest.model_validate({
        "items": [{"product_id": menu["rice"], "quantity": 2}],
        "customer_name": "Ana Santos",
        "customer_phone": "09171234567",
        "customer_email": "ana@example.com",
        "order_type": "pickup",
        "pickup_date": date(2026, 10, 18),
        "pickup_time": "6:00 PM",
    }))


def test_checkout_queues_customer_notifications(db, order):
    rows = service(db).list_for_order(order.id)
    assert [(r.notification_type, r.channel, r.recipient) for r in rows] == [
        ("order_received", "sms", "639171234567"),
        ("new_order", "email", "ana@example.com"),
    ]
    assert all(r.status == NotificationStatus.PENDING for r in rows)
    assert rows[0].payload["order_number"] == order.order_number
    assert rows[0].payload["total_amount"] == "300.00"


def test_staff_get_new_order_email(db, order):
    svc = service(db, staff_emails=["kitchen@arwings.ph"])
    rows = svc.order_created(order, order.customer)
    staff = [r for r in rows if r.recipient == "kitchen@arwings.ph"]
    assert len(staff) == 1
    assert staff[0].payload["audience"] == "staff"


def test_status_change_queues_typed_sms(db, order):
    statuses = OrderStatusService(db, clock=lambda: NOON)
    statuses.update_status(order.id, OrderStatus.APPROVED)
    statuses.update_status(order.id, OrderStatus.PREPARING)

    types = [r.notification_type for r in service(db).list_for_order(order.id)]
    assert types[-2:] == ["payment_verified", "order_preparing"]


@pytest.mark.parametrize(
    "status, expected",
    [
        (OrderStatus.PREPARING, NotificationType.ORDER_PREPARING),
        (OrderStatus.IN_TRANSIT, NotificationType.ORDER_OUT_FOR_DELIVERY),
        (OrderStatus.PENDING, None),
        (OrderStatus.WAITING_FOR_RIDER, None),
    ],
)
def test_notification_for_status(status, expected):
    assert notification_for_status(status) == expected


def test_unmapped_status_queues_nothing(db, order):
    assert service(db).status_changed(order, OrderStatus.WAITING_FOR_RIDER) is None


def test_process_sends_due_notifications(db, order):
    sms, email = FakeChannel("sms"), FakeChannel("email")
    result = asyncio.run(service(db, sms=sms, email=email).process_pending())

    assert (result.processed, result.sent, result.retried, result.failed) == (2, 2, 0, 0)
    assert sms.sent[0][0] == "639171234567"
    assert sms.sent[0][2].startswith("American Ribs & Wings: We received your order #")
    assert email.sent[0][1] == f"Order #{order.order_number} received"

    rows = service(db).list_for_order(order.id)
    assert all(r.status == NotificationStatus.SENT for r in rows)
    assert all(r.attempts == 1 and r.external_id == "msg-1" for r in rows)

    assert asyncio.run(service(db).process_pending()).processed == 0


def test_failed_send_retries_then_gives_up(db, order):
    svc = service(db, sms=FakeChannel("sms", succeed=False), max_attempts=2, retry_minutes=5)

    first = asyncio.run(svc.process_pending())
    assert (first.sent, first.retried) == (1, 1)
    assert asyncio.run(svc.process_pending()).processed == 0

    second = asyncio.run(svc.process_pending(now=NOON + timedelta(minutes=5)))
    assert (second.processed, second.failed) == (1, 1)

    sms_row = next(r for r in svc.list_for_order(order.id) if r.channel == "sms")
    assert sms_row.status == NotificationStatus.FAILED
    assert sms_row.attempts == 2
    assert sms_row.error_message == "provider down"


def test_missing_channel_counts_as_failed_attempt(db, order):
    svc = OrderNotificationService(db, channels={}, clock=lambda: NOON, max_attempts=1)
    result = asyncio.run(svc.process_pending())
    assert (result.processed, result.failed) == (2, 2)
    assert {r.error_message for r in svc.list_for_order(order.id)} == {
        "sms channel not configured", "email channel not configured",
    }


def test_staff_email_text():
    subject, body = render("new_order", {
        "order_number": "ARW-20261017-0001",
        "customer_name": "Ana",
        "customer_phone": "639171234567",
        "total_amount": "1234.5",
        "order_type": "delivery",
        "payment_method": "gcash",
        "delivery_address": "1 Main, Sta. Cruz, Lubao",
        "audience": "staff",
    })
    assert subject == "New Order #ARW-20261017-0001 - PHP 1,234.50"
    assert "Deliver to: 1 Main, Sta. Cruz, Lubao" in body


def test_unknown_channel_lists_supported_ones():
    with pytest.raises(ValueError) as exc:
        ChannelFactory.create_channel("whatsapp", {})
    assert str(exc.value) == "Channel 'whatsapp' is not supported. Available channels: sms, email"

