from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from app.api.notifications.channels.base_channel import BaseNotificationChannel, NotificationResult
from app.api.notifications.core.order_messages import NotificationType, notification_for_status, render
from app.api.notifications.models.model_order_notification import NotificationStatus, OrderNotificationModel
from app.api.notifications.repositories.repo_order_notification import OrderNotificationRepository
from app.api.notifications.schemas.schema_order_notification import ProcessNotificationsResponse
from app.api.orders.core.order_status import OrderStatus
from app.api.orders.models.model_customer import CustomerModel
from app.api.orders.models.model_order import OrderModel
from app.config import settings
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger
from app.utils.operating_hours import to_local
from app.utils.prometheus_metrics import order_notifications_total

SMS = "sms"
EMAIL = "email"


class OrderNotificationService:
    """
    Typed order notifications through an outbox.

    Checkout and staff status changes only enqueue rows, inside the caller's
    transaction. `process_pending` sends what is due, retrying a failed send
    `ORDER_NOTIFICATION_RETRY_MINUTES` later until the attempt limit.
    """

    def __init__(
        self,
        db: Session,
        *,
        channels: Optional[Dict[str, BaseNotificationChannel]] = None,
        clock: Callable[[], datetime] = now_trimmed,
        staff_emails: Optional[Sequence[str]] = None,
        max_attempts: int = settings.ORDER_NOTIFICATION_MAX_ATTEMPTS,
        retry_minutes: int = settings.ORDER_NOTIFICATION_RETRY_MINUTES,
        batch_size: int = settings.ORDER_NOTIFICATION_BATCH_SIZE,
    ):
        self.db = db
        self.repo = OrderNotificationRepository(db)
        self.channels = channels if channels is not None else {}
        self.clock = clock
        self.staff_emails = list(staff_emails if staff_emails is not None else settings.STAFF_NOTIFICATION_EMAILS)
        self.max_attempts = max_attempts
        self.retry_minutes = retry_minutes
        self.batch_size = batch_size

    def _now(self, now: Optional[datetime] = None) -> datetime:
        return to_local(now or self.clock(), settings.STORE_TIMEZONE)

    @staticmethod
    def _payload(order: OrderModel, customer: Optional[CustomerModel]) -> dict:
        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "customer_name": customer.name if customer else None,
            "customer_phone": customer.phone if customer else None,
            "total_amount": str(order.total_amount),
            "order_type": getattr(order.order_type, "value", order.order_type),
            "payment_method": getattr(order.payment_method, "value", order.payment_method),
            "delivery_address": order.delivery_address,
        }

    def _enqueue(self, order: OrderModel, kind: NotificationType, channel: str, recipient: str, payload: dict):
        return self.repo.add(
            order_id=order.id,
            notification_type=kind.value,
            channel=channel,
            recipient=recipient,
            payload=payload,
            scheduled_for=self._now(),
        )

    # ── enqueue ────────────────────────────────────────────

    def order_created(self, order: OrderModel, customer: Optional[CustomerModel]) -> List[OrderNotificationModel]:
        """`order_received` SMS to the customer, `new_order` email to the customer and to staff."""
        payload = self._payload(order, customer)
        rows = []
        if customer and customer.phone:
            rows.append(self._enqueue(order, NotificationType.ORDER_RECEIVED, SMS, customer.phone, payload))
        if customer and customer.email:
            rows.append(self._enqueue(
                order, NotificationType.NEW_ORDER, EMAIL, customer.email, {**payload, "audience": "customer"},
            ))
        for address in self.staff_emails:
            rows.append(self._enqueue(order, NotificationType.NEW_ORDER, EMAIL, address, {**payload, "audience": "staff"}))
        logger.info(f"[OrderNotification] {len(rows)} queued for order {order.order_number}")
        return rows

    def status_changed(self, order: OrderModel, new_status: OrderStatus) -> Optional[OrderNotificationModel]:
        kind = notification_for_status(new_status)
        customer = order.customer
        if kind is None or customer is None or not customer.phone:
            return None
        row = self._enqueue(order, kind, SMS, customer.phone, self._payload(order, customer))
        logger.info(f"[OrderNotification] {kind.value} queued for order {order.order_number}")
        return row

    # ── dispatch ───────────────────────────────────────────

    async def _send(self, row: OrderNotificationModel) -> NotificationResult:
        channel = self.channels.get(row.channel)
        if channel is None:
            return NotificationResult(success=False, message=f"{row.channel} channel not configured")
        subject, body = render(row.notification_type, row.payload or {})
        try:
            return await channel.send(row.recipient, subject, body, {"order_id": row.order_id})
        except Exception as e:
            logger.error(f"[OrderNotification] {row.channel} channel raised for notification {row.id}: {e}")
            return NotificationResult(success=False, message=str(e))

    async def process_pending(self, now: Optional[datetime] = None) -> ProcessNotificationsResponse:
        local_now = self._now(now)
        due = self.repo.due(local_now, self.batch_size)
        result = ProcessNotificationsResponse(processed=len(due))

        for row in due:
            sent = await self._send(row)
            row.attempts = (row.attempts or 0) + 1
            if sent.success:
                row.status = NotificationStatus.SENT
                row.sent_at = local_now
                row.external_id = sent.external_id
                row.error_message = None
                result.sent += 1
                outcome = "sent"
            else:
                row.error_message = sent.message or "Send failed"
                if row.attempts < self.max_attempts:
                    row.scheduled_for = local_now + timedelta(minutes=self.retry_minutes)
                    result.retried += 1
                    outcome = "retried"
                else:
                    row.status = NotificationStatus.FAILED
                    result.failed += 1
                    outcome = "failed"
            order_notifications_total.labels(
                notification_type=row.notification_type, channel=row.channel, status=outcome,
            ).inc()
            self.db.flush()

        logger.info(
            f"[OrderNotification] processed={result.processed} sent={result.sent} "
            f"retried={result.retried} failed={result.failed}"
        )
        return result

    def list_for_order(self, order_id: int) -> List[OrderNotificationModel]:
        return self.repo.for_order(order_id)
