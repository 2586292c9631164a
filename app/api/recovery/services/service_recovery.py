from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.notifications.channels.base_channel import BaseNotificationChannel, NotificationResult
from app.api.recovery.core.messages import recovery_link, reminder_message
from app.api.recovery.core.scheduler import EMAIL, SMS, ReminderConfig, channels_for, schedule_reminders
from app.api.recovery.models.model_abandoned_checkout import AbandonedCheckoutModel, AbandonedCheckoutStatus
from app.api.recovery.models.model_abandoned_checkout_event import RecoveryEventType
from app.api.recovery.models.model_abandoned_checkout_reminder import (
    AbandonedCheckoutReminderModel,
    ReminderStatus,
)
from app.api.recovery.repositories.repo_recovery import RecoveryRepository
from app.api.recovery.schemas.schema_recovery import (
    ProcessRemindersResponse,
    RecoveredCartResponse,
    SaveAbandonedCheckoutRequest,
    SaveAbandonedCheckoutResponse,
    StartRecoveryResponse,
)
from app.config import settings
from app.utils.database_utils import now_trimmed
from app.utils.logger import logger
from app.utils.operating_hours import to_local, within_hours
from app.utils.phone import normalize_phone
from app.utils.prometheus_metrics import recovery_reminders_total


def reminder_config_from_settings() -> ReminderConfig:
    return ReminderConfig(
        interval_hours=settings.REMINDER_INTERVAL_HOURS,
        max_count=settings.REMINDER_MAX_COUNT,
        start_hour=settings.REMINDER_START_HOUR,
        end_hour=settings.REMINDER_END_HOUR,
    )


class RecoveryService:
    """
    Abandoned checkout capture, reminder scheduling and the reminder outbox.

    Reminders are rows in `abandoned_checkout_reminders`; nothing is sent when
    recovery starts. `process_due_reminders` sends whatever is due, retrying a
    failed send `REMINDER_RETRY_MINUTES` later until `REMINDER_MAX_ATTEMPTS`.
    """

    def __init__(
        self,
        db: Session,
        *,
        channels: Optional[Dict[str, BaseNotificationChannel]] = None,
        config: Optional[ReminderConfig] = None,
        clock: Callable[[], datetime] = now_trimmed,
        max_attempts: int = settings.REMINDER_MAX_ATTEMPTS,
        retry_minutes: int = settings.REMINDER_RETRY_MINUTES,
        batch_size: int = settings.REMINDER_BATCH_SIZE,
        site_url: str = settings.PUBLIC_SITE_URL,
    ):
        self.db = db
        self.repo = RecoveryRepository(db)
        self.channels = channels if channels is not None else {}
        self.config = config or reminder_config_from_settings()
        self.clock = clock
        self.max_attempts = max_attempts
        self.retry_minutes = retry_minutes
        self.batch_size = batch_size
        self.site_url = site_url

    def _now(self, now: Optional[datetime] = None) -> datetime:
        return to_local(now or self.clock(), settings.STORE_TIMEZONE)

    def _checkout_or_404(self, checkout_id: int) -> AbandonedCheckoutModel:
        checkout = self.repo.get_checkout(checkout_id)
        if not checkout:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Abandoned checkout not found")
        return checkout

    # ── capture ────────────────────────────────────────────

    def save(self, req: SaveAbandonedCheckoutRequest) -> SaveAbandonedCheckoutResponse:
        if not req.cart_items or not req.cart_total or req.cart_total <= 0:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Cart items and total are required")
        phone = normalize_phone(req.customer_phone) or None
        email = (req.customer_email or "").strip().lower() or None
        if not phone and not email:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Phone or email is required")

        data = dict(
            customer_name=(req.customer_name or "").strip() or None,
            customer_phone=phone,
            customer_email=email,
            cart_items=req.cart_items,
            cart_total=req.cart_total,
            order_type=req.order_type,
            delivery_address=req.delivery_address,
            delivery_city=req.delivery_city,
            delivery_barangay=req.delivery_barangay,
            last_section=req.last_section,
            device_info=req.device_info,
        )

        existing = self.repo.find_open_checkout(phone, req.session_id)
        if existing:
            for key, value in data.items():
                setattr(existing, key, value)
            self.db.flush()
            logger.info(f"[Recovery] Abandoned checkout {existing.id} updated")
            return SaveAbandonedCheckoutResponse(id=existing.id, created=False)

        checkout = self.repo.create_checkout(
            session_id=req.session_id,
            status=AbandonedCheckoutStatus.ABANDONED,
            **data,
        )
        logger.info(f"[Recovery] Abandoned checkout {checkout.id} saved")
        return SaveAbandonedCheckoutResponse(id=checkout.id, created=True)

    # ── scheduling ─────────────────────────────────────────

    def start_recovery(self, checkout_id: int, now: Optional[datetime] = None) -> StartRecoveryResponse:
        checkout = self._checkout_or_404(checkout_id)
        if checkout.status in (AbandonedCheckoutStatus.RECOVERING, AbandonedCheckoutStatus.RECOVERED):
            raise HTTPException(status.HTTP_409_CONFLICT, "Recovery already in progress or completed")

        started_at = self._now(now)
        plan = schedule_reminders(
            started_at,
            has_phone=bool(checkout.customer_phone),
            has_email=bool(checkout.customer_email),
            config=self.config,
        )
        if not plan:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Checkout has no phone or email to send reminders to")

        for item in plan:
            self.repo.add_reminder(checkout, item.scheduled_for, item.channel)

        checkout.status = AbandonedCheckoutStatus.RECOVERING
        checkout.recovery_started_at = started_at
        checkout.next_reminder_scheduled_at = plan[0].scheduled_for
        channels = channels_for(bool(checkout.customer_phone), bool(checkout.customer_email))
        self.repo.add_event(checkout.id, RecoveryEventType.RECOVERY_STARTED.value, {
            "reminders": len(plan),
            "channels": channels,
        })
        self.db.flush()

        logger.info(f"[Recovery] Started for checkout {checkout.id}: {len(plan)} reminders via {channels}")
        return StartRecoveryResponse(
            checkout_id=checkout.id,
            reminders_scheduled=len(plan),
            first_reminder_at=plan[0].scheduled_for,
            channels_used=channels,
        )

    # ── dispatch ───────────────────────────────────────────

    async def _send(self, checkout: AbandonedCheckoutModel, channel_name: str, campaign: str) -> NotificationResult:
        channel = self.channels.get(channel_name)
        if channel is None:
            return NotificationResult(success=False, message=f"{channel_name} channel not configured")

        recipient = checkout.customer_phone if channel_name == SMS else checkout.customer_email
        if not recipient:
            return NotificationResult(success=False, message=f"No {'phone' if channel_name == SMS else 'email'} on file")

        link = recovery_link(self.site_url, checkout.id, channel_name, campaign)
        subject, body = reminder_message(checkout.customer_name, Decimal(str(checkout.cart_total or 0)), link)
        try:
            return await channel.send(recipient, subject, body, {"checkout_id": checkout.id})
        except Exception as e:
            logger.error(f"[Recovery] {channel_name} channel raised for checkout {checkout.id}: {e}")
            return NotificationResult(success=False, message=str(e))

    def _record_sent(self, checkout: AbandonedCheckoutModel, reminder: AbandonedCheckoutReminderModel, now: datetime):
        reminder.status = ReminderStatus.SENT
        reminder.sent_at = now
        reminder.attempts = (reminder.attempts or 0) + 1
        reminder.error_message = None
        if reminder.channel == SMS:
            checkout.sms_attempts = (checkout.sms_attempts or 0) + 1
        elif reminder.channel == EMAIL:
            checkout.email_attempts = (checkout.email_attempts or 0) + 1
        checkout.last_reminder_sent_at = now
        self.repo.add_event(checkout.id, RecoveryEventType.REMINDER_SENT.value, {
            "reminder_id": reminder.id,
            "channel": reminder.channel,
        })

    def _record_failure(
        self,
        checkout: AbandonedCheckoutModel,
        reminder: AbandonedCheckoutReminderModel,
        error: str,
        now: datetime,
    ) -> bool:
        """Returns True when the reminder will be tried again."""
        reminder.attempts = (reminder.attempts or 0) + 1
        reminder.error_message = error
        if reminder.attempts < self.max_attempts:
            reminder.scheduled_for = now + timedelta(minutes=self.retry_minutes)
            return True

        reminder.status = ReminderStatus.FAILED
        self.repo.add_event(checkout.id, RecoveryEventType.REMINDER_FAILED.value, {
            "reminder_id": reminder.id,
            "channel": reminder.channel,
            "error": error,
        })
        return False

    def _refresh_next_reminder(self, checkout: AbandonedCheckoutModel) -> None:
        pending = self.repo.pending_reminders(checkout.id)
        checkout.next_reminder_scheduled_at = pending[0].scheduled_for if pending else None

    async def process_due_reminders(self, now: Optional[datetime] = None) -> ProcessRemindersResponse:
        local_now = self._now(now)
        if not within_hours(local_now, self.config.start_hour, self.config.end_hour):
            logger.info(
                f"[Recovery] Outside reminder hours ({self.config.start_hour}:00-{self.config.end_hour}:00), skipping"
            )
            return ProcessRemindersResponse(skipped_outside_hours=True)

        due = self.repo.due_reminders(local_now, self.batch_size)
        result = ProcessRemindersResponse(processed=len(due))
        touched: Dict[int, AbandonedCheckoutModel] = {}

        for reminder in due:
            checkout = reminder.checkout
            if checkout is None or checkout.status != AbandonedCheckoutStatus.RECOVERING:
                reminder.status = ReminderStatus.CANCELLED
                result.cancelled += 1
                recovery_reminders_total.labels(channel=reminder.channel, status="cancelled").inc()
                continue

            touched[checkout.id] = checkout
            sent = await self._send(checkout, reminder.channel, "abandoned_cart")
            if sent.success:
                self._record_sent(checkout, reminder, local_now)
                result.sent += 1
                recovery_reminders_total.labels(channel=reminder.channel, status="sent").inc()
            elif self._record_failure(checkout, reminder, sent.message or "Send failed", local_now):
                result.retried += 1
                recovery_reminders_total.labels(channel=reminder.channel, status="retried").inc()
            else:
                result.failed += 1
                recovery_reminders_total.labels(channel=reminder.channel, status="failed").inc()
            self.db.flush()

        for checkout in touched.values():
            self._refresh_next_reminder(checkout)
        self.db.flush()

        logger.info(
            f"[Recovery] Reminders processed={result.processed} sent={result.sent} retried={result.retried} "
            f"failed={result.failed} cancelled={result.cancelled}"
        )
        return result

    async def send_manual(self, checkout_id: int, channel_name: str, now: Optional[datetime] = None) -> AbandonedCheckoutReminderModel:
        """Staff-triggered reminder, sent right away and recorded like a scheduled one."""
        checkout = self._checkout_or_404(checkout_id)
        if checkout.status == AbandonedCheckoutStatus.RECOVERED:
            raise HTTPException(status.HTTP_409_CONFLICT, "This checkout was already recovered")

        local_now = self._now(now)
        reminder = self.repo.add_reminder(checkout, local_now, channel_name)
        sent = await self._send(checkout, channel_name, "abandoned_cart_manual")
        if sent.success:
            self._record_sent(checkout, reminder, local_now)
            recovery_reminders_total.labels(channel=channel_name, status="sent").inc()
        else:
            reminder.attempts = 1
            reminder.status = ReminderStatus.FAILED
            reminder.error_message = sent.message
            self.repo.add_event(checkout.id, RecoveryEventType.REMINDER_FAILED.value, {
                "reminder_id": reminder.id,
                "channel": channel_name,
                "error": sent.message,
                "manual": True,
            })
            recovery_reminders_total.labels(channel=channel_name, status="failed").inc()
        self.db.flush()
        return reminder

    # ── completion ─────────────────────────────────────────

    def recovered_cart(self, checkout_id: int) -> RecoveredCartResponse:
        """Cart behind a reminder link. Each visit is logged as a click."""
        checkout = self._checkout_or_404(checkout_id)
        if checkout.status == AbandonedCheckoutStatus.RECOVERED:
            raise HTTPException(status.HTTP_409_CONFLICT, "This order was already placed")

        self.repo.add_event(checkout.id, RecoveryEventType.LINK_CLICKED.value)
        self.db.flush()
        return RecoveredCartResponse(
            checkout_id=checkout.id,
            customer_name=checkout.customer_name,
            customer_phone=checkout.customer_phone,
            customer_email=checkout.customer_email,
            cart_items=list(checkout.cart_items or []),
            cart_total=checkout.cart_total,
            order_type=checkout.order_type,
            delivery_address=checkout.delivery_address,
            delivery_city=checkout.delivery_city,
            delivery_barangay=checkout.delivery_barangay,
        )

    def mark_recovered(self, checkout_id: int, order_id: int) -> bool:
        """Closes a checkout once its order is placed. An unknown id is logged, not raised."""
        checkout = self.repo.get_checkout(checkout_id)
        if checkout is None:
            logger.warning(f"[Recovery] Order {order_id} refers to unknown checkout {checkout_id}")
            return False
        if checkout.status == AbandonedCheckoutStatus.RECOVERED:
            return False

        checkout.status = AbandonedCheckoutStatus.RECOVERED
        checkout.recovered_order_id = order_id
        checkout.next_reminder_scheduled_at = None
        for reminder in self.repo.pending_reminders(checkout.id):
            reminder.status = ReminderStatus.CANCELLED
        self.repo.add_event(checkout.id, RecoveryEventType.CHECKOUT_COMPLETED.value, {"order_id": order_id})
        self.db.flush()

        logger.info(f"[Recovery] Checkout {checkout.id} recovered by order {order_id}")
        return True

    def list_checkouts(self, status_filter: Optional[str] = None, limit: int = 100) -> List[AbandonedCheckoutModel]:
        wanted = AbandonedCheckoutStatus(status_filter) if status_filter else None
        return self.repo.list_checkouts(wanted, limit)
