from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.api.recovery.models.model_abandoned_checkout import AbandonedCheckoutModel, AbandonedCheckoutStatus
from app.api.recovery.models.model_abandoned_checkout_event import AbandonedCheckoutEventModel
from app.api.recovery.models.model_abandoned_checkout_reminder import (
    AbandonedCheckoutReminderModel,
    ReminderStatus,
)


class RecoveryRepository:
    def __init__(self, db: Session):
        self.db = db

    # ── checkouts ──────────────────────────────────────────

    def get_checkout(self, checkout_id: int) -> Optional[AbandonedCheckoutModel]:
        return self.db.query(AbandonedCheckoutModel).filter(AbandonedCheckoutModel.id == checkout_id).first()

    def find_open_checkout(self, phone: Optional[str], session_id: Optional[str]) -> Optional[AbandonedCheckoutModel]:
        """Latest checkout still `abandoned` for the same phone or browser session."""
        filters = []
        if phone:
            filters.append(AbandonedCheckoutModel.customer_phone == phone)
        if session_id:
            filters.append(AbandonedCheckoutModel.session_id == session_id)
        if not filters:
            return None
        return (
            self.db.query(AbandonedCheckoutModel)
            .filter(AbandonedCheckoutModel.status == AbandonedCheckoutStatus.ABANDONED)
            .filter(or_(*filters))
            .order_by(AbandonedCheckoutModel.id.desc())
            .first()
        )

    def list_checkouts(self, status: Optional[AbandonedCheckoutStatus] = None, limit: int = 100) -> List[AbandonedCheckoutModel]:
        q = self.db.query(AbandonedCheckoutModel)
        if status is not None:
            q = q.filter(AbandonedCheckoutModel.status == status)
        return q.order_by(AbandonedCheckoutModel.created_at.desc()).limit(limit).all()

    def create_checkout(self, **data) -> AbandonedCheckoutModel:
        obj = AbandonedCheckoutModel(**data)
        self.db.add(obj)
        self.db.flush()
        return obj

    # ── reminders ──────────────────────────────────────────

    def add_reminder(self, checkout: AbandonedCheckoutModel, scheduled_for: datetime, channel: str) -> AbandonedCheckoutReminderModel:
        obj = AbandonedCheckoutReminderModel(
            abandoned_checkout_id=checkout.id,
            scheduled_for=scheduled_for,
            channel=channel,
            status=ReminderStatus.PENDING,
            attempts=0,
        )
        self.db.add(obj)
        self.db.flush()
        return obj

    def due_reminders(self, now: datetime, limit: int) -> List[AbandonedCheckoutReminderModel]:
        return (
            self.db.query(AbandonedCheckoutReminderModel)
            .options(joinedload(AbandonedCheckoutReminderModel.checkout))
            .filter(AbandonedCheckoutReminderModel.status == ReminderStatus.PENDING)
            .filter(AbandonedCheckoutReminderModel.scheduled_for <= now)
            .order_by(AbandonedCheckoutReminderModel.scheduled_for, AbandonedCheckoutReminderModel.id)
            .limit(limit)
            .all()
        )

    def pending_reminders(self, checkout_id: int) -> List[AbandonedCheckoutReminderModel]:
        return (
            self.db.query(AbandonedCheckoutReminderModel)
            .filter(AbandonedCheckoutReminderModel.abandoned_checkout_id == checkout_id)
            .filter(AbandonedCheckoutReminderModel.status == ReminderStatus.PENDING)
            .order_by(AbandonedCheckoutReminderModel.scheduled_for)
            .all()
        )

    # ── events ─────────────────────────────────────────────

    def add_event(self, checkout_id: int, event_type: str, metadata: Optional[dict] = None) -> AbandonedCheckoutEventModel:
        obj = AbandonedCheckoutEventModel(
            abandoned_checkout_id=checkout_id,
            event_type=event_type,
            event_metadata=metadata,
        )
        self.db.add(obj)
        self.db.flush()
        return obj
