from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.api.recovery.models.model_abandoned_checkout import AbandonedCheckoutStatus
from app.api.recovery.models.model_abandoned_checkout_reminder import ReminderStatus


# ------ Requests ------
class SaveAbandonedCheckoutRequest(BaseModel):
    customer_name: Optional[str] = Field(None, max_length=150)
    customer_phone: Optional[str] = Field(None, max_length=20)
    customer_email: Optional[str] = Field(None, max_length=150)
    cart_items: List[Dict[str, Any]] = []
    cart_total: Decimal = Decimal("0")
    order_type: Optional[str] = Field(None, max_length=20)
    delivery_address: Optional[str] = None
    delivery_city: Optional[str] = Field(None, max_length=100)
    delivery_barangay: Optional[str] = Field(None, max_length=100)
    last_section: Optional[str] = Field(None, max_length=50)
    session_id: Optional[str] = Field(None, max_length=64)
    device_info: Optional[Dict[str, Any]] = None


class ManualReminderRequest(BaseModel):
    channel: Literal["sms", "email"]


# ------ Responses ------
class SaveAbandonedCheckoutResponse(BaseModel):
    id: int
    created: bool


class ReminderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    scheduled_for: datetime
    channel: str
    status: ReminderStatus
    attempts: int
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None


class AbandonedCheckoutResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    cart_total: Decimal
    order_type: Optional[str] = None
    last_section: Optional[str] = None
    status: AbandonedCheckoutStatus
    recovery_started_at: Optional[datetime] = None
    next_reminder_scheduled_at: Optional[datetime] = None
    last_reminder_sent_at: Optional[datetime] = None
    sms_attempts: int = 0
    email_attempts: int = 0
    recovered_order_id: Optional[int] = None
    created_at: datetime
    reminders: List[ReminderResponse] = []


class StartRecoveryResponse(BaseModel):
    checkout_id: int
    reminders_scheduled: int
    first_reminder_at: Optional[datetime] = None
    channels_used: List[str]


class RecoveredCartResponse(BaseModel):
    """What the order page needs to refill the form from a reminder link."""
    checkout_id: int
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    cart_items: List[Dict[str, Any]]
    cart_total: Decimal
    order_type: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_barangay: Optional[str] = None


class ProcessRemindersResponse(BaseModel):
    sent: int = 0
    failed: int = 0
    retried: int = 0
    cancelled: int = 0
    processed: int = 0
    skipped_outside_hours: bool = False
