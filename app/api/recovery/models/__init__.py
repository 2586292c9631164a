from .model_abandoned_checkout import AbandonedCheckoutModel, AbandonedCheckoutStatus
from .model_abandoned_checkout_event import AbandonedCheckoutEventModel, RecoveryEventType
from .model_abandoned_checkout_reminder import AbandonedCheckoutReminderModel, ReminderStatus

__all__ = [
    "AbandonedCheckoutModel",
    "AbandonedCheckoutStatus",
    "AbandonedCheckoutEventModel",
    "RecoveryEventType",
    "AbandonedCheckoutReminderModel",
    "ReminderStatus",
]
