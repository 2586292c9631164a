from .model_order_notification import NotificationStatus, OrderNotificationModel

__all__ = [
    "NotificationStatus",
    "OrderNotificationModel",
]
