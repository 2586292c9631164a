from typing import Dict

from fastapi import Depends
from sqlalchemy.orm import Session

from app.api.notifications.channels.base_channel import BaseNotificationChannel
from app.api.notifications.channels.channel_factory import ChannelFactory
from app.api.notifications.services.service_order_notification import OrderNotificationService
from app.database.db_connection import get_db


def get_notification_channels() -> Dict[str, BaseNotificationChannel]:
    """SMS/email channels built from settings. Overridden in tests."""
    return ChannelFactory.from_settings()


def get_order_notification_service(
    db: Session = Depends(get_db),
    channels: Dict[str, BaseNotificationChannel] = Depends(get_notification_channels),
) -> OrderNotificationService:
    return OrderNotificationService(db, channels=channels)
