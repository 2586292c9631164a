from typing import Dict

from fastapi import Depends
from sqlalchemy.orm import Session

from app.api.notifications.channels.base_channel import BaseNotificationChannel
from app.api.notifications.services.dependencies import get_notification_channels
from app.api.recovery.services.service_recovery import RecoveryService
from app.database.db_connection import get_db


def get_recovery_service(
    db: Session = Depends(get_db),
    channels: Dict[str, BaseNotificationChannel] = Depends(get_notification_channels),
) -> RecoveryService:
    return RecoveryService(db, channels=channels)
