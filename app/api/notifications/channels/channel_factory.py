from typing import Any, Dict, Optional

from app.config import settings
from app.utils.logger import logger
from .base_channel import BaseNotificationChannel
from .email_channel import EmailChannel
from .sms_channel import SmsChannel


class ChannelFactory:
    """Builds notification channels by name."""

    _channels = {
        "sms": SmsChannel,
        "email": EmailChannel,
    }

    @classmethod
    def create_channel(cls, channel_type: str, config: Dict[str, Any]) -> BaseNotificationChannel:
        """
        Raises:
            ValueError: unknown channel or invalid configuration
        """
        if channel_type not in cls._channels:
            supported = ", ".join(cls.get_supported_channels())
            raise ValueError(f"Channel '{channel_type}' is not supported. Available channels: {supported}")

        try:
            return cls._channels[channel_type](config)
        except Exception as e:
            logger.error(f"[ChannelFactory] Could not create channel {channel_type}: {e}")
            raise ValueError(f"Could not create channel {channel_type}: {e}")

    @classmethod
    def get_supported_channels(cls) -> list:
        return list(cls._channels.keys())

    @classmethod
    def from_settings(cls) -> Dict[str, BaseNotificationChannel]:
        """Channels whose credentials are configured. Missing credentials just leave the channel out."""
        configs: Dict[str, Optional[Dict[str, Any]]] = {
            "sms": {"api_key": settings.SEMAPHORE_API_KEY, "sender_name": settings.SEMAPHORE_SENDER_NAME}
            if settings.SEMAPHORE_API_KEY else None,
            "email": {"api_key": settings.RESEND_API_KEY, "from_address": settings.RESEND_FROM}
            if settings.RESEND_API_KEY else None,
        }
        channels: Dict[str, BaseNotificationChannel] = {}
        for name, config in configs.items():
            if config is None:
                logger.warning(f"[ChannelFactory] {name} channel not configured")
                continue
            channels[name] = cls.create_channel(name, config)
        return channels
