from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.utils.logger import logger


class NotificationResult:
    """Outcome of one send attempt."""

    def __init__(
        self,
        success: bool,
        message: Optional[str] = None,
        error_details: Optional[Dict[str, Any]] = None,
        external_id: Optional[str] = None,
    ):
        self.success = success
        self.message = message
        self.error_details = error_details
        self.external_id = external_id
        self.sent_at = datetime.now(timezone.utc) if success else None


class BaseNotificationChannel(ABC):
    """Base class for outbound customer notification channels."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    @abstractmethod
    async def send(
        self,
        recipient: str,
        title: str,
        message: str,
        channel_metadata: Optional[Dict[str, Any]] = None,
    ) -> NotificationResult:
        """
        Sends one notification.

        Args:
            recipient: phone number or email address
            title: subject line (ignored by channels without one)
            message: body text
            channel_metadata: channel specific extras

        Returns:
            NotificationResult; provider failures are reported here, not raised
        """

    @abstractmethod
    def validate_config(self, config: Dict[str, Any]) -> bool:
        pass

    @abstractmethod
    def get_channel_name(self) -> str:
        pass

    def _log_success(self, recipient: str, external_id: Optional[str] = None):
        suffix = f" (id={external_id})" if external_id else ""
        logger.info(f"[{self.get_channel_name().upper()}] Sent to {recipient}{suffix}")

    def _log_error(self, recipient: str, error: str, details: Optional[Dict[str, Any]] = None):
        logger.error(f"[{self.get_channel_name().upper()}] Failed to send to {recipient}: {error}")
        if details:
            logger.error(f"[{self.get_channel_name().upper()}] Error details: {details}")

    def _create_error_result(self, error: str, details: Optional[Dict[str, Any]] = None) -> NotificationResult:
        return NotificationResult(success=False, message=error, error_details=details)

    def _create_success_result(self, message: str = "Sent", external_id: Optional[str] = None) -> NotificationResult:
        return NotificationResult(success=True, message=message, external_id=external_id)
