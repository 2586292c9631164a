from typing import Any, Dict, Optional

import httpx

from app.utils.phone import normalize_phone
from .base_channel import BaseNotificationChannel, NotificationResult


class SmsChannel(BaseNotificationChannel):
    """SMS through the Semaphore API (Philippine numbers)."""

    API_URL = "https://api.semaphore.co/api/v4/messages"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        if not self.validate_config(config):
            raise ValueError("Invalid SMS channel configuration: api_key is required")
        self.api_key = config["api_key"]
        self.sender_name = config.get("sender_name") or "ARWings"
        self.timeout = config.get("timeout", 30.0)

    def validate_config(self, config: Dict[str, Any]) -> bool:
        return bool(config.get("api_key"))

    def get_channel_name(self) -> str:
        return "sms"

    async def send(
        self,
        recipient: str,
        title: str,
        message: str,
        channel_metadata: Optional[Dict[str, Any]] = None,
    ) -> NotificationResult:
        number = normalize_phone(recipient)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.API_URL,
                    data={
                        "apikey": self.api_key,
                        "number": number,
                        "message": message,
                        "sendername": self.sender_name,
                    },
                )
        except httpx.HTTPError as e:
            error_msg = f"SMS send failed: {e}"
            self._log_error(number, error_msg)
            return self._create_error_result(error_msg, {"exception": str(e)})

        if response.status_code != 200:
            error_msg = f"SMS send failed: HTTP {response.status_code}"
            self._log_error(number, error_msg, {"body": response.text[:500]})
            return self._create_error_result(error_msg, {"status_code": response.status_code})

        data = response.json() if response.text else []
        # Semaphore answers with a list of queued messages
        message_id = None
        if isinstance(data, list) and data:
            message_id = str(data[0].get("message_id") or "") or None
        self._log_success(number, message_id)
        return self._create_success_result("SMS sent", external_id=message_id)
