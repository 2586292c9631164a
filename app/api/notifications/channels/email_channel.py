from typing import Any, Dict, Optional

import httpx

from .base_channel import BaseNotificationChannel, NotificationResult


class EmailChannel(BaseNotificationChannel):
    """Transactional email through the Resend API."""

    API_URL = "https://api.resend.com/emails"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        if not self.validate_config(config):
            raise ValueError("Invalid email channel configuration: api_key and from_address are required")
        self.api_key = config["api_key"]
        self.from_address = config["from_address"]
        self.timeout = config.get("timeout", 30.0)

    def validate_config(self, config: Dict[str, Any]) -> bool:
        return bool(config.get("api_key")) and bool(config.get("from_address"))

    def get_channel_name(self) -> str:
        return "email"

    async def send(
        self,
        recipient: str,
        title: str,
        message: str,
        channel_metadata: Optional[Dict[str, Any]] = None,
    ) -> NotificationResult:
        payload = {
            "from": self.from_address,
            "to": [recipient],
            "subject": title,
            "text": message,
        }
        if channel_metadata and channel_metadata.get("html"):
            payload["html"] = channel_metadata["html"]

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.API_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            error_msg = f"Email send failed: {e}"
            self._log_error(recipient, error_msg)
            return self._create_error_result(error_msg, {"exception": str(e)})

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            error_msg = f"Email send failed: {error_data.get('message') or f'HTTP {response.status_code}'}"
            self._log_error(recipient, error_msg, error_data)
            return self._create_error_result(error_msg, {"status_code": response.status_code})

        email_id = (response.json() or {}).get("id")
        self._log_success(recipient, email_id)
        return self._create_success_result("Email sent", external_id=email_id)
