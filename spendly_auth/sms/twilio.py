"""
Twilio SMS Provider
===================
Primary SMS provider using the Twilio REST API.
"""

from base64 import b64encode
from typing import Optional

import httpx
import structlog

from .base import SendResult, SmsProvider

logger = structlog.get_logger(__name__)


class TwilioProvider(SmsProvider):
    """Send SMS through Twilio's Messages endpoint."""

    name = "twilio"
    channel = "sms"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout: float = 10.0,
        base_url: Optional[str] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self.base_url = base_url or f"https://api.twilio.com/2010-04-01/Accounts/{account_sid}"
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create HTTP client with auth."""
        auth = b64encode(f"{self.account_sid}:{self.auth_token}".encode()).decode()
        self._client = httpx.AsyncClient(
            headers={"Authorization": f"Basic {auth}"},
            timeout=self.timeout,
        )
        await super().initialize()

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def send(self, to: str, body: str) -> SendResult:
        if not self._client:
            raise RuntimeError("Twilio provider not initialized")

        response = await self._client.post(
            f"{self.base_url}/Messages.json",
            data={"To": to, "From": self.from_number, "Body": body},
        )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code in (200, 201):
            logger.info("twilio_sms_sent", sid=data.get("sid"))
            return SendResult(
                success=True,
                provider=self.name,
                provider_message_id=data.get("sid"),
                raw_response=data,
            )

        logger.warning(
            "twilio_sms_rejected",
            status_code=response.status_code,
            error_code=data.get("code"),
        )
        return SendResult(
            success=False,
            provider=self.name,
            error_code=str(data.get("code", response.status_code)),
            error_message=data.get("message", "Unknown error"),
            raw_response=data,
        )

    async def health_check(self) -> bool:
        if not self._client:
            return False
        try:
            response = await self._client.get(f"{self.base_url}.json")
            return response.status_code == 200
        except httpx.HTTPError:
            return False
