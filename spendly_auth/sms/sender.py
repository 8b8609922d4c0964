"""
SMS Sender
==========
Bounded-time SMS dispatch on top of a single configured provider.
"""

import asyncio

import httpx
import structlog

from spendly_auth.exceptions import DeliveryError
from spendly_auth.messaging import mask_phone

from .base import SendResult, SmsProvider

logger = structlog.get_logger(__name__)


class SmsSender:
    """
    Send messages through ``provider`` with a hard timeout.

    Every failure mode (timeout, transport error, provider rejection) is
    raised as DeliveryError.
    """

    def __init__(self, provider: SmsProvider, timeout_seconds: float = 10.0):
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    @property
    def channel(self) -> str:
        return self.provider.channel

    async def send(self, to: str, body: str) -> SendResult:
        try:
            result = await asyncio.wait_for(
                self.provider.send(to, body),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                "sms_send_timeout",
                provider=self.provider.name,
                to=mask_phone(to),
                timeout=self.timeout_seconds,
            )
            raise DeliveryError(provider=self.provider.name) from e
        except (httpx.HTTPError, OSError, RuntimeError) as e:
            logger.error(
                "sms_send_error",
                provider=self.provider.name,
                to=mask_phone(to),
                error=str(e),
            )
            raise DeliveryError(provider=self.provider.name) from e

        if not result.success:
            logger.error(
                "sms_send_failed",
                provider=self.provider.name,
                to=mask_phone(to),
                error_code=result.error_code,
                error=result.error_message,
            )
            raise DeliveryError(provider=self.provider.name)

        return result
