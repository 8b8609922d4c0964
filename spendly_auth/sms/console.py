"""
Logging SMS Provider
====================
Non-sending fallback that writes the message to the log.

Only usable outside production; in production it refuses every message so a
missing provider configuration surfaces as a delivery failure.
"""

import structlog

from spendly_auth.messaging import mask_phone

from .base import SendResult, SmsProvider

logger = structlog.get_logger(__name__)


class LoggingProvider(SmsProvider):

    name = "console"
    channel = "console"

    def __init__(self, production: bool = False):
        self.production = production

    async def send(self, to: str, body: str) -> SendResult:
        if self.production:
            logger.warning(
                "sms_provider_not_configured",
                hint="set TWILIO_* or AWS_* environment variables",
            )
            return SendResult(
                success=False,
                provider=self.name,
                error_message="SMS service not configured for production",
            )

        logger.info("dev_sms", to=mask_phone(to), body=body)
        return SendResult(success=True, provider=self.name)
