"""
AWS SNS SMS Provider
====================
Secondary SMS provider publishing transactional SMS through Amazon SNS.
"""

import asyncio
from typing import Any, Optional

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from .base import SendResult, SmsProvider

logger = structlog.get_logger(__name__)


class SnsProvider(SmsProvider):
    """Send SMS with ``sns.publish``. boto3 is blocking, so calls run in an executor."""

    name = "aws-sns"
    channel = "sms"

    def __init__(
        self,
        access_key_id: str,
        secret_access_key: str,
        region: str = "ap-south-1",
        sender_id: str = "SPENDLY",
        client: Optional[Any] = None,
    ):
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.region = region
        self.sender_id = sender_id
        self._client = client

    async def initialize(self) -> None:
        if self._client is None:
            import boto3

            self._client = boto3.client(
                "sns",
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                region_name=self.region,
            )
        await super().initialize()

    def _publish(self, to: str, body: str) -> dict:
        return self._client.publish(
            PhoneNumber=to,
            Message=body,
            MessageAttributes={
                "AWS.SNS.SMS.SenderID": {
                    "DataType": "String",
                    "StringValue": self.sender_id,
                },
                "AWS.SNS.SMS.SMSType": {
                    "DataType": "String",
                    "StringValue": "Transactional",
                },
            },
        )

    async def send(self, to: str, body: str) -> SendResult:
        if self._client is None:
            raise RuntimeError("SNS provider not initialized")

        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, self._publish, to, body)
        except (BotoCoreError, ClientError) as e:
            logger.warning("sns_publish_failed", error=str(e))
            return SendResult(
                success=False,
                provider=self.name,
                error_message=str(e),
            )

        logger.info("sns_sms_sent", message_id=result.get("MessageId"))
        return SendResult(
            success=True,
            provider=self.name,
            provider_message_id=result.get("MessageId"),
            raw_response=result,
        )
