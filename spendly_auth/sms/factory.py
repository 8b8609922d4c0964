"""
Provider Selection
==================
Chooses the SMS provider once, at startup, from configuration.
"""

from typing import TYPE_CHECKING

import structlog

from .base import SmsProvider
from .console import LoggingProvider
from .sns import SnsProvider
from .twilio import TwilioProvider

if TYPE_CHECKING:
    from spendly_auth.config import AuthSettings

logger = structlog.get_logger(__name__)


def create_sms_provider(settings: "AuthSettings") -> SmsProvider:
    """
    Build the SMS provider for this process.

    An explicit ``SMS_PROVIDER`` wins. Otherwise production picks Twilio when
    its account SID is set, then SNS when AWS keys are set, and falls back to
    the logging provider (which refuses to send in production). Outside
    production the logging provider is always used.
    """
    sms = settings.sms
    choice = sms.provider

    if choice is None:
        if settings.is_production and sms.twilio_account_sid:
            choice = "twilio"
        elif settings.is_production and sms.aws_access_key_id:
            choice = "sns"
        else:
            choice = "console"

    if choice == "twilio":
        provider: SmsProvider = TwilioProvider(
            account_sid=sms.twilio_account_sid,
            auth_token=sms.twilio_auth_token,
            from_number=sms.twilio_phone_number,
            timeout=sms.timeout_seconds,
        )
    elif choice in ("sns", "aws-sns"):
        provider = SnsProvider(
            access_key_id=sms.aws_access_key_id,
            secret_access_key=sms.aws_secret_access_key,
            region=sms.aws_region,
            sender_id=sms.sender_id,
        )
    elif choice == "console":
        provider = LoggingProvider(production=settings.is_production)
    else:
        raise ValueError(f"Unknown SMS provider: {choice}")

    logger.info(
        "sms_provider_selected",
        provider=provider.name,
        environment=settings.environment,
    )
    return provider
