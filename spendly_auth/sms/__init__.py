"""
SMS Delivery
============
Provider variants (Twilio, AWS SNS, logging fallback) and the bounded-time sender.
"""

from .base import SendResult, SmsProvider
from .console import LoggingProvider
from .factory import create_sms_provider
from .sender import SmsSender
from .sns import SnsProvider
from .twilio import TwilioProvider

__all__ = [
    "SendResult",
    "SmsProvider",
    "LoggingProvider",
    "SnsProvider",
    "TwilioProvider",
    "SmsSender",
    "create_sms_provider",
]
