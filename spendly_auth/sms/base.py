"""
SMS Provider Base
=================
Delivery provider capability shared by all SMS backends.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class SendResult:
    """Result of a send operation."""
    success: bool
    provider: str
    provider_message_id: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None


class SmsProvider(ABC):
    """
    Abstract base class for SMS delivery providers.

    ``channel`` is what clients see: "sms" when a message really leaves the
    system, "console" for the development fallback.
    """

    name: str = "base"
    channel: str = "sms"

    async def initialize(self) -> None:
        """Create clients. Called once at startup."""
        logger.info("sms_provider_initialized", provider=self.name)

    async def close(self) -> None:
        """Release clients. Called once at shutdown."""
        logger.info("sms_provider_closed", provider=self.name)

    @abstractmethod
    async def send(self, to: str, body: str) -> SendResult:
        """
        Send a text message.

        Args:
            to: Recipient in E.164 format
            body: Message text

        Returns:
            SendResult; providers may also raise on transport errors
        """

    async def health_check(self) -> bool:
        return True
