"""
OTP Lifecycle Manager
=====================
Issues, verifies and consumes phone-bound OTPs.

State machine per phone:

    (none) --request_otp--> issued --verify_otp(match)--> verified --consume--> (none)
                              |                              |
                              +-- expiry / 3 failures -------+-- consumption window lapsed --> (none)

All reads and writes for a phone happen under ``store.lock(phone)``.
"""

from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from spendly_auth.exceptions import (
    AttemptsExceededError,
    DeliveryError,
    ExpiredError,
    InvalidCodeError,
    OtpNotFoundError,
    RateLimitError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
)
from spendly_auth.messaging import (
    is_valid_mobile,
    is_valid_otp_format,
    mask_phone,
    otp_message,
    to_e164,
)
from spendly_auth.sms import SmsSender
from spendly_auth.users import UserStore

from .hashing import generate_otp, generate_salt, hash_otp, verify_otp_hash
from .models import OTPConfig, OtpIssued, OtpRecord, OtpVerified
from .store import OtpStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_phone(phone: str) -> None:
    if not phone:
        raise ValidationError("Phone number is required", code="PHONE_REQUIRED")
    if not is_valid_mobile(phone):
        raise ValidationError(
            "Invalid phone number format. Please enter a valid 10-digit Indian mobile number.",
            code="INVALID_PHONE",
        )


class OtpLifecycleManager:
    """Owns OTP state for password recovery."""

    def __init__(
        self,
        store: OtpStore,
        user_store: UserStore,
        sms_sender: SmsSender,
        hash_secret: str,
        config: Optional[OTPConfig] = None,
        app_name: str = "Spendly",
        country_code: str = "+91",
        clock: Clock = utc_now,
    ):
        if not hash_secret:
            raise ValueError("OTP hash secret must not be empty")
        self.store = store
        self.user_store = user_store
        self.sms_sender = sms_sender
        self.hash_secret = hash_secret
        self.config = config or OTPConfig()
        self.app_name = app_name
        self.country_code = country_code
        self.clock = clock

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def _cooldown_remaining(self, record: OtpRecord, now: datetime) -> float:
        anchor = record.cooldown_anchor()
        if anchor is None:
            # Records without a send time carry no cooldown.
            logger.warning("otp_cooldown_timestamp_missing", phone=mask_phone(record.phone))
            return 0
        elapsed = (now - anchor).total_seconds()
        return self.config.cooldown_seconds - elapsed

    async def request_otp(self, phone: str) -> OtpIssued:
        """
        Issue a new OTP for ``phone`` and deliver it by SMS.

        Raises:
            ValidationError: phone is malformed
            RateLimitError: previous OTP sent less than the cooldown ago
            UserNotFoundError: no user owns this phone
            DeliveryError: SMS could not be sent; no record is left behind
        """
        validate_phone(phone)

        async with self.store.lock(phone):
            now = self.clock()

            existing = await self.store.get(phone)
            if existing is not None:
                remaining = self._cooldown_remaining(existing, now)
                if remaining > 0:
                    logger.info("otp_cooldown_active", phone=mask_phone(phone))
                    raise RateLimitError(retry_after=int(remaining) + 1)

            user = await self.user_store.find_by_phone(phone)
            if user is None:
                logger.info("otp_requested_for_unregistered_phone", phone=mask_phone(phone))
                raise UserNotFoundError(
                    "Phone number not registered. Please register first.",
                    code="PHONE_NOT_REGISTERED",
                )

            code = generate_otp(self.config.length)
            salt = generate_salt()
            record = OtpRecord(
                phone=phone,
                hashed_code=hash_otp(code, salt, self.hash_secret),
                salt=salt,
                owner_id=user.id,
                created_at=now,
                expires_at=now + timedelta(seconds=self.config.expiry_seconds),
            )
            await self.store.set(record)
            logger.info("otp_generated", phone=mask_phone(phone), user_id=user.id)

            message = otp_message(code, self.app_name, self.config.expiry_seconds)
            try:
                result = await self.sms_sender.send(to_e164(phone, self.country_code), message)
            except BaseException as e:
                # includes cancellation while the provider call is in flight
                await self.store.delete(phone)
                logger.warning(
                    "otp_rolled_back",
                    phone=mask_phone(phone),
                    reason=type(e).__name__,
                )
                if isinstance(e, DeliveryError) or not isinstance(e, Exception):
                    raise
                raise DeliveryError() from e

            record.sent_at = self.clock()
            await self.store.set(record)

            logger.info(
                "otp_sent",
                phone=mask_phone(phone),
                provider=result.provider,
            )
            return OtpIssued(
                channel=self.sms_sender.channel,
                expires_in=self.config.expiry_seconds,
            )

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    async def verify_otp(self, phone: str, code: str) -> OtpVerified:
        """
        Check a submitted code.

        Raises, in order of precedence:
            ValidationError, OtpNotFoundError, ExpiredError,
            AttemptsExceededError, InvalidCodeError
        """
        if not phone or not code:
            raise ValidationError("Phone number and OTP are required", code="OTP_FIELDS_REQUIRED")
        if not is_valid_otp_format(code):
            raise ValidationError("OTP must be a 6-digit number", code="INVALID_OTP_FORMAT")

        async with self.store.lock(phone):
            now = self.clock()
            record = await self.store.get(phone)

            if record is None:
                logger.info("otp_verify_no_record", phone=mask_phone(phone))
                raise OtpNotFoundError()

            if record.is_expired(now):
                await self.store.delete(phone)
                logger.info("otp_verify_expired", phone=mask_phone(phone))
                raise ExpiredError()

            if record.attempts >= self.config.max_attempts:
                await self.store.delete(phone)
                logger.warning("otp_verify_attempts_exhausted", phone=mask_phone(phone))
                raise AttemptsExceededError()

            if not verify_otp_hash(code, record.salt, record.hashed_code, self.hash_secret):
                record.attempts += 1
                await self.store.set(record)
                remaining = record.attempts_remaining(self.config.max_attempts)
                logger.warning(
                    "otp_verify_mismatch",
                    phone=mask_phone(phone),
                    attempt=record.attempts,
                    max_attempts=self.config.max_attempts,
                )
                raise InvalidCodeError(attempts_remaining=remaining)

            record.mark_verified(now)
            await self.store.set(record)
            logger.info("otp_verified", phone=mask_phone(phone), user_id=record.owner_id)
            return OtpVerified(owner_id=record.owner_id, verified_at=record.verified_at)

    # ------------------------------------------------------------------
    # Consumption
    # ------------------------------------------------------------------

    async def consume(self, phone: str, action: Callable[[OtpRecord], Awaitable[T]]) -> T:
        """
        Run ``action`` gated on a verified OTP, then delete the record.

        The record is kept if ``action`` raises, so the user can retry within
        the consumption window.

        Raises:
            UnauthorizedError: no record, or the record is not verified
            ExpiredError: verification is older than the consumption window
        """
        async with self.store.lock(phone):
            now = self.clock()
            record = await self.store.get(phone)

            if record is None or not record.verified:
                logger.info("otp_consume_not_verified", phone=mask_phone(phone))
                raise UnauthorizedError()

            if record.consumption_expired(now, self.config.consumption_window_seconds):
                await self.store.delete(phone)
                logger.info("otp_consume_window_expired", phone=mask_phone(phone))
                raise ExpiredError(
                    "OTP verification expired. Please request a new OTP.",
                    code="OTP_VERIFICATION_EXPIRED",
                )

            result = await action(record)

            await self.store.delete(phone)
            logger.info("otp_consumed", phone=mask_phone(phone), user_id=record.owner_id)
            return result

    async def purge_stale(self) -> int:
        return await self.store.purge_stale(self.clock(), self.config)
