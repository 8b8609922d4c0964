"""
Password Reset
==============
Completes a password reset once the phone's OTP has been verified.
"""

import structlog

from spendly_auth.config import PasswordPolicy
from spendly_auth.exceptions import UserNotFoundError, ValidationError
from spendly_auth.messaging import mask_phone
from spendly_auth.otp import OtpLifecycleManager, OtpRecord
from spendly_auth.password import PasswordHasher
from spendly_auth.users import UserStore

logger = structlog.get_logger(__name__)


class PasswordResetService:

    def __init__(
        self,
        otp_manager: OtpLifecycleManager,
        user_store: UserStore,
        hasher: PasswordHasher,
        policy: PasswordPolicy = None,
    ):
        self.otp_manager = otp_manager
        self.user_store = user_store
        self.hasher = hasher
        self.policy = policy or PasswordPolicy()

    async def reset_password(self, phone: str, new_password: str) -> None:
        """
        Replace the password of the user owning ``phone``.

        The verified OTP is consumed on success; a second call needs a new OTP.

        Raises:
            ValidationError: missing fields or password too short
            UnauthorizedError: OTP not verified
            ExpiredError: verification older than the consumption window
            UserNotFoundError: the user disappeared after verification
        """
        if not phone or not new_password:
            raise ValidationError(
                "Phone number and new password are required",
                code="RESET_FIELDS_REQUIRED",
            )
        if len(new_password) < self.policy.reset_min_length:
            raise ValidationError(
                f"Password must be at least {self.policy.reset_min_length} characters long",
                code="PASSWORD_TOO_SHORT",
            )

        async def apply(record: OtpRecord) -> None:
            password_hash = await self.hasher.hash(new_password)
            changed = await self.user_store.update_password_by_phone(phone, password_hash)
            if changed == 0:
                logger.warning(
                    "password_reset_user_missing",
                    phone=mask_phone(phone),
                    user_id=record.owner_id,
                )
                raise UserNotFoundError()

        await self.otp_manager.consume(phone, apply)
        logger.info("password_reset", phone=mask_phone(phone))
