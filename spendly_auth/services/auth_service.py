"""
Registration and Login
======================
Credential flows that issue session tokens.
"""

from dataclasses import dataclass
from typing import Any, Dict

import structlog

from spendly_auth.config import PasswordPolicy
from spendly_auth.exceptions import ConflictError, CredentialError, ValidationError
from spendly_auth.messaging import is_valid_mobile, mask_phone
from spendly_auth.password import PasswordHasher
from spendly_auth.tokens import TokenIssuer
from spendly_auth.users import UserRecord, UserStore

logger = structlog.get_logger(__name__)


@dataclass
class AuthResult:
    token: str
    user: Dict[str, Any]


class AuthService:

    def __init__(
        self,
        user_store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        policy: PasswordPolicy = None,
    ):
        self.user_store = user_store
        self.hasher = hasher
        self.tokens = tokens
        self.policy = policy or PasswordPolicy()

    def _issue(self, user_id: int, email: str) -> str:
        return self.tokens.sign({"userId": user_id, "email": email})

    async def register(self, email: str, password: str, phone: str, name: str = "") -> AuthResult:
        if not email or not password:
            raise ValidationError("Email and password are required", code="FIELDS_REQUIRED")
        if not phone:
            raise ValidationError("Phone number is required", code="PHONE_REQUIRED")
        if not is_valid_mobile(phone):
            raise ValidationError(
                "Phone number must be a valid 10-digit Indian mobile number",
                code="INVALID_PHONE",
            )
        if len(password) < self.policy.registration_min_length:
            raise ValidationError(
                f"Password must be at least {self.policy.registration_min_length} characters long",
                code="PASSWORD_TOO_SHORT",
            )

        if await self.user_store.find_by_phone_or_email(phone, email) is not None:
            raise ConflictError()

        password_hash = await self.hasher.hash(password)
        user_id = await self.user_store.insert_user(email, password_hash, name or "", phone)

        logger.info("user_registered", user_id=user_id, phone=mask_phone(phone))
        user = UserRecord(
            id=user_id,
            email=email,
            password_hash=password_hash,
            name=name or "",
            phone=phone,
        )
        return AuthResult(token=self._issue(user_id, email), user=user.public_dict())

    async def login(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            raise ValidationError("Email and password are required", code="CREDENTIALS_REQUIRED")

        user = await self.user_store.find_by_email(email)
        if user is None or not await self.hasher.verify(password, user.password_hash):
            logger.info("login_failed")
            raise CredentialError()

        if user.phone and self.hasher.needs_rehash(user.password_hash):
            upgraded = await self.hasher.hash(password)
            await self.user_store.update_password_by_phone(user.phone, upgraded)
            logger.info("password_hash_upgraded", user_id=user.id)

        logger.info("user_logged_in", user_id=user.id)
        return AuthResult(
            token=self._issue(user.id, user.email),
            user=user.public_dict(include_salary=True),
        )
