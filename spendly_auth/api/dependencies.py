"""
Service Wiring
==============
Builds the stores, SMS sender and services for one application instance.

The container lives on ``app.state.container``; route handlers reach it
through ``get_container``.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
import structlog

from spendly_auth.config import DEV_JWT_SECRET, AuthSettings
from spendly_auth.database import create_async_engine
from spendly_auth.otp import InMemoryOtpStore, OtpLifecycleManager, OtpStore, RedisOtpStore
from spendly_auth.otp.manager import Clock, utc_now
from spendly_auth.password import PasswordHasher
from spendly_auth.services import AuthService, PasswordResetService
from spendly_auth.sms import SmsProvider, SmsSender, create_sms_provider
from spendly_auth.tokens import TokenIssuer
from spendly_auth.users import InMemoryUserStore, SqlUserStore, UserStore

logger = structlog.get_logger(__name__)


@dataclass
class AuthContainer:
    settings: AuthSettings
    otp_store: OtpStore
    user_store: UserStore
    sms_provider: SmsProvider
    otp_manager: OtpLifecycleManager
    auth_service: AuthService
    reset_service: PasswordResetService


def create_otp_store(settings: AuthSettings) -> OtpStore:
    backend = settings.otp_store_backend
    if backend == "memory":
        return InMemoryOtpStore()
    if backend == "redis":
        return RedisOtpStore.from_url(
            settings.redis_url,
            ttl_seconds=settings.otp.record_ttl_seconds,
        )
    raise ValueError(f"Unknown OTP store backend: {backend}")


def create_user_store(settings: AuthSettings) -> UserStore:
    if settings.database_url:
        return SqlUserStore(create_async_engine(settings.database_url))
    if settings.is_production:
        raise ValueError("DATABASE_URL is required in production")
    logger.warning("user_store_in_memory")
    return InMemoryUserStore()


def build_container(
    settings: AuthSettings,
    otp_store: Optional[OtpStore] = None,
    user_store: Optional[UserStore] = None,
    sms_provider: Optional[SmsProvider] = None,
    hasher: Optional[PasswordHasher] = None,
    clock: Clock = utc_now,
) -> AuthContainer:
    """Wire everything from ``settings``; any argument given replaces the default."""
    if settings.is_production and settings.jwt_secret == DEV_JWT_SECRET:
        raise ValueError("JWT_SECRET must be set in production")

    otp_store = otp_store or create_otp_store(settings)
    user_store = user_store or create_user_store(settings)
    sms_provider = sms_provider or create_sms_provider(settings)
    hasher = hasher or PasswordHasher()

    sender = SmsSender(sms_provider, timeout_seconds=settings.sms.timeout_seconds)
    otp_manager = OtpLifecycleManager(
        store=otp_store,
        user_store=user_store,
        sms_sender=sender,
        hash_secret=settings.otp_hash_secret,
        config=settings.otp,
        app_name=settings.app_name,
        country_code=settings.sms.country_code,
        clock=clock,
    )
    tokens = TokenIssuer(
        settings.jwt_secret,
        ttl_seconds=settings.jwt_expires_in_seconds,
        algorithm=settings.jwt_algorithm,
    )

    return AuthContainer(
        settings=settings,
        otp_store=otp_store,
        user_store=user_store,
        sms_provider=sms_provider,
        otp_manager=otp_manager,
        auth_service=AuthService(user_store, hasher, tokens, settings.passwords),
        reset_service=PasswordResetService(otp_manager, user_store, hasher, settings.passwords),
    )


def get_container(request: Request) -> AuthContainer:
    return request.app.state.container
