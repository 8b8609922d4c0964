"""
Application Factory
===================
Builds the FastAPI app for the auth service.

Usage:
    uvicorn spendly_auth.api.app:create_app --factory

    # or
    python -m spendly_auth
"""

import asyncio
import contextlib
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from spendly_auth import __version__
from spendly_auth.config import AuthSettings
from spendly_auth.otp import OtpStore
from spendly_auth.otp.manager import Clock, utc_now
from spendly_auth.password import PasswordHasher
from spendly_auth.sms import SmsProvider
from spendly_auth.structured_logging import RequestLoggingMiddleware, setup_logging
from spendly_auth.users import SqlUserStore, UserStore

from .dependencies import AuthContainer, build_container
from .errors import register_error_handlers
from .health import create_health_router
from .routes import router as auth_router

logger = structlog.get_logger(__name__)


def setup_cors(app: FastAPI, origins: List[str]) -> None:
    if "*" in origins:
        logger.warning("cors_wildcard_configured", origins=origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    logger.info("cors_configured", origins_count=len(origins))


async def purge_loop(container: AuthContainer, interval_seconds: float) -> None:
    """Periodically drop OTP records that can no longer be used."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await container.otp_manager.purge_stale()
        except Exception as e:
            logger.error("otp_purge_failed", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: AuthContainer = app.state.container
    settings = container.settings

    await container.sms_provider.initialize()
    if isinstance(container.user_store, SqlUserStore):
        await container.user_store.create_schema()

    purge_task = None
    if settings.otp_purge_interval_seconds > 0:
        purge_task = asyncio.create_task(
            purge_loop(container, settings.otp_purge_interval_seconds)
        )

    logger.info(
        "service_started",
        service=settings.service_name,
        environment=settings.environment,
        sms_provider=container.sms_provider.name,
    )
    try:
        yield
    finally:
        if purge_task is not None:
            purge_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await purge_task
        await container.sms_provider.close()
        await container.otp_store.close()
        await container.user_store.close()
        logger.info("service_stopped", service=settings.service_name)


def create_app(
    settings: Optional[AuthSettings] = None,
    otp_store: Optional[OtpStore] = None,
    user_store: Optional[UserStore] = None,
    sms_provider: Optional[SmsProvider] = None,
    hasher: Optional[PasswordHasher] = None,
    clock: Clock = utc_now,
    configure_logging: bool = False,
) -> FastAPI:
    """
    Create the auth service application.

    Args:
        settings: Defaults to ``AuthSettings.from_env()``
        otp_store, user_store, sms_provider, hasher: Replace the instances
            built from settings
        clock: Time source for OTP expiry and cooldown
        configure_logging: Install the structlog configuration
    """
    settings = settings or AuthSettings.from_env()
    if configure_logging:
        setup_logging(settings.service_name, settings.log_level, settings.log_json)

    container = build_container(
        settings,
        otp_store=otp_store,
        user_store=user_store,
        sms_provider=sms_provider,
        hasher=hasher,
        clock=clock,
    )

    app = FastAPI(
        title="Spendly Auth",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    register_error_handlers(app)
    setup_cors(app, settings.cors_origins)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(auth_router)
    app.include_router(
        create_health_router(
            service_name=settings.service_name,
            version=__version__,
            checks={
                "users": container.user_store.ping,
                "otp_store": container.otp_store.ping,
                "sms": container.sms_provider.health_check,
            },
            critical=("users", "otp_store"),
        )
    )
    return app


def main() -> None:
    import uvicorn

    settings = AuthSettings.from_env()
    app = create_app(settings, configure_logging=True)
    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        log_config=None,
    )
