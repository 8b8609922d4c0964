"""
Spendly Auth
============
Phone-OTP password recovery and credential auth for Spendly.

Usage:
    from spendly_auth import AuthSettings, OtpLifecycleManager
    from spendly_auth.api import create_app

    app = create_app(AuthSettings.from_env())
"""

__version__ = "0.1.0"

from .exceptions import (
    AuthError,
    ValidationError,
    NotFoundError,
    UserNotFoundError,
    OtpNotFoundError,
    RateLimitError,
    ExpiredError,
    AttemptsExceededError,
    InvalidCodeError,
    UnauthorizedError,
    DeliveryError,
    ConflictError,
    CredentialError,
    StoreError,
)
from .config import AuthSettings, PasswordPolicy, SmsSettings
from .otp import OTPConfig, OtpLifecycleManager, InMemoryOtpStore, RedisOtpStore
from .structured_logging import setup_logging

__all__ = [
    "__version__",
    # Errors
    "AuthError",
    "ValidationError",
    "NotFoundError",
    "UserNotFoundError",
    "OtpNotFoundError",
    "RateLimitError",
    "ExpiredError",
    "AttemptsExceededError",
    "InvalidCodeError",
    "UnauthorizedError",
    "DeliveryError",
    "ConflictError",
    "CredentialError",
    "StoreError",
    # Configuration
    "AuthSettings",
    "PasswordPolicy",
    "SmsSettings",
    # OTP
    "OTPConfig",
    "OtpLifecycleManager",
    "InMemoryOtpStore",
    "RedisOtpStore",
    # Logging
    "setup_logging",
]
