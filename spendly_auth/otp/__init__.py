"""
OTP Lifecycle
=============
Phone-bound one-time passwords: issuance, verification and one-shot consumption.
"""

from .models import OTPConfig, OtpRecord, OtpIssued, OtpVerified
from .hashing import generate_otp, generate_salt, hash_otp, verify_otp_hash
from .store import OtpStore, InMemoryOtpStore, KeyedLock
from .redis_store import RedisOtpStore
from .manager import OtpLifecycleManager, validate_phone, utc_now

__all__ = [
    # Models
    "OTPConfig",
    "OtpRecord",
    "OtpIssued",
    "OtpVerified",
    # Hashing
    "generate_otp",
    "generate_salt",
    "hash_otp",
    "verify_otp_hash",
    # Stores
    "OtpStore",
    "InMemoryOtpStore",
    "RedisOtpStore",
    "KeyedLock",
    # Manager
    "OtpLifecycleManager",
    "validate_phone",
    "utc_now",
]
