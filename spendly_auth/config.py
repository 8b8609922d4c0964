"""
Service Configuration
=====================
Environment-driven settings for the auth service.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from spendly_auth.otp.models import OTPConfig

PRODUCTION_ENVS = ("production", "prod")
DEV_JWT_SECRET = "spendly-dev-secret-change-me"


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PasswordPolicy:
    """Minimum password lengths. Reset is stricter than registration."""
    registration_min_length: int = 6
    reset_min_length: int = 8


@dataclass
class SmsSettings:
    """SMS delivery settings."""
    provider: Optional[str] = None  # twilio / sns / console; None = auto
    country_code: str = "+91"
    sender_id: str = "SPENDLY"
    timeout_seconds: float = 10.0
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_region: str = "ap-south-1"


@dataclass
class AuthSettings:
    """Top-level settings, normally built with ``AuthSettings.from_env()``."""
    service_name: str = "spendly-auth"
    app_name: str = "Spendly"
    environment: str = "development"
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_in_seconds: int = 7 * 24 * 60 * 60
    otp_hash_secret: str = DEV_JWT_SECRET
    otp: OTPConfig = field(default_factory=OTPConfig)
    passwords: PasswordPolicy = field(default_factory=PasswordPolicy)
    sms: SmsSettings = field(default_factory=SmsSettings)
    otp_store_backend: str = "memory"
    otp_purge_interval_seconds: int = 300
    redis_url: str = "redis://localhost:6379/0"
    database_url: Optional[str] = None
    log_level: str = "INFO"
    log_json: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AuthSettings":
        env = os.environ if environ is None else environ

        environment = env.get("APP_ENV") or env.get("NODE_ENV") or "development"
        is_production = environment.lower() in PRODUCTION_ENVS
        jwt_secret = env.get("JWT_SECRET", DEV_JWT_SECRET)

        sms = SmsSettings(
            provider=(env.get("SMS_PROVIDER") or "").lower() or None,
            country_code=env.get("SMS_COUNTRY_CODE", "+91"),
            sender_id=env.get("SMS_SENDER_ID", "SPENDLY"),
            timeout_seconds=float(env.get("SMS_TIMEOUT_SECONDS", "10")),
            twilio_account_sid=env.get("TWILIO_ACCOUNT_SID", ""),
            twilio_auth_token=env.get("TWILIO_AUTH_TOKEN", ""),
            twilio_phone_number=env.get("TWILIO_PHONE_NUMBER", ""),
            aws_access_key_id=env.get("AWS_ACCESS_KEY_ID", ""),
            aws_secret_access_key=env.get("AWS_SECRET_ACCESS_KEY", ""),
            aws_region=env.get("AWS_REGION", "ap-south-1"),
        )

        origins_str = env.get("CORS_ORIGINS", "http://localhost:3000")

        return cls(
            service_name=env.get("SERVICE_NAME", "spendly-auth"),
            app_name=env.get("APP_NAME", "Spendly"),
            environment=environment,
            jwt_secret=jwt_secret,
            jwt_algorithm=env.get("JWT_ALGORITHM", "HS256"),
            jwt_expires_in_seconds=int(env.get("JWT_EXPIRES_IN_SECONDS", str(7 * 24 * 60 * 60))),
            otp_hash_secret=env.get("OTP_HASH_SECRET") or jwt_secret,
            sms=sms,
            otp_store_backend=env.get("OTP_STORE_BACKEND", "memory").lower(),
            otp_purge_interval_seconds=int(env.get("OTP_PURGE_INTERVAL_SECONDS", "300")),
            redis_url=env.get("REDIS_URL", "redis://localhost:6379/0"),
            database_url=env.get("DATABASE_URL") or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool(env.get("LOG_JSON"), is_production),
            cors_origins=[o.strip() for o in origins_str.split(",") if o.strip()],
        )
