"""
Redis OTP Store
===============
Redis-backed OTP store for multi-instance deployments.

Records are JSON documents under ``otp:record:{phone}`` with a TTL covering
the code validity plus the consumption window. Per-phone serialization uses
a Redis lock under ``otp:lock:{phone}``.
"""

import json
from typing import Optional

import structlog

from spendly_auth.exceptions import StoreError

from .models import OtpRecord
from .store import OtpStore

logger = structlog.get_logger(__name__)


class RedisOtpStore(OtpStore):
    """OTP store on top of an async Redis client (``redis.asyncio``)."""

    def __init__(
        self,
        redis_client,
        ttl_seconds: int = 900,
        lock_timeout: float = 30.0,
        blocking_timeout: float = 15.0,
        prefix: str = "otp",
    ):
        """
        Args:
            redis_client: ``redis.asyncio.Redis`` instance
            ttl_seconds: Record lifetime in Redis
            lock_timeout: Seconds before a held lock auto-expires
            blocking_timeout: Seconds to wait for a lock before failing
            prefix: Key prefix
        """
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.lock_timeout = lock_timeout
        self.blocking_timeout = blocking_timeout
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisOtpStore":
        import redis.asyncio as redis

        return cls(redis.from_url(url, decode_responses=True), **kwargs)

    def _record_key(self, phone: str) -> str:
        return f"{self.prefix}:record:{phone}"

    def _lock_key(self, phone: str) -> str:
        return f"{self.prefix}:lock:{phone}"

    async def get(self, phone: str) -> Optional[OtpRecord]:
        raw = await self.redis.get(self._record_key(phone))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            return OtpRecord.from_dict(json.loads(raw))
        except (ValueError, KeyError) as e:
            logger.error("otp_record_corrupt", error=str(e))
            raise StoreError() from e

    async def set(self, record: OtpRecord) -> None:
        await self.redis.set(
            self._record_key(record.phone),
            json.dumps(record.to_dict()),
            ex=self.ttl_seconds,
        )

    async def delete(self, phone: str) -> None:
        await self.redis.delete(self._record_key(phone))

    def lock(self, phone: str):
        return self.redis.lock(
            self._lock_key(phone),
            timeout=self.lock_timeout,
            blocking_timeout=self.blocking_timeout,
        )

    async def ping(self) -> bool:
        return bool(await self.redis.ping())

    async def close(self) -> None:
        await self.redis.aclose()
