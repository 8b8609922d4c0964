"""
OTP Store
=========
Key-value storage for OTP records, keyed by phone number.

Callers mutate a phone's record only inside ``store.lock(phone)``, which
serializes concurrent requests for the same phone. Different phones never
contend.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Dict, Optional

import structlog

from .models import OTPConfig, OtpRecord

logger = structlog.get_logger(__name__)


class OtpStore(ABC):
    """Storage interface for OTP records."""

    @abstractmethod
    async def get(self, phone: str) -> Optional[OtpRecord]:
        ...

    @abstractmethod
    async def set(self, record: OtpRecord) -> None:
        """Store ``record``, replacing any record for the same phone."""

    @abstractmethod
    async def delete(self, phone: str) -> None:
        ...

    @abstractmethod
    def lock(self, phone: str):
        """Async context manager holding the per-phone lock."""

    async def purge_stale(self, now: datetime, config: OTPConfig) -> int:
        """Drop records that can no longer be used. Returns the number removed."""
        return 0

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class KeyedLock:
    """
    Registry of ``asyncio.Lock`` objects, one per key.

    A key's lock is dropped once no task holds or waits on it, so the
    registry does not grow with the number of phones ever seen.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                self._locks.pop(key, None)

    def __len__(self) -> int:
        return len(self._locks)


class InMemoryOtpStore(OtpStore):
    """
    Process-local OTP store.

    Records do not survive a restart. Use RedisOtpStore when several
    instances serve the same users.
    """

    def __init__(self):
        self._records: Dict[str, OtpRecord] = {}
        self._locks = KeyedLock()

    async def get(self, phone: str) -> Optional[OtpRecord]:
        return self._records.get(phone)

    async def set(self, record: OtpRecord) -> None:
        self._records[record.phone] = record

    async def delete(self, phone: str) -> None:
        self._records.pop(phone, None)

    def lock(self, phone: str):
        return self._locks.acquire(phone)

    async def purge_stale(self, now: datetime, config: OTPConfig) -> int:
        stale = [
            phone for phone, record in self._records.items()
            if record.is_stale(now, config)
        ]
        removed = 0
        for phone in stale:
            async with self.lock(phone):
                record = self._records.get(phone)
                if record is not None and record.is_stale(now, config):
                    del self._records[phone]
                    removed += 1
        if removed:
            logger.info("otp_records_purged", count=removed)
        return removed

    def __len__(self) -> int:
        return len(self._records)
