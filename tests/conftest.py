"""
Shared fixtures: a controllable clock, a recording SMS provider and
cheap password hashing.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import pytest
import pytest_asyncio

from spendly_auth.otp import InMemoryOtpStore, OTPConfig, OtpLifecycleManager
from spendly_auth.password import PasswordHasher
from spendly_auth.sms import SendResult, SmsProvider, SmsSender
from spendly_auth.users import InMemoryUserStore

HASH_SECRET = "test-otp-secret"
PHONE = "9876543210"
EMAIL = "asha@example.com"
PASSWORD = "secret1"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingSmsProvider(SmsProvider):
    """Captures outgoing messages instead of sending them."""

    name = "recording"
    channel = "sms"

    def __init__(self, fail: bool = False, error: Optional[BaseException] = None):
        self.fail = fail
        self.error = error
        self.sent: List[Tuple[str, str]] = []
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True

    async def send(self, to: str, body: str) -> SendResult:
        if self.error is not None:
            raise self.error
        if self.fail:
            return SendResult(success=False, provider=self.name, error_message="rejected")
        self.sent.append((to, body))
        return SendResult(success=True, provider=self.name, provider_message_id=f"msg-{len(self.sent)}")

    def last_code(self) -> str:
        """The 6-digit code in the most recent message."""
        assert self.sent, "no message sent"
        match = re.search(r"\b(\d{6})\b", self.sent[-1][1])
        assert match, self.sent[-1][1]
        return match.group(1)


class DeletableUserStore(InMemoryUserStore):
    """In-memory user store that can lose users mid-flow."""

    async def delete_by_phone(self, phone: str) -> int:
        doomed = [uid for uid, user in self._users.items() if user.phone == phone]
        for uid in doomed:
            del self._users[uid]
        return len(doomed)


def wrong_code(code: str) -> str:
    """A well-formed code different from ``code``."""
    return "111111" if code != "111111" else "222222"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def sms_provider() -> RecordingSmsProvider:
    return RecordingSmsProvider()


@pytest.fixture
def otp_store() -> InMemoryOtpStore:
    return InMemoryOtpStore()


@pytest_asyncio.fixture
async def user_store(hasher) -> DeletableUserStore:
    store = DeletableUserStore()
    await store.insert_user(EMAIL, await hasher.hash(PASSWORD), "Asha", PHONE)
    return store


@pytest.fixture
def otp_config() -> OTPConfig:
    return OTPConfig()


@pytest.fixture
def manager(otp_store, user_store, sms_provider, otp_config, clock) -> OtpLifecycleManager:
    return OtpLifecycleManager(
        store=otp_store,
        user_store=user_store,
        sms_sender=SmsSender(sms_provider, timeout_seconds=1.0),
        hash_secret=HASH_SECRET,
        config=otp_config,
        clock=clock,
    )
