"""
Tests for OTP stores
====================
In-memory store, per-key locking and the Redis store.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from spendly_auth.exceptions import StoreError
from spendly_auth.otp import InMemoryOtpStore, KeyedLock, OTPConfig, OtpRecord, RedisOtpStore

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_record(phone="9876543210", **overrides) -> OtpRecord:
    fields = dict(
        phone=phone,
        hashed_code="digest",
        salt="salt",
        owner_id=1,
        created_at=NOW,
        expires_at=NOW + timedelta(minutes=5),
        sent_at=NOW,
    )
    fields.update(overrides)
    return OtpRecord(**fields)


class TestOtpRecord:

    def test_dict_round_trip_keeps_timezone(self):
        record = make_record(verified=True, verified_at=NOW + timedelta(seconds=30), attempts=2)

        restored = OtpRecord.from_dict(json.loads(json.dumps(record.to_dict())))

        assert restored == record

    def test_from_dict_tolerates_missing_sent_at(self):
        data = make_record().to_dict()
        del data["sent_at"]

        record = OtpRecord.from_dict(data)

        assert record.sent_at is None
        assert record.cooldown_anchor() == NOW

    def test_mark_verified_is_monotonic(self):
        record = make_record()
        record.mark_verified(NOW)
        record.mark_verified(NOW + timedelta(minutes=1))

        assert record.verified is True
        assert record.verified_at == NOW

    def test_is_stale(self):
        config = OTPConfig()
        record = make_record()

        assert record.is_stale(NOW + timedelta(minutes=4), config) is False
        assert record.is_stale(NOW + timedelta(minutes=6), config) is True

        record.mark_verified(NOW + timedelta(minutes=4))
        assert record.is_stale(NOW + timedelta(minutes=6), config) is False
        assert record.is_stale(NOW + timedelta(minutes=15), config) is True


class TestKeyedLock:

    @pytest.mark.asyncio
    async def test_serializes_same_key(self):
        locks = KeyedLock()
        order = []

        async def worker(name):
            async with locks.acquire("a"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("one"), worker("two"))

        assert order in (
            ["one-in", "one-out", "two-in", "two-out"],
            ["two-in", "two-out", "one-in", "one-out"],
        )

    @pytest.mark.asyncio
    async def test_different_keys_do_not_block(self):
        locks = KeyedLock()

        async with locks.acquire("a"):
            await asyncio.wait_for(self._enter(locks, "b"), timeout=1)

    async def _enter(self, locks, key):
        async with locks.acquire(key):
            return True

    @pytest.mark.asyncio
    async def test_locks_released_after_use(self):
        """The registry should not keep a lock per phone ever seen."""
        locks = KeyedLock()

        for key in ("a", "b", "c"):
            async with locks.acquire(key):
                assert len(locks) >= 1

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_released_on_error(self):
        locks = KeyedLock()

        with pytest.raises(RuntimeError):
            async with locks.acquire("a"):
                raise RuntimeError("boom")

        assert len(locks) == 0


class TestInMemoryOtpStore:

    @pytest.mark.asyncio
    async def test_get_set_delete(self):
        store = InMemoryOtpStore()
        record = make_record()

        assert await store.get(record.phone) is None
        await store.set(record)
        assert await store.get(record.phone) == record
        await store.delete(record.phone)
        assert await store.get(record.phone) is None
        await store.delete(record.phone)

    @pytest.mark.asyncio
    async def test_purge_stale(self):
        store = InMemoryOtpStore()
        await store.set(make_record("9000000001"))
        await store.set(make_record("9000000002", expires_at=NOW + timedelta(hours=1)))

        removed = await store.purge_stale(NOW + timedelta(minutes=10), OTPConfig())

        assert removed == 1
        assert await store.get("9000000001") is None
        assert await store.get("9000000002") is not None


class TestRedisOtpStore:
    """Tests for the Redis store against a mocked client."""

    def _store(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=None)
        client.set = AsyncMock()
        client.delete = AsyncMock()
        client.ping = AsyncMock(return_value=True)
        client.aclose = AsyncMock()
        return RedisOtpStore(client, ttl_seconds=900), client

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self):
        store, client = self._store()
        record = make_record()

        await store.set(record)

        key, payload = client.set.call_args.args
        assert key == "otp:record:9876543210"
        assert json.loads(payload)["hashed_code"] == "digest"
        assert client.set.call_args.kwargs["ex"] == 900

    @pytest.mark.asyncio
    async def test_get(self):
        store, client = self._store()
        record = make_record()
        client.get.return_value = json.dumps(record.to_dict())

        assert await store.get(record.phone) == record
        client.get.assert_awaited_with("otp:record:9876543210")

    @pytest.mark.asyncio
    async def test_get_missing(self):
        store, _ = self._store()

        assert await store.get("9876543210") is None

    @pytest.mark.asyncio
    async def test_corrupt_record(self):
        store, client = self._store()
        client.get.return_value = "{not json"

        with pytest.raises(StoreError):
            await store.get("9876543210")

    @pytest.mark.asyncio
    async def test_delete_and_close(self):
        store, client = self._store()

        await store.delete("9876543210")
        assert await store.ping() is True
        await store.close()

        client.delete.assert_awaited_with("otp:record:9876543210")
        client.aclose.assert_awaited_once()

    def test_lock_key(self):
        store, client = self._store()

        store.lock("9876543210")

        client.lock.assert_called_once_with(
            "otp:lock:9876543210",
            timeout=30.0,
            blocking_timeout=15.0,
        )
