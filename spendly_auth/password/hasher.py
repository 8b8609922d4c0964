"""
Password Hasher
===============
Argon2id hashing with verification of legacy bcrypt hashes.

Accounts created before the move to Argon2id hold bcrypt hashes
(``$2a$``/``$2b$``/``$2y$``). They still verify, and ``needs_rehash`` reports
them so login can upgrade them in place.
"""

import asyncio
from functools import partial

import bcrypt
import structlog
from argon2 import PasswordHasher as Argon2Hasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

logger = structlog.get_logger(__name__)

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


class PasswordHasher:
    """
    Async-safe password hashing. Hashing work runs in the default executor.

    Defaults take roughly 300ms per hash on a typical server.
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,  # 64MB
        parallelism: int = 4,
        hash_len: int = 32,
        salt_len: int = 16,
    ):
        self._argon2 = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=hash_len,
            salt_len=salt_len,
            type=Type.ID,
        )

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    def hash_sync(self, password: str) -> str:
        if not password:
            raise ValueError("Password cannot be empty")
        return self._argon2.hash(password)

    def verify_sync(self, password: str, digest: str) -> bool:
        if not password or not digest:
            return False

        if digest.startswith("$argon2"):
            try:
                return self._argon2.verify(digest, password)
            except (VerifyMismatchError, VerificationError, InvalidHashError):
                return False

        if digest.startswith(BCRYPT_PREFIXES):
            try:
                return bcrypt.checkpw(password.encode("utf-8"), digest.encode("utf-8"))
            except ValueError:
                logger.warning("bcrypt_hash_malformed")
                return False

        return False

    def needs_rehash(self, digest: str) -> bool:
        """True for bcrypt hashes, outdated Argon2 parameters and unknown formats."""
        if not digest or digest.startswith(BCRYPT_PREFIXES):
            return True
        if digest.startswith("$argon2"):
            try:
                return self._argon2.check_needs_rehash(digest)
            except InvalidHashError:
                return True
        return True

    async def hash(self, password: str) -> str:
        return await self._run(self.hash_sync, password)

    async def verify(self, password: str, digest: str) -> bool:
        return await self._run(self.verify_sync, password, digest)
