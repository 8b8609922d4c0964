"""
User Store
==========
Interface to persistent user records, plus an in-memory implementation.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, Optional

from spendly_auth.exceptions import ConflictError

from .models import UserRecord


class UserStore(ABC):
    """Lookup and update of user records by phone or email."""

    @abstractmethod
    async def find_by_phone_or_email(self, phone: str, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def find_by_phone(self, phone: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def update_password_by_phone(self, phone: str, password_hash: str) -> int:
        """Returns the number of rows changed."""

    @abstractmethod
    async def insert_user(self, email: str, password_hash: str, name: str, phone: str) -> int:
        """Insert a user and return its id. Raises ConflictError on duplicates."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemoryUserStore(UserStore):
    """Dictionary-backed user store for development and tests."""

    def __init__(self):
        self._users: Dict[int, UserRecord] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def find_by_phone_or_email(self, phone: str, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.phone == phone or user.email == email:
                return replace(user)
        return None

    async def find_by_phone(self, phone: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.phone == phone:
                return replace(user)
        return None

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.email == email:
                return replace(user)
        return None

    async def update_password_by_phone(self, phone: str, password_hash: str) -> int:
        changed = 0
        for user in self._users.values():
            if user.phone == phone:
                user.password_hash = password_hash
                changed += 1
        return changed

    async def insert_user(self, email: str, password_hash: str, name: str, phone: str) -> int:
        async with self._lock:
            if await self.find_by_phone_or_email(phone, email) is not None:
                raise ConflictError()
            user_id = self._next_id
            self._next_id += 1
            self._users[user_id] = UserRecord(
                id=user_id,
                email=email,
                password_hash=password_hash,
                name=name or "",
                phone=phone,
            )
            return user_id
