"""
SQL User Store
==============
UserStore backed by SQLAlchemy (async).
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import DateTime, Float, Integer, String, or_, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import Mapped, mapped_column

from spendly_auth.database import Base, create_session_factory, create_tables
from spendly_auth.exceptions import ConflictError, StoreError

from .models import UserRecord
from .store import UserStore

logger = structlog.get_logger(__name__)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), default="")
    phone: Mapped[Optional[str]] = mapped_column(String(20), unique=True, index=True)
    salary: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<User {self.id}>"

    def to_record(self) -> UserRecord:
        return UserRecord(
            id=self.id,
            email=self.email,
            password_hash=self.password,
            name=self.name or "",
            phone=self.phone or "",
            salary=self.salary,
            created_at=self.created_at,
        )


class SqlUserStore(UserStore):
    """
    User store on a relational database.

    Driver errors are logged and re-raised as StoreError so no backend
    detail reaches a client.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessions = create_session_factory(engine)

    async def create_schema(self) -> None:
        await create_tables(self.engine)

    async def _first(self, statement) -> Optional[UserRecord]:
        try:
            async with self._sessions() as session:
                result = await session.execute(statement)
                user = result.scalars().first()
                return user.to_record() if user else None
        except SQLAlchemyError as e:
            logger.error("user_lookup_failed", error=str(e))
            raise StoreError() from e

    async def find_by_phone_or_email(self, phone: str, email: str) -> Optional[UserRecord]:
        return await self._first(
            select(User).where(or_(User.email == email, User.phone == phone))
        )

    async def find_by_phone(self, phone: str) -> Optional[UserRecord]:
        return await self._first(select(User).where(User.phone == phone))

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return await self._first(select(User).where(User.email == email))

    async def update_password_by_phone(self, phone: str, password_hash: str) -> int:
        try:
            async with self._sessions() as session:
                result = await session.execute(
                    update(User).where(User.phone == phone).values(password=password_hash)
                )
                await session.commit()
                return result.rowcount
        except SQLAlchemyError as e:
            logger.error("password_update_failed", error=str(e))
            raise StoreError() from e

    async def insert_user(self, email: str, password_hash: str, name: str, phone: str) -> int:
        user = User(email=email, password=password_hash, name=name or "", phone=phone)
        try:
            async with self._sessions() as session:
                session.add(user)
                await session.commit()
                return user.id
        except IntegrityError as e:
            raise ConflictError() from e
        except SQLAlchemyError as e:
            logger.error("user_insert_failed", error=str(e))
            raise StoreError() from e

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("database_ping_failed", error=str(e))
            return False

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("database_engine_closed")
