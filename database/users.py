"""
User store — the only code that talks to the ``users`` table.

Driver exceptions stop here: a uniqueness conflict comes back as a
``ConstraintViolation`` value, anything else is re-raised as ``StoreError``.
Each call opens its own session inside ``async with`` so the pooled
connection goes back to the pool on every exit path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.models import User

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
USERNAME_CONSTRAINT = "users_username_key"


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    password_hash: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ConstraintViolation:
    """An insert was refused by a uniqueness constraint."""

    constraint: str


class StoreError(Exception):
    """The store could not complete a read or write."""


def _constraint_name(exc: IntegrityError) -> str:
    # asyncpg keeps the server-side constraint name on the wrapped exception
    cause = getattr(exc.orig, "__cause__", None)
    return getattr(cause, "constraint_name", None) or USERNAME_CONSTRAINT


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    # drivers without SQLSTATE (sqlite) only report it in the message
    return "unique" in str(orig).lower()


class UserStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert_user(
        self, username: str, password_hash: str
    ) -> Union[UserRecord, ConstraintViolation]:
        """Insert one row; the store's unique index decides duplicates."""
        stmt = (
            insert(User)
            .values(username=username, password_hash=password_hash)
            .returning(User.id, User.username, User.password_hash, User.created_at)
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = (await session.execute(stmt)).one()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                logger.debug("Insert refused by unique constraint on users.username")
                return ConstraintViolation(constraint=_constraint_name(exc))
            raise StoreError("insert into users failed") from exc
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError("insert into users failed") from exc

        return UserRecord(
            id=row.id,
            username=row.username,
            password_hash=row.password_hash,
            created_at=row.created_at,
        )

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(User).where(User.username == username)
                )
                user = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError("lookup in users failed") from exc

        if user is None:
            return None
        return UserRecord(
            id=user.id,
            username=user.username,
            password_hash=user.password_hash,
            created_at=user.created_at,
        )
