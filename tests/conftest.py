"""
Shared fixtures: an in-memory user store and a cheap password hasher.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Optional, Union

import pytest

from auth.credentials import CredentialService
from auth.password import PasswordHasher
from database.users import ConstraintViolation, StoreError, UserRecord

# bcrypt's minimum cost; production never goes below 10
TEST_ROUNDS = 4


class InMemoryUserStore:
    """Same interface as ``UserStore``; the lock stands in for the unique index."""

    def __init__(self) -> None:
        self.rows: Dict[str, UserRecord] = {}
        self.fail_with: Optional[Exception] = None
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def insert_user(
        self, username: str, password_hash: str
    ) -> Union[UserRecord, ConstraintViolation]:
        if self.fail_with is not None:
            raise StoreError("insert into users failed") from self.fail_with
        async with self._lock:
            await asyncio.sleep(0)
            if username in self.rows:
                return ConstraintViolation(constraint="users_username_key")
            record = UserRecord(
                id=self._next_id,
                username=username,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
            )
            self._next_id += 1
            self.rows[username] = record
            return record

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        if self.fail_with is not None:
            raise StoreError("lookup in users failed") from self.fail_with
        return self.rows.get(username)


@pytest.fixture
def store():
    return InMemoryUserStore()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=TEST_ROUNDS)


@pytest.fixture
def service(store, hasher):
    return CredentialService(store=store, hasher=hasher)
