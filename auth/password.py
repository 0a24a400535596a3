"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    # bcrypt only ever reads the first 72 bytes; newer bindings raise instead
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except (ValueError, TypeError):
        logger.warning("bcrypt could not compare the password against the stored hash")
        return False


class PasswordHasher:
    """
    Async front for the bcrypt primitives.

    Both operations are slow on purpose, so they run on a worker thread
    (bcrypt releases the GIL) and never stall the event loop.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(hash_password, password, self.rounds)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(verify_password, password, password_hash)

    async def dummy_hash(self) -> str:
        """A throwaway hash at the same cost, for checks against unknown users."""
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash("dummy-password-for-timing")
        return self._dummy_hash
