"""
Credential service — register new users and check login attempts.

Expected outcomes come back as values: ``register`` returns a
``UserSummary`` or ``UsernameTaken``, ``authenticate`` returns an
``AuthOutcome``.  Bad input, store failures and hashing failures are raised.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Union

from auth.password import PasswordHasher
from config.settings import USERNAME_COLUMN_WIDTH, Settings
from database.users import ConstraintViolation, StoreError, UserStore

logger = logging.getLogger(__name__)


# ── Results ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UserSummary:
    id: int
    username: str


@dataclass(frozen=True)
class UsernameTaken:
    username: str


class AuthOutcome(str, enum.Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# ── Errors ──────────────────────────────────────────────────────────────


class CredentialError(Exception):
    pass


class InvalidCredentialInput(CredentialError):
    """Missing or out-of-policy username/password; nothing was sent to the store."""


class CredentialStoreError(CredentialError):
    """
    The store or the hashing primitive failed.

    Details are logged where the failure is caught, never carried in the message.
    """

    def __init__(self) -> None:
        super().__init__("internal server error")


# ── Policy ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CredentialPolicy:
    username_min_length: int = 1
    username_max_length: int = USERNAME_COLUMN_WIDTH
    password_min_length: int = 1
    password_max_length: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialPolicy":
        return cls(
            username_min_length=settings.username_min_length,
            username_max_length=settings.username_max_length,
            password_min_length=settings.password_min_length,
            password_max_length=settings.password_max_length,
        )

    def check(self, username: Optional[str], password: Optional[str]) -> None:
        if not username or not password:
            raise InvalidCredentialInput("username and password are required")
        if not self.username_min_length <= len(username) <= self.username_max_length:
            raise InvalidCredentialInput(
                f"username must be {self.username_min_length}-"
                f"{self.username_max_length} characters"
            )
        if len(password) < self.password_min_length:
            raise InvalidCredentialInput(
                f"password must be at least {self.password_min_length} characters"
            )
        if self.password_max_length is not None and len(password) > self.password_max_length:
            raise InvalidCredentialInput(
                f"password must be at most {self.password_max_length} characters"
            )


# ── Service ─────────────────────────────────────────────────────────────


class CredentialService:
    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        policy: Optional[CredentialPolicy] = None,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.policy = policy or CredentialPolicy()

    async def register(
        self, username: Optional[str], password: Optional[str]
    ) -> Union[UserSummary, UsernameTaken]:
        """Hash the password and insert one user row."""
        self.policy.check(username, password)

        try:
            password_hash = await self.hasher.hash(password)
        except Exception:
            logger.exception("Password hashing failed for %r", username)
            raise CredentialStoreError() from None

        try:
            inserted = await self.store.insert_user(username, password_hash)
        except StoreError:
            logger.exception("Registration failed for %r", username)
            raise CredentialStoreError() from None

        if isinstance(inserted, ConstraintViolation):
            logger.info("Registration refused, username %r already exists", username)
            return UsernameTaken(username=username)

        logger.info("Registered user %s (id=%s)", inserted.username, inserted.id)
        return UserSummary(id=inserted.id, username=inserted.username)

    async def authenticate(
        self, username: Optional[str], password: Optional[str]
    ) -> AuthOutcome:
        """
        Check a login attempt.

        An unknown username still pays for one bcrypt verification so it
        cannot be told apart from a wrong password by timing.
        """
        if not username or not password:
            raise InvalidCredentialInput("username and password are required")

        try:
            user = await self.store.find_by_username(username)
        except StoreError:
            logger.exception("Login lookup failed for %r", username)
            raise CredentialStoreError() from None

        try:
            if user is None:
                await self.hasher.verify(password, await self.hasher.dummy_hash())
                matched = False
            else:
                matched = await self.hasher.verify(password, user.password_hash)
        except Exception:
            logger.exception("Password verification failed for %r", username)
            raise CredentialStoreError() from None

        if not matched:
            logger.debug("Login rejected for %r", username)
            return AuthOutcome.REJECTED

        logger.info("Login: %s (id=%s)", user.username, user.id)
        return AuthOutcome.ACCEPTED
