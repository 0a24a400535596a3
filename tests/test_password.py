"""
Tests for bcrypt hashing and verification.
"""

import logging

import pytest

from auth.password import (
    BCRYPT_MAX_BYTES,
    DEFAULT_ROUNDS,
    PasswordHasher,
    hash_password,
    verify_password,
)


class TestHashPassword:
    def test_hash_is_not_the_plaintext(self):
        hashed = hash_password("correct-horse", rounds=4)
        assert hashed != "correct-horse"
        assert hashed.startswith("$2b$04$")
        assert len(hashed) == 60

    def test_same_password_hashes_differently(self):
        first = hash_password("correct-horse", rounds=4)
        second = hash_password("correct-horse", rounds=4)
        assert first != second
        assert verify_password("correct-horse", first)
        assert verify_password("correct-horse", second)

    def test_wrong_password_does_not_verify(self):
        hashed = hash_password("correct-horse", rounds=4)
        assert verify_password("wrong", hashed) is False

    def test_default_cost_is_ten_rounds(self):
        assert DEFAULT_ROUNDS == 10
        assert hash_password("x").startswith("$2b$10$")

    def test_malformed_hash_is_rejected_not_raised(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_compare_failure_warning_does_not_blame_the_hash(self, caplog):
        with caplog.at_level(logging.WARNING, logger="auth.password"):
            assert verify_password("anything", "not-a-bcrypt-hash") is False
        assert "bcrypt could not compare" in caplog.text
        assert "not a valid bcrypt hash" not in caplog.text

    def test_long_password_uses_first_72_bytes(self):
        long_password = "a" * (BCRYPT_MAX_BYTES + 20)
        hashed = hash_password(long_password, rounds=4)
        assert verify_password(long_password, hashed)
        assert verify_password("a" * BCRYPT_MAX_BYTES, hashed)

    def test_unicode_password(self):
        hashed = hash_password("pässwörd-密码", rounds=4)
        assert verify_password("pässwörd-密码", hashed)
        assert not verify_password("passwort-密码", hashed)


class TestPasswordHasher:
    @pytest.mark.asyncio
    async def test_async_round_trip(self):
        hasher = PasswordHasher(rounds=4)
        hashed = await hasher.hash("secret")
        assert await hasher.verify("secret", hashed) is True
        assert await hasher.verify("other", hashed) is False

    @pytest.mark.asyncio
    async def test_dummy_hash_is_cached_and_uses_same_cost(self):
        hasher = PasswordHasher(rounds=5)
        first = await hasher.dummy_hash()
        second = await hasher.dummy_hash()
        assert first is second
        assert first.startswith("$2b$05$")
