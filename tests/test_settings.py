"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from auth.credentials import CredentialPolicy
from config.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)
        assert settings.bcrypt_rounds == 10
        assert settings.username_max_length == 50
        assert settings.port == 3000
        assert settings.database_url.startswith("postgresql+asyncpg://")

    @pytest.mark.parametrize(
        "url",
        ["postgres://u:p@db:5432/app", "postgresql://u:p@db:5432/app"],
    )
    def test_platform_urls_use_asyncpg(self, monkeypatch, url):
        monkeypatch.setenv("DATABASE_URL", url)
        settings = Settings(_env_file=None)
        assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/app"

    def test_rounds_below_ten_refused(self, monkeypatch):
        monkeypatch.setenv("BCRYPT_ROUNDS", "9")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_username_limit_cannot_exceed_column(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, username_max_length=51)

    def test_inverted_password_bounds_refused(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, password_min_length=10, password_max_length=8)

    def test_policy_from_settings(self):
        settings = Settings(_env_file=None, username_min_length=3, password_min_length=8)
        policy = CredentialPolicy.from_settings(settings)
        assert policy == CredentialPolicy(
            username_min_length=3,
            username_max_length=50,
            password_min_length=8,
            password_max_length=None,
        )
