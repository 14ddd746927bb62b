"""Tests for application configuration.

Settings for database, API and onboarding policy. Tests cover defaults,
env var loading, and production security validation.
"""

import pytest
from pydantic import ValidationError

from talentops.core.config import _INSECURE_DEFAULT_PASSWORD, Settings

_SECURE_DB_PASSWORD = "my-secure-production-password-123!"
_PRODUCTION = "production"


class TestDefaults:
    """Default values."""

    def test_database_url_uses_asyncpg(self) -> None:
        s = Settings(database_host="db", database_port=6543, database_name="hr")

        assert s.database_url.startswith("postgresql+asyncpg://")
        assert s.database_url.endswith("@db:6543/hr")

    def test_secret_length_policy_default(self) -> None:
        assert Settings().min_temporary_secret_length == 12


class TestEnvLoading:
    """Values from environment variables."""

    def test_reads_candidate_store(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CANDIDATE_STORE", "memory")

        assert Settings().candidate_store == "memory"

    def test_rejects_unknown_candidate_store(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CANDIDATE_STORE", "redis")

        with pytest.raises(ValidationError):
            Settings()


class TestProductionSecurityValidation:
    """Tests for configuration invariants."""

    def test_allows_default_password_in_development(self) -> None:
        s = Settings(
            environment="development",
            database_password=_INSECURE_DEFAULT_PASSWORD,
        )
        assert s.database_password == _INSECURE_DEFAULT_PASSWORD

    def test_rejects_default_password_in_production(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Settings(
                environment=_PRODUCTION,
                database_password=_INSECURE_DEFAULT_PASSWORD,
            )

        assert "Cannot use default database password in production" in str(
            exc_info.value
        )

    def test_allows_custom_password_in_production(self) -> None:
        s = Settings(environment=_PRODUCTION, database_password=_SECURE_DB_PASSWORD)

        assert s.database_password == _SECURE_DB_PASSWORD

    def test_rejects_wildcard_cors_origin(self) -> None:
        with pytest.raises(ValidationError, match="wildcard"):
            Settings(allowed_origins=["*"])

    def test_rejects_secret_length_below_floor(self) -> None:
        with pytest.raises(ValidationError, match="MIN_TEMPORARY_SECRET_LENGTH"):
            Settings(min_temporary_secret_length=4)
