"""Application configuration loaded from environment variables.

Settings for the database, the HTTP API and onboarding policy knobs.
Uses pydantic-settings for validation and .env file support. Provider
(collaborator) settings live in talentops.providers.config.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "talentops_dev_password"  # nosec B105

# Absolute floor for the temporary secret length policy
_MIN_SECRET_LENGTH_FLOOR = 8


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "talentops"
    database_user: str = "talentops_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # Candidate store backend: "postgres" (SQLAlchemy) or "memory" (local demo)
    candidate_store: Literal["postgres", "memory"] = "postgres"

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS: default allows the console dev server
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Onboarding policy
    # Temporary secrets shorter than this are accepted with a warning
    min_temporary_secret_length: int = 12

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate configuration invariants.

        Checks:
        - Temporary secret length policy is not below the absolute floor
        - CORS must not use wildcard origin (incompatible with credentials)
        - Database password must not be the default in production
        """
        if self.min_temporary_secret_length < _MIN_SECRET_LENGTH_FLOOR:
            msg = (
                "MIN_TEMPORARY_SECRET_LENGTH must be at least "
                f"{_MIN_SECRET_LENGTH_FLOOR}. Got: {self.min_temporary_secret_length}"
            )
            raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "The console sends credentials, which are incompatible with "
                "wildcard CORS origins."
            )
            raise ValueError(msg)

        if (
            self.environment == "production"
            and self.database_password == _INSECURE_DEFAULT_PASSWORD
        ):
            msg = (
                "Cannot use default database password in production. "
                "Set DATABASE_PASSWORD environment variable to a secure value."
            )
            raise ValueError(msg)

        return self


settings = Settings()
