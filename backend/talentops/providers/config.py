"""Provider configuration management.

Selects and configures the identity, notification and extraction
collaborators. Values come from environment variables via from_env().
"""

import os
from dataclasses import dataclass


@dataclass
class ProviderConfig:
    """Centralized provider configuration.

    Attributes:
        identity_provider: "http" or "mock".
        notification_provider: "resend" or "mock".
        extraction_provider: "http" or "mock".
        identity_api_url: Base URL of the identity provisioning service.
        identity_api_key: Bearer token for the identity service.
        resend_api_key: Resend API key for welcome emails.
        email_from: Sender address for welcome emails.
        login_url: Sign-in URL included in welcome emails.
        extraction_api_url: Base URL of the profile extraction service.
        extraction_api_key: Bearer token for the extraction service.
        request_timeout_seconds: Per-request HTTP timeout.
        max_retries: Max retry attempts for transient errors.
        retry_base_delay_ms: Base delay for exponential backoff.
        retry_max_delay_ms: Max delay cap for exponential backoff.
    """

    # Provider selection
    identity_provider: str = "mock"
    notification_provider: str = "mock"
    extraction_provider: str = "mock"

    # Endpoints and credentials (loaded from environment)
    identity_api_url: str = "http://localhost:8080"
    identity_api_key: str | None = None
    resend_api_key: str | None = None
    email_from: str = "onboarding@talentops.local"
    login_url: str = "http://localhost:3000/login"
    extraction_api_url: str = "http://localhost:8090"
    extraction_api_key: str | None = None

    request_timeout_seconds: float = 10.0

    # Retry policy
    max_retries: int = 3
    retry_base_delay_ms: int = 500
    retry_max_delay_ms: int = 10000

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Load configuration from environment variables.

        Returns:
            ProviderConfig instance with values from environment.
        """
        return cls(
            identity_provider=os.getenv("IDENTITY_PROVIDER", "mock"),
            notification_provider=os.getenv("NOTIFICATION_PROVIDER", "mock"),
            extraction_provider=os.getenv("EXTRACTION_PROVIDER", "mock"),
            identity_api_url=os.getenv("IDENTITY_API_URL", "http://localhost:8080"),
            identity_api_key=os.getenv("IDENTITY_API_KEY"),
            resend_api_key=os.getenv("RESEND_API_KEY"),
            email_from=os.getenv("EMAIL_FROM", "onboarding@talentops.local"),
            login_url=os.getenv("LOGIN_URL", "http://localhost:3000/login"),
            extraction_api_url=os.getenv(
                "EXTRACTION_API_URL", "http://localhost:8090"
            ),
            extraction_api_key=os.getenv("EXTRACTION_API_KEY"),
            request_timeout_seconds=float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "10")),
            max_retries=int(os.getenv("PROVIDER_MAX_RETRIES", "3")),
        )
