"""Provider factory functions.

Singleton instances per collaborator, built from ProviderConfig on first use.
"""

from talentops.providers.config import ProviderConfig
from talentops.providers.extraction.base import ExtractionProvider
from talentops.providers.extraction.http_adapter import HttpExtractionProvider
from talentops.providers.extraction.mock_adapter import MockExtractionProvider
from talentops.providers.identity.base import IdentityProvider
from talentops.providers.identity.http_adapter import HttpIdentityProvider
from talentops.providers.identity.mock_adapter import MockIdentityProvider
from talentops.providers.notification.base import NotificationProvider
from talentops.providers.notification.mock_adapter import MockNotificationProvider
from talentops.providers.notification.resend_adapter import (
    ResendNotificationProvider,
)

_provider_config: ProviderConfig | None = None
_identity_provider: IdentityProvider | None = None
_notification_provider: NotificationProvider | None = None
_extraction_provider: ExtractionProvider | None = None


def get_provider_config() -> ProviderConfig:
    """Get or load the provider configuration singleton."""
    global _provider_config

    if _provider_config is None:
        _provider_config = ProviderConfig.from_env()
    return _provider_config


def get_identity_provider(config: ProviderConfig | None = None) -> IdentityProvider:
    """Get or create the identity provider singleton.

    Args:
        config: Optional provider configuration. If None and no provider
            exists, loads from environment.

    Returns:
        IdentityProvider instance.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    global _identity_provider

    if _identity_provider is None:
        if config is None:
            config = get_provider_config()

        if config.identity_provider == "http":
            _identity_provider = HttpIdentityProvider(config)
        elif config.identity_provider == "mock":
            _identity_provider = MockIdentityProvider()
        else:
            raise ValueError(f"Unknown identity provider: {config.identity_provider}")

    return _identity_provider


def get_notification_provider(
    config: ProviderConfig | None = None,
) -> NotificationProvider:
    """Get or create the notification provider singleton.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    global _notification_provider

    if _notification_provider is None:
        if config is None:
            config = get_provider_config()

        if config.notification_provider == "resend":
            _notification_provider = ResendNotificationProvider(config)
        elif config.notification_provider == "mock":
            _notification_provider = MockNotificationProvider()
        else:
            raise ValueError(
                f"Unknown notification provider: {config.notification_provider}"
            )

    return _notification_provider


def get_extraction_provider(
    config: ProviderConfig | None = None,
) -> ExtractionProvider:
    """Get or create the extraction provider singleton.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    global _extraction_provider

    if _extraction_provider is None:
        if config is None:
            config = get_provider_config()

        if config.extraction_provider == "http":
            _extraction_provider = HttpExtractionProvider(config)
        elif config.extraction_provider == "mock":
            _extraction_provider = MockExtractionProvider()
        else:
            raise ValueError(
                f"Unknown extraction provider: {config.extraction_provider}"
            )

    return _extraction_provider


def reset_providers() -> None:
    """Reset provider singletons.

    Used in tests to ensure isolation between test cases.
    """
    global _provider_config, _identity_provider
    global _notification_provider, _extraction_provider
    _provider_config = None
    _identity_provider = None
    _notification_provider = None
    _extraction_provider = None
